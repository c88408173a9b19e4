"""Pricing endpoint tests."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.asyncio


async def test_pricing_lookup_known_code(app_context) -> None:
    client = app_context["client"]
    response = await client.get("/api/v1/pricing", params={"code": "premium"})
    assert response.status_code == 200
    assert response.json() == {
        "code": "premium",
        "price": 15,
        "formatted_price": "$15.00",
    }


async def test_pricing_lookup_unknown_code_uses_default(app_context) -> None:
    client = app_context["client"]
    response = await client.get("/api/v1/pricing", params={"code": "mystery"})
    assert response.status_code == 200
    assert response.json()["formatted_price"] == "$10.00"
    assert response.json()["price"] == 10


async def test_pricing_requires_code(app_context) -> None:
    client = app_context["client"]
    response = await client.get("/api/v1/pricing")
    assert response.status_code == 400
    assert response.json() == {"error": "Code parameter is required"}
