"""Charge intent endpoint tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from app.integrations import StripeClientError

pytestmark = pytest.mark.asyncio


async def test_create_intent_with_code(app_context) -> None:
    client = app_context["client"]
    stripe = app_context["stripe"]

    response = await client.post(
        "/api/v1/charge-intent",
        json={"code": "premium", "email": "buyer@example.com"},
    )

    assert response.status_code == 200
    assert response.json() == {"clientSecret": "pi_test_1_secret_abc"}
    call = stripe.create_calls[0]
    assert call["amount"] == Decimal("15.00")
    assert call["email"] == "buyer@example.com"
    assert call["metadata"] == {
        "email": "buyer@example.com",
        "code": "premium",
        "amount": "15.00",
    }
    assert stripe.intents["pi_test_1"].amount == 1500


async def test_create_intent_explicit_amount_wins(app_context) -> None:
    client = app_context["client"]
    stripe = app_context["stripe"]

    response = await client.post(
        "/api/v1/charge-intent",
        json={"amount": "12.34", "code": "basic", "code1": "A1", "code2": "B2"},
    )

    assert response.status_code == 200
    call = stripe.create_calls[0]
    assert call["amount"] == Decimal("12.34")
    assert call["metadata"]["code1"] == "A1"
    assert call["metadata"]["code2"] == "B2"
    assert stripe.intents["pi_test_1"].amount == 1234


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({}, "Either an amount or a code is required"),
        ({"amount": "0.49"}, "Amount must be at least $0.50"),
        ({"amount": "0.499"}, "Amount must be at least $0.50"),
        ({"amount": "1e30"}, "Amount must be at most $999,999.99"),
        ({"amount": "1000000"}, "Amount must be at most $999,999.99"),
        ({"amount": "1e30", "code": "basic"}, "Amount must be at most $999,999.99"),
    ],
)
async def test_create_intent_rejects_invalid_request(app_context, body, message) -> None:
    client = app_context["client"]
    stripe = app_context["stripe"]

    response = await client.post("/api/v1/charge-intent", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": message}
    assert stripe.create_calls == []


async def test_create_intent_rejects_malformed_amount(app_context) -> None:
    client = app_context["client"]
    response = await client.post("/api/v1/charge-intent", json={"amount": "lots"})
    assert response.status_code == 400
    assert "error" in response.json()
    assert app_context["stripe"].create_calls == []


async def test_create_intent_provider_error(app_context) -> None:
    client = app_context["client"]
    stripe = app_context["stripe"]
    stripe.error = StripeClientError("Your card was declined.")

    response = await client.post("/api/v1/charge-intent", json={"code": "pro"})

    assert response.status_code == 400
    assert response.json() == {"error": "Your card was declined."}


async def test_retrieve_intent(app_context) -> None:
    client = app_context["client"]
    stripe = app_context["stripe"]
    await client.post("/api/v1/charge-intent", json={"code": "basic"})
    stripe.intents["pi_test_1"].status = "succeeded"
    stripe.intents["pi_test_1"].card_brand = "visa"
    stripe.intents["pi_test_1"].card_last4 = "4242"

    response = await client.get("/api/v1/charge-intent", params={"id": "pi_test_1"})

    assert response.status_code == 200
    assert response.json() == {
        "paymentIntent": {
            "id": "pi_test_1",
            "amount": 500,
            "currency": "usd",
            "status": "succeeded",
            "cardBrand": "visa",
            "cardLast4": "4242",
        }
    }


async def test_retrieve_unknown_intent_returns_404(app_context) -> None:
    client = app_context["client"]
    response = await client.get("/api/v1/charge-intent", params={"id": "pi_missing"})
    assert response.status_code == 404
    assert response.json() == {"error": "Payment intent pi_missing not found"}


async def test_retrieve_requires_id(app_context) -> None:
    client = app_context["client"]
    response = await client.get("/api/v1/charge-intent")
    assert response.status_code == 400
    assert "error" in response.json()


async def test_create_intent_accepts_largest_amount(app_context) -> None:
    client = app_context["client"]
    stripe = app_context["stripe"]

    response = await client.post("/api/v1/charge-intent", json={"amount": "999999.99"})

    assert response.status_code == 200
    assert stripe.intents["pi_test_1"].amount == 99_999_999
