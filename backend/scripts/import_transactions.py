"""Copy transactions from a JSON store file into the database store.

Safe to re-run: rows already present (same payment intent id) are skipped.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from app.core.config import get_settings
from app.core.errors import TransactionStoreError
from app.services.transaction_store import FileTransactionStore, SqlTransactionStore

LOGGER = logging.getLogger("import_transactions")


async def import_transactions(
    source: Path, database_url: str, *, dry_run: bool = False
) -> tuple[int, int]:
    """Return ``(created, skipped)`` counts for the import."""

    file_store = FileTransactionStore(source)
    await file_store.connect()
    transactions = await file_store.list_all()
    if dry_run:
        LOGGER.info("Dry run: %d transactions found in %s", len(transactions), source)
        return 0, 0

    db_store = SqlTransactionStore(database_url)
    await db_store.connect()
    created = skipped = 0
    try:
        for transaction in transactions:
            if await db_store.append(transaction):
                created += 1
            else:
                skipped += 1
    finally:
        await db_store.close()
    return created, skipped


def main() -> None:
    parser = argparse.ArgumentParser(description="Import file-backed transactions")
    parser.add_argument(
        "--source",
        type=Path,
        default=None,
        help="Path to the transactions JSON file (defaults to TRANSACTIONS_FILE)",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Target database URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Count rows without writing"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = get_settings()
    source = args.source or settings.transactions_file
    database_url = args.database_url or settings.resolved_database_url
    if not database_url:
        LOGGER.error("DATABASE_URL (or --database-url) is required")
        raise SystemExit(2)

    try:
        created, skipped = asyncio.run(
            import_transactions(source, database_url, dry_run=args.dry_run)
        )
    except TransactionStoreError as exc:
        LOGGER.error("Import failed: %s", exc)
        raise SystemExit(1) from exc

    LOGGER.info("Import completed: created=%s skipped=%s", created, skipped)


if __name__ == "__main__":
    main()
