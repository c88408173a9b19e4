"""Durable record of confirmed transactions.

Every backend honours the same contract: ``append`` is idempotent on the
transaction id (a duplicate is a no-op reported as ``False``, never an error)
and ``list_all`` returns the full current set ordered by timestamp.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from abc import ABC, abstractmethod
from datetime import UTC
from pathlib import Path

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.errors import TransactionStoreError
from app.core.settings import StoreSettings
from app.db.base import Base
from app.db.session import build_engine, build_sessionmaker
from app.models import ConfirmedTransactionRecord
from app.schemas.transaction import ConfirmedTransaction

logger = logging.getLogger(__name__)

_TRANSACTIONS_ADAPTER = TypeAdapter(list[ConfirmedTransaction])


def _ordered(transactions: list[ConfirmedTransaction]) -> list[ConfirmedTransaction]:
    return sorted(transactions, key=lambda tx: tx.timestamp)


class TransactionStore(ABC):
    """Contract shared by all transaction store backends."""

    backend: str = "abstract"

    async def connect(self) -> None:
        """Acquire backing resources; called once at start-up."""

    async def close(self) -> None:
        """Release backing resources; called once at shutdown."""

    @abstractmethod
    async def append(self, transaction: ConfirmedTransaction) -> bool:
        """Record ``transaction``; return False if its id is already stored."""

    @abstractmethod
    async def list_all(self) -> list[ConfirmedTransaction]:
        """Return every stored transaction ordered by timestamp ascending."""


class MemoryTransactionStore(TransactionStore):
    """Process-local store, mainly for development and tests."""

    backend = "memory"

    def __init__(self) -> None:
        self._records: dict[str, ConfirmedTransaction] = {}
        self._lock = asyncio.Lock()

    async def append(self, transaction: ConfirmedTransaction) -> bool:
        async with self._lock:
            if transaction.id in self._records:
                return False
            self._records[transaction.id] = transaction
            return True

    async def list_all(self) -> list[ConfirmedTransaction]:
        return _ordered(list(self._records.values()))


class FileTransactionStore(TransactionStore):
    """Store backed by a single JSON array file.

    The in-memory mapping is updated before the file is rewritten, and each
    rewrite carries a generation number so an older snapshot can never
    overwrite a newer one. A caller cancelled mid-write (for example by a
    timeout) therefore leaves the record both in memory and, once the worker
    thread finishes, on disk.
    """

    backend = "file"

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._records: dict[str, ConfirmedTransaction] = {}
        self._lock = asyncio.Lock()
        self._disk_lock = threading.Lock()
        self._generation = 0
        self._disk_generation = 0

    @property
    def path(self) -> Path:
        return self._path

    async def connect(self) -> None:
        async with self._lock:
            loaded = await asyncio.to_thread(self._read)
            self._records = {tx.id: tx for tx in loaded}
        logger.info(
            "Loaded %d transactions from %s", len(self._records), self._path
        )

    def _read(self) -> list[ConfirmedTransaction]:
        if not self._path.exists():
            return []
        try:
            raw = self._path.read_bytes()
            if not raw.strip():
                return []
            return _TRANSACTIONS_ADAPTER.validate_json(raw)
        except (OSError, ValidationError) as exc:
            raise TransactionStoreError("load", str(exc)) from exc

    def _write(self, transactions: list[ConfirmedTransaction], generation: int) -> None:
        with self._disk_lock:
            if generation <= self._disk_generation:
                return
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_bytes(_TRANSACTIONS_ADAPTER.dump_json(transactions, indent=2))
            os.replace(tmp_path, self._path)
            self._disk_generation = generation

    def _log_write_failure(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Writing %s failed: %s", self._path, exc)

    async def append(self, transaction: ConfirmedTransaction) -> bool:
        async with self._lock:
            if transaction.id in self._records:
                return False
            self._records[transaction.id] = transaction
            self._generation += 1
            snapshot = _ordered(list(self._records.values()))
            write = asyncio.ensure_future(
                asyncio.to_thread(self._write, snapshot, self._generation)
            )
            write.add_done_callback(self._log_write_failure)
            try:
                # Cancellation stops the wait, not the write.
                await asyncio.shield(write)
            except OSError as exc:
                self._records.pop(transaction.id, None)
                raise TransactionStoreError(
                    "append", str(exc), transaction_id=transaction.id
                ) from exc
            return True

    async def list_all(self) -> list[ConfirmedTransaction]:
        return _ordered(list(self._records.values()))


class SqlTransactionStore(TransactionStore):
    """Database-backed store; the primary key on id enforces first-writer-wins."""

    backend = "database"

    def __init__(self, database_url: str, *, create_schema: bool = True) -> None:
        self._database_url = database_url
        self._create_schema = create_schema
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    async def connect(self) -> None:
        engine = build_engine(self._database_url)
        try:
            async with engine.begin() as connection:
                if self._create_schema:
                    await connection.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            await engine.dispose()
            raise TransactionStoreError("connect", str(exc)) from exc
        self._engine = engine
        self._sessionmaker = build_sessionmaker(engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise TransactionStoreError("session", "store is not connected")
        return self._sessionmaker

    @staticmethod
    async def _exists(session: AsyncSession, transaction_id: str) -> bool:
        try:
            found = await session.get(ConfirmedTransactionRecord, transaction_id)
        except SQLAlchemyError as exc:
            raise TransactionStoreError(
                "append", str(exc), transaction_id=transaction_id
            ) from exc
        return found is not None

    async def append(self, transaction: ConfirmedTransaction) -> bool:
        record = ConfirmedTransactionRecord(
            id=transaction.id,
            amount=transaction.amount,
            currency=transaction.currency,
            customer_email=transaction.customer_email,
            timestamp=transaction.timestamp,
            metadata_=dict(transaction.metadata),
        )
        async with self._sessions()() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if await self._exists(session, transaction.id):  # duplicate delivery
                    return False
                raise TransactionStoreError(
                    "append", str(exc.orig or exc), transaction_id=transaction.id
                ) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise TransactionStoreError(
                    "append", str(exc), transaction_id=transaction.id
                ) from exc
        return True

    async def list_all(self) -> list[ConfirmedTransaction]:
        stmt = select(ConfirmedTransactionRecord).order_by(
            ConfirmedTransactionRecord.timestamp, ConfirmedTransactionRecord.id
        )
        try:
            async with self._sessions()() as session:
                records = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            raise TransactionStoreError("list", str(exc)) from exc
        return [_from_record(record) for record in records]


def _from_record(record: ConfirmedTransactionRecord) -> ConfirmedTransaction:
    timestamp = record.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return ConfirmedTransaction(
        id=record.id,
        amount=record.amount,
        currency=record.currency,
        customer_email=record.customer_email,
        timestamp=timestamp,
        metadata=dict(record.metadata_ or {}),
    )


def build_transaction_store(settings: StoreSettings) -> TransactionStore:
    """Instantiate the backend named in ``settings`` without connecting it."""

    if settings.backend == "database":
        if not settings.database_url:
            raise TransactionStoreError(
                "configure", "database backend selected but no database URL is set"
            )
        return SqlTransactionStore(settings.database_url)
    if settings.backend == "memory":
        return MemoryTransactionStore()
    return FileTransactionStore(settings.transactions_file)


async def open_transaction_store(settings: StoreSettings) -> TransactionStore:
    """Build and connect the configured store, falling back to the file store."""

    try:
        store = build_transaction_store(settings)
        await store.connect()
        logger.info("Transaction store ready (backend=%s)", store.backend)
        return store
    except TransactionStoreError:
        if settings.backend != "database":
            raise
        logger.exception(
            "Database transaction store unavailable; falling back to %s",
            settings.transactions_file,
        )
    fallback = FileTransactionStore(settings.transactions_file)
    await fallback.connect()
    return fallback
