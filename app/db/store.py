# app/db/store.py
"""
Ledger store: the only thing the billing core knows about the database.

A store wraps one connection for one unit of work. Statements run through
``execute``; multi-statement writes are bracketed with ``begin``/``commit``
(or the ``transaction()`` context manager) and rolled back on failure.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, OperationalError

from app.db.engine import get_engine
from app.errors import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass
class StoreResult:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    inserted_id: Optional[int] = None
    affected_rows: Optional[int] = None


class LedgerStore:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._conn: Optional[Connection] = None
        self._transaction = None

    def _connection(self) -> Connection:
        if self._conn is None:
            try:
                self._conn = self.engine.connect()
            except DBAPIError as exc:
                logger.error("Cannot reach billing database: %s", exc)
                raise StoreUnavailable("Billing database is unavailable") from exc
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def execute(self, statement, params=None) -> StoreResult:
        """
        Run one statement.

        A list of parameter dicts is sent as a single executemany batch.
        Outside an explicit transaction the statement is committed straight away.
        Operational failures of the backend surface as StoreUnavailable.
        """
        conn = self._connection()
        try:
            if params is None:
                result = conn.execute(statement)
            else:
                result = conn.execute(statement, params)
        except OperationalError as exc:
            if self._transaction is None:
                conn.rollback()
            logger.error("Billing database failed the statement: %s", exc)
            raise StoreUnavailable("Billing database is unavailable") from exc

        if result.returns_rows:
            outcome = StoreResult(rows=[dict(row) for row in result.mappings().all()])
        else:
            outcome = StoreResult(affected_rows=result.rowcount)
            if result.is_insert and not isinstance(params, list):
                pk = result.inserted_primary_key
                outcome.inserted_id = pk[0] if pk else None

        if self._transaction is None:
            conn.commit()
        return outcome

    def begin(self) -> None:
        if self._transaction is not None:
            raise RuntimeError("A transaction is already in progress on this store")
        conn = self._connection()
        if conn.in_transaction():
            # leftover autobegun read; nothing uncommitted can live here
            conn.rollback()
        self._transaction = conn.begin()
        logger.debug("Transaction started")

    def commit(self) -> None:
        if self._transaction is None:
            raise RuntimeError("No transaction in progress")
        transaction, self._transaction = self._transaction, None
        transaction.commit()
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        if self._transaction is None:
            return
        transaction, self._transaction = self._transaction, None
        transaction.rollback()
        logger.debug("Transaction rolled back")

    @contextmanager
    def transaction(self) -> Iterator["LedgerStore"]:
        self.begin()
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.commit()

    def close(self) -> None:
        if self._conn is not None:
            self.rollback()
            self._conn.close()
            self._conn = None


def get_store() -> Iterator[LedgerStore]:
    """FastAPI dependency: one store per request."""
    store = LedgerStore(get_engine())
    try:
        yield store
    finally:
        store.close()
