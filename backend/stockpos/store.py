# Overview: Persistent store handle and scoped transactions shared by every core component.

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .validation import ConflictError
"""
Store Invariants (authoritative)

- One store handle per unit of work, passed into components at construction.
- Every multi-step write runs inside exactly one StoreTransaction.
- A transaction commits once on success and rolls back once on any error;
  the error is re-raised after rollback, never swallowed.
- IntegrityError surfaces as ConflictError; any other SQLAlchemyError as
  StoreError. Domain errors pass through unchanged.
"""


class StoreError(RuntimeError):
    """Underlying storage failure (I/O, locked database, corruption)."""


def lock_for_update(query):
    """
    Apply row-level locking for read-then-write paths.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; on SQLite the write lock comes
    from use_immediate_transactions() instead.
    """
    return query.with_for_update()


def use_immediate_transactions(engine) -> None:
    """
    Make every SQLite transaction take the database write lock up front.

    pysqlite defers BEGIN until the first write, so a read-then-write path
    reads outside any transaction and a concurrent writer can slip in
    between. Driver-level transaction handling is switched off and each
    SQLAlchemy begin emits BEGIN IMMEDIATE, so the read and the write share
    one serialized transaction.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class StoreTransaction:
    """Handle for the steps of one logical operation."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, obj) -> None:
        self.session.add(obj)

    def flush(self) -> None:
        self.session.flush()

    def query(self, *entities):
        return self.session.query(*entities)

    def locked(self, model, **filters):
        return lock_for_update(self.session.query(model).filter_by(**filters)).first()


class PersistentStore:
    def __init__(self, session: Session):
        self.session = session

    def query(self, *entities):
        return self.session.query(*entities)

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        tx = StoreTransaction(self.session)
        try:
            yield tx
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(_integrity_message(exc)) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(str(exc)) from exc
        except BaseException:
            self.session.rollback()
            raise


def _integrity_message(exc: IntegrityError) -> str:
    detail = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = detail.lower()
    if "barcode" in lowered:
        return "An item with this barcode already exists"
    if "order_number" in lowered:
        return "Order number already exists"
    if "email" in lowered or "username" in lowered:
        return "A user with this username or email already exists"
    if "unique" in lowered:
        return "Record already exists"
    return f"Constraint violation: {detail}"
