"""
Ledger store: SQLAlchemy engine ownership and transaction management.

Every public ledger operation runs inside exactly one transaction opened
here. On SQLite a write transaction starts with BEGIN IMMEDIATE, so two
writers are serialized by the database and read-check-write sequences such
as staking never interleave. Read transactions start with a plain BEGIN and
do not wait for writers.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from coinbets.config import Settings, StoreConfig
from coinbets.database.base import Base
from coinbets.exceptions import StoreError

# Registers the tables on Base.metadata
import coinbets.models  # noqa: F401

logger = logging.getLogger(__name__)

READ_ONLY_OPTION = "coinbets_read_only"

# sqlite3 raises OverflowError itself for integers beyond 64 bits
DRIVER_ERRORS = (SQLAlchemyError, OverflowError)


def create_ledger_engine(database_url: str, config: StoreConfig | None = None) -> Engine:
    """Create the SQLAlchemy engine for a ledger database."""
    config = config or StoreConfig()
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(
            url,
            echo=config.echo_sql,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

    engine = create_engine(
        url,
        echo=config.echo_sql,
        connect_args={
            "timeout": config.busy_timeout_seconds,
            "check_same_thread": False,
        },
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Hand BEGIN over to the "begin" hook below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(READ_ONLY_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


class LedgerStore:
    """
    Owns the engine and hands out one session per transaction.

    Usage:
        with store.transaction() as session:
            session.add(Account(tenant_id=1, user_id=2, balance=100))

        with store.transaction(write=False) as session:
            session.get(Account, (1, 2))

    The transaction commits when the block exits normally and rolls back on
    any exception. Driver errors surface as StoreError; ledger errors raised
    inside the block propagate unchanged.
    """

    def __init__(self, database_url: str, config: StoreConfig | None = None):
        self.database_url = database_url
        self.engine = create_ledger_engine(database_url, config)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        self._read_session_factory = sessionmaker(
            bind=self.engine.execution_options(**{READ_ONLY_OPTION: True}),
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LedgerStore":
        return cls(settings.resolved_database_url, settings.store)

    def create_schema(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create ledger schema: {e}") from e

    def begin_transaction(self, write: bool = True) -> Session:
        factory = self._session_factory if write else self._read_session_factory
        session = factory()
        session.begin()
        return session

    def commit(self, session: Session) -> None:
        try:
            session.commit()
        except DRIVER_ERRORS as e:
            session.rollback()
            raise StoreError(f"Commit failed: {e}") from e
        finally:
            session.close()

    def rollback(self, session: Session) -> None:
        try:
            session.rollback()
        finally:
            session.close()

    @contextmanager
    def transaction(self, write: bool = True) -> Iterator[Session]:
        session = self.begin_transaction(write)
        try:
            yield session
        except DRIVER_ERRORS as e:
            self.rollback(session)
            raise StoreError(f"Transaction failed: {e}") from e
        except Exception:
            self.rollback(session)
            raise
        self.commit(session)

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()
        logger.debug(f"Disposed ledger store engine for {self.engine.url!r}")
