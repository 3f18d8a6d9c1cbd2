"""SQLite engine and session setup for the school store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from academia.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

IN_MEMORY = ":memory:"
LOCK_TIMEOUT = 5.0  # seconds a writer waits for the database write lock


def _apply_pragmas(dbapi_connection: object, _connection_record: object) -> None:
    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_path: str, lock_timeout: float = LOCK_TIMEOUT) -> Engine:
    """Create an engine for a database file or a private in-memory database.

    An in-memory database lives on a single shared connection, so worker
    threads (TestClient, sync routes) see the same tables and rows.
    Concurrent enrollments on a file database queue on the write lock for up
    to ``lock_timeout`` seconds.
    """
    connect_args = {"check_same_thread": False, "timeout": lock_timeout}
    if db_path == IN_MEMORY:
        engine = create_engine("sqlite://", poolclass=StaticPool, connect_args=connect_args)
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{db_path}", connect_args=connect_args)
    event.listen(engine, "connect", _apply_pragmas)
    return engine


class Database:
    """Lazily built engine and the session factory behind store transactions."""

    def __init__(self, db_path: str = "academia.db", lock_timeout: float = LOCK_TIMEOUT) -> None:
        self.db_path = db_path
        self.lock_timeout = lock_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(self.db_path, self.lock_timeout)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        # Records returned from a transaction stay readable after commit
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    def create_tables(self) -> None:
        """Create the school schema if it doesn't exist."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self.session_factory()

    def pragma(self, name: str) -> object:
        """Read a SQLite pragma such as ``journal_mode`` or ``busy_timeout``."""
        with self.engine.connect() as conn:
            return conn.execute(text(f"PRAGMA {name}")).scalar()

    def close(self) -> None:
        """Dispose of the engine; the next access builds a fresh one."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
