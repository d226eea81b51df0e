"""Storage handle for the loans database.

The store wraps one SQLAlchemy engine for the lifetime of the process. It is
created explicitly and handed to the application, so tests can substitute an
in-memory store.
"""

import collections.abc
import logging
import pathlib
from typing import Any

import fastapi
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.exc
import sqlalchemy.pool
import sqlmodel

from . import errors
from . import models  # noqa: F401 # pyright: ignore[reportUnusedImport]

logger = logging.getLogger(__name__)

BUSY_TIMEOUT_MS = 5000


def _apply_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    """Configure every new SQLite connection for concurrent access."""
    cursor = dbapi_connection.cursor()
    cursor.execute(f'PRAGMA busy_timeout = {BUSY_TIMEOUT_MS}')
    cursor.execute('PRAGMA journal_mode = WAL')
    cursor.close()


class LoanStore:
    """Owns the engine through which all loan reads and writes happen."""

    def __init__(self, engine: sqlalchemy.Engine) -> None:
        self.engine = engine
        sqlalchemy.event.listen(engine, 'connect', _apply_pragmas)

    @classmethod
    def from_path(cls, path: pathlib.Path | str) -> 'LoanStore':
        return cls(
            sqlmodel.create_engine(
                f'sqlite:///{path}', connect_args={'check_same_thread': False}
            )
        )

    @classmethod
    def in_memory(cls) -> 'LoanStore':
        """A private in-memory store, shared across threads via a single connection."""
        return cls(
            sqlmodel.create_engine(
                'sqlite://',
                connect_args={'check_same_thread': False},
                poolclass=sqlalchemy.pool.StaticPool,
            )
        )

    def connect(self) -> None:
        """Open a connection to verify the database is reachable."""
        try:
            with self.engine.connect() as conn:
                conn.execute(sqlalchemy.text('SELECT 1'))
        except sqlalchemy.exc.SQLAlchemyError as exc:
            raise errors.classify(exc) from exc

    def create_tables(self) -> None:
        """Create the loans table if it does not exist.

        Failures are logged and otherwise ignored; requests will then fail
        individually with a storage error.
        """
        try:
            sqlmodel.SQLModel.metadata.create_all(self.engine)
        except sqlalchemy.exc.SQLAlchemyError as exc:
            err = errors.classify(exc)
            logger.error('Error creating table [%s]: %s', err.code, err)

    def session(self) -> sqlmodel.Session:
        return sqlmodel.Session(self.engine)

    def close(self) -> None:
        self.engine.dispose()
        logger.info('SQLite database closed')


def open_store(path: pathlib.Path | str) -> LoanStore:
    """Open the database at ``path`` and initialize its schema.

    Raises StorageUnavailableError if the file cannot be opened.
    """
    path = pathlib.Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise errors.StorageUnavailableError(str(exc)) from exc
    store = LoanStore.from_path(path)
    try:
        store.connect()
    except errors.StorageError as exc:
        store.engine.dispose()
        raise errors.StorageUnavailableError(str(exc)) from exc
    logger.info('Connected to SQLite database at %s', path)
    store.create_tables()
    return store


def get_store(request: fastapi.Request) -> LoanStore:
    return request.app.state.store


def get_session(
    request: fastapi.Request,
) -> collections.abc.Generator[sqlmodel.Session, None, None]:
    """Get a database session bound to the application's store."""
    with get_store(request).session() as session:
        yield session
