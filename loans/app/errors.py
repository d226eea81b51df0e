"""Storage error taxonomy.

Every storage failure is mapped onto one of these types so that logs carry a
stable code. The codes are for operators only; HTTP responses use fixed,
non-descriptive messages.
"""

import sqlalchemy.exc


class StorageError(Exception):
    """Base class for failures talking to the loan store."""

    code = 'storage_error'


class StorageUnavailableError(StorageError):
    """The database file could not be opened, or the schema is missing."""

    code = 'storage_unavailable'


class StorageBusyError(StorageError):
    """A lock could not be acquired within the busy timeout."""

    code = 'storage_busy'


class StorageConstraintError(StorageError):
    """A write violated a table constraint."""

    code = 'constraint_violation'


class StorageDataError(StorageError):
    """A value could not be bound or converted by the driver."""

    code = 'invalid_data'


def classify(exc: Exception) -> StorageError:
    """Wrap a driver, SQLAlchemy or filesystem exception in a StorageError."""
    if isinstance(exc, StorageError):
        return exc
    message = str(getattr(exc, 'orig', None) or exc)
    if isinstance(exc, sqlalchemy.exc.IntegrityError):
        return StorageConstraintError(message)
    if isinstance(exc, sqlalchemy.exc.OperationalError):
        if 'locked' in message or 'busy' in message:
            return StorageBusyError(message)
        return StorageUnavailableError(message)
    if isinstance(exc, sqlalchemy.exc.DataError):
        return StorageDataError(message)
    if isinstance(exc, sqlalchemy.exc.DBAPIError):
        return StorageError(message)
    if isinstance(exc, sqlalchemy.exc.StatementError):
        # statement never reached the driver: parameter binding failed
        return StorageDataError(message)
    if isinstance(exc, OverflowError):
        return StorageDataError(message)
    if isinstance(exc, OSError):
        return StorageUnavailableError(message)
    return StorageError(message)
