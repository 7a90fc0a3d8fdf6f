class PersistenceError(Exception):
    """Base class for all errors raised by the persistence layer."""


class NotInitialized(PersistenceError):
    """Raised when the store is used before ``init()`` or after ``close()``."""


class ReadError(PersistenceError):
    """A read statement failed inside SQLite."""


class WriteError(PersistenceError):
    """A write statement failed and its transaction was rolled back."""


class OperationTimeout(PersistenceError):
    """The connection stayed busy for longer than the configured timeout."""


class NotFound(PersistenceError, ValueError):
    """No row matches the requested identifier."""


class ValidationError(PersistenceError, ValueError):
    """A caller supplied payload failed a precondition."""
