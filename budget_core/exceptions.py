"""Domain-specific exceptions for the budget tracker core services."""

class ValidationError(ValueError):
    """Raised when a caller passes data that breaks the mutation contract."""


class RecordNotFoundError(LookupError):
    """Raised when an expense cannot be located in the ledger."""


class PersistenceError(IOError):
    """Raised by a key-value store when it cannot read or write a value."""
