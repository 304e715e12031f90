"""
Custom exceptions for the Arbor outline manager.

Every expected failure carries a ``kind`` tag so the facade can turn it into
an OperationResult without inspecting messages.
"""


class ArborError(Exception):
    """Base exception for all Arbor-related errors."""

    kind = "error"


class NotFoundError(ArborError):
    """Raised when a referenced node or tree is absent."""

    kind = "not_found"


class InvalidOperationError(ArborError):
    """Raised when a request is structurally illegal for the current tree."""

    kind = "invalid_operation"


class ValidationError(ArborError):
    """Raised when a public entry point receives malformed input."""

    kind = "validation_error"


class PersistenceConflictError(ArborError):
    """Raised when a whole-tree write did not apply because the stored version moved."""

    kind = "persistence_conflict"


class StorageError(ArborError):
    """Raised when a stored tree cannot be read or written."""

    kind = "storage_error"


class TreeIntegrityError(AssertionError):
    """Raised when an internal tree invariant is broken.

    This is a defect, never a user-facing condition. It does not derive
    from ArborError.
    """
