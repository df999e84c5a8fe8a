"""Typed errors raised by the ledger query path."""


class LedgerError(Exception):
    """Base class for every error the ledger surfaces to callers."""

    code = "ledger_error"


class ValidationError(LedgerError):
    """Malformed filter combination or page size. Raised before any store call."""

    code = "validation_error"


class InvalidCursorError(LedgerError):
    """A pagination token failed to decode."""

    code = "invalid_cursor"


class NotFoundError(LedgerError):
    """A single-entity lookup found nothing."""

    code = "not_found"


class StorageError(LedgerError):
    """The record store failed, timed out, or returned a malformed record."""

    code = "storage_error"


class EncodingError(LedgerError):
    """A key component is outside its representable domain."""

    code = "encoding_error"


class PermissionDeniedError(LedgerError):
    """The request context is not allowed to use an operation."""

    code = "permission_denied"
