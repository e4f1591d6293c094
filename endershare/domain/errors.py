"""Domain-level errors and exceptions."""

from typing import Optional


class DomainError(Exception):
    """Base domain error."""
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(DomainError):
    """Validation error."""
    pass


class ShareRejectedError(ValidationError):
    """Raised when an invite, accept or unshare precondition is not met.

    The message is meant for the participant who issued the command.
    """
    pass


class SessionError(DomainError):
    """Session-related error."""
    pass


class SessionConflictError(SessionError):
    """Raised when a participant would end up in two sessions at once."""
    pass


class ConfigurationError(DomainError):
    """Configuration error."""
    pass


class StorageError(DomainError):
    """Raised when durable storage cannot be read or written."""
    pass


class RecordFormatError(StorageError):
    """Raised when a persisted record cannot be parsed."""
    pass
