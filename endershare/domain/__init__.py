"""Domain layer - pure business models and logic."""

from .errors import (
    ConfigurationError,
    DomainError,
    RecordFormatError,
    SessionConflictError,
    SessionError,
    ShareRejectedError,
    StorageError,
    ValidationError,
)
from .sessions.models import PendingInvitation, SessionRecord, ShareSession

__all__ = [
    # Errors
    "DomainError",
    "ValidationError",
    "ShareRejectedError",
    "SessionError",
    "SessionConflictError",
    "ConfigurationError",
    "StorageError",
    "RecordFormatError",
    # Sessions
    "ShareSession",
    "SessionRecord",
    "PendingInvitation",
]
