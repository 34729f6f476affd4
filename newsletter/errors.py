from __future__ import annotations


class SubscriberError(Exception):
    """Base class for every error raised by the subscriber service."""


class ValidationError(SubscriberError, ValueError):
    """A subscriber could not be constructed from the supplied values."""


class MissingFieldError(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class StoreError(SubscriberError):
    """Failure reported by the subscriber store."""


class NotFoundError(StoreError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Subscriber not found: {email}")
        self.email = email


class DuplicateError(StoreError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Subscriber already exists: {email}")
        self.email = email


class DeserializationError(StoreError):
    """A stored record exists but its content is not a valid subscriber."""


class StorageError(StoreError):
    """The underlying filesystem rejected an operation."""
