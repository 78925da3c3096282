from __future__ import annotations

from typing import Any


class BadgeError(Exception):
    '''Base class for errors raised by the badge engine.'''

    message: str = 'Badge operation failed'

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationError(BadgeError):
    '''Malformed badge definition, progress payload or event.'''

    message = 'Invalid badge data'

    def __init__(
        self, message: str | None = None, field: str | None = None, **details: Any
    ) -> None:
        self.field = field
        super().__init__(message, **details)


class NotFoundError(BadgeError):
    message = 'Badge not found'


class DuplicateAwardError(BadgeError):
    '''The user already holds the badge. Handled inside the assignment layer.'''

    message = 'User already has this badge'


class AssignmentError(BadgeError):
    message = 'Failed to assign badge'


class ProcessingError(BadgeError):
    message = 'Failed to process badge event'


class CatalogError(BadgeError):
    message = 'Failed to access badge catalog'


class SignalReadError(BadgeError):
    message = 'Failed to read user counters'
