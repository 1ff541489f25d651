"""Exceptions raised by the tutor engine.

Every error here is recoverable: callers are expected to catch it, show it to
the user and carry on.
"""


class TutorError(Exception):
    """Base class for all tutor errors."""


class AuthRequired(TutorError):
    """The operation needs a logged-in user and there is none."""

    def __init__(self, message: str = "You must be logged in to do that"):
        super().__init__(message)


class NotFound(TutorError, LookupError):
    """A referenced subject, test, question or record does not exist."""


class NoActiveSession(TutorError):
    """A mutating operation was called with no live session or exam."""

    def __init__(self, message: str = "No session in progress"):
        super().__init__(message)


class NoContentAvailable(TutorError):
    """There are no questions to build a session from."""


class PersistenceError(TutorError):
    """The underlying store failed to read or write."""


class CatalogError(TutorError, ValueError):
    """A question bank or test catalog file is malformed."""
