"""Exceptions raised by the store and the domain services.

The IPC bridge turns any of these into ``{"success": False, "error": str(exc)}``.
"""


class PosError(Exception):
    """Base class for failures the UI should show as a message."""


class ValidationFailed(PosError):
    """A request broke a domain rule (e.g. deleting the HOME category)."""


class NotFound(PosError):
    pass


class TooManyAttempts(PosError):
    pass


class StoreError(PosError):
    """The database file could not be read, written or swapped."""
