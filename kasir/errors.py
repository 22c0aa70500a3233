"""Error taxonomy shared by the POS core and its collaborators."""

from __future__ import annotations


class PosError(Exception):
    """Base class for every error the cashier flow can surface."""


class ValidationError(PosError):
    """Input rejected at the boundary; no state was changed."""


class InvalidVariant(PosError):
    """A variant referenced a size that does not exist."""


class InvalidTransition(PosError):
    """A checkout operation was invoked from the wrong state."""


class InsufficientPayment(PosError):
    """Tendered cash does not cover the total for a cash sale."""

    def __init__(self, total: int, tendered: int) -> None:
        super().__init__(f"Cash {tendered} does not cover total {total} (short by {total - tendered})")
        self.total = total
        self.tendered = tendered


class PersistenceUnavailable(PosError):
    """The backing store could not be read or written."""


class NotificationFailed(PosError):
    """The order notification webhook rejected or never received the call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteQueryIndexRequired(PosError):
    """The remote history store needs an index before this query can run."""


class RemoteQueryFailed(PosError):
    """Any other failure of the remote history query."""
