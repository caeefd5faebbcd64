"""Exception hierarchy for SheetLedger operations."""

from typing import Optional


class SheetLedgerError(Exception):
    """Base error carrying the HTTP status it should surface with."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        """Serialize for an error response body."""
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class AuthRequired(SheetLedgerError):
    """Missing or malformed bearer token. Never reaches the store."""

    status_code = 401

    def __init__(self, message: str = "Authorization header required"):
        super().__init__(message)


class InvalidAddress(SheetLedgerError, ValueError):
    """Malformed A1 notation."""

    status_code = 400


class InvalidRequest(SheetLedgerError):
    """Request payload failed validation."""

    status_code = 400


class SheetNotFound(SheetLedgerError):
    """The existence probe against a sheet failed."""

    status_code = 404


class WindowFull(SheetLedgerError):
    """No empty row is left inside the append window."""

    status_code = 400


class WriteFailed(SheetLedgerError):
    """The store rejected a write."""

    status_code = 500


class SortFailed(SheetLedgerError):
    """A sort request failed. Downgraded to a flag by the coordinator."""

    status_code = 500


class UpstreamError(SheetLedgerError):
    """The store answered with a non-success status."""

    status_code = 502


class UpstreamUnavailable(SheetLedgerError):
    """The store could not be reached or timed out."""

    status_code = 503


class LookupNotFound(SheetLedgerError):
    """An unknown lookup list was requested."""

    status_code = 404


class InternalError(SheetLedgerError):
    """Unexpected failure during orchestration."""

    status_code = 500
