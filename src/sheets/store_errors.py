"""
Row Store Errors
Typed failures raised by the spreadsheet row store.

HTTP-style status codes are the vocabulary: 401/403/404 are terminal,
429 and 5xx (and dropped connections) are transient and may be retried.
"""
from typing import Optional


class StoreError(Exception):
    """Base class for row store failures."""
    retryable = False

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UnauthorizedError(StoreError):
    """401 - credentials missing or expired."""


class PermissionDeniedError(StoreError):
    """403 - credentials valid but the spreadsheet is not shared with them."""


class SheetNotFoundError(StoreError):
    """404 - spreadsheet or range does not exist."""


class RateLimitedError(StoreError):
    """429 - quota exceeded."""
    retryable = True


class NetworkError(StoreError):
    """5xx or a connection that never produced a response."""
    retryable = True


class MalformedResponseError(StoreError):
    """The API answered, but not in the shape we expect."""


_STATUS_ERRORS = {
    401: UnauthorizedError,
    403: PermissionDeniedError,
    404: SheetNotFoundError,
    429: RateLimitedError,
}


def error_for_status(status: Optional[int], message: str) -> StoreError:
    """Build the StoreError subclass matching an HTTP status."""
    if status in _STATUS_ERRORS:
        return _STATUS_ERRORS[status](message, status=status)
    if status is not None and status >= 500:
        return NetworkError(message, status=status)
    return StoreError(message, status=status)


def from_api_error(exc) -> StoreError:
    """Translate a gspread APIError into our taxonomy."""
    response = getattr(exc, 'response', None)
    status = getattr(response, 'status_code', None)
    if status is None:
        status = getattr(exc, 'code', None)
    return error_for_status(status, f"Sheets API error ({status}): {exc}")
