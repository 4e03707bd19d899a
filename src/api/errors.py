"""
Translation of domain errors into HTTP responses.
"""
from fastapi import HTTPException, status

from master_data.models import MasterDataError, MasterDataErrorType
from sheets.store_errors import StoreError

# Statuses the client can act on are passed through; everything else is
# an upstream failure.
_PASSTHROUGH_STATUSES = {401, 403, 404, 429}

_MASTER_DATA_STATUSES = {
    MasterDataErrorType.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    MasterDataErrorType.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    MasterDataErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    MasterDataErrorType.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    MasterDataErrorType.EMPTY_DATA: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def store_error_to_http(error: StoreError) -> HTTPException:
    code = error.status if error.status in _PASSTHROUGH_STATUSES else status.HTTP_502_BAD_GATEWAY
    return HTTPException(
        status_code=code,
        detail={
            'error': type(error).__name__,
            'message': str(error),
            'retryable': error.retryable,
        },
    )


def master_data_error_to_http(error: MasterDataError) -> HTTPException:
    code = _MASTER_DATA_STATUSES.get(error.error_type, status.HTTP_502_BAD_GATEWAY)
    return HTTPException(status_code=code, detail=error.to_dict())
