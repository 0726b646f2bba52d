from typing import Any, Dict

from fastapi import HTTPException, status

from ..models.result import ErrorKind, ServiceResult

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PHOTO: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PROFILE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def envelope_or_raise(result: ServiceResult, **extra: Any) -> Dict[str, Any]:
    """Success envelope for the client, or the HTTPException matching the failure kind."""
    if not result.success:
        raise HTTPException(
            status_code=_STATUS_BY_KIND.get(result.error_kind, status.HTTP_400_BAD_REQUEST),
            detail=result.error,
        )
    return {**result.to_envelope(), **extra}
