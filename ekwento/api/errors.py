from fastapi import HTTPException, status
from ekwento.services.result import ErrorKind, ServiceResult

STATUS_BY_KIND = {
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.validation: status.HTTP_400_BAD_REQUEST,
    ErrorKind.conflict: status.HTTP_409_CONFLICT,
    ErrorKind.unauthorized: status.HTTP_403_FORBIDDEN,
    ErrorKind.unknown: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

def raise_for_result(result: ServiceResult):
    """Return the result's data, or raise the HTTPException matching its error kind"""
    if result.success:
        return result.data
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(result.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.error
    )
