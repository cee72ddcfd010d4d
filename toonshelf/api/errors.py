from fastapi import HTTPException, status

from toonshelf.domain.errors import (
    DomainError,
    FileTooLarge,
    Forbidden,
    InvalidCredentials,
    InvalidFileType,
    InvalidInput,
    NotFound,
    PersistenceFailure,
    StorageFailure,
    Unauthorized,
)

# Most specific first: InvalidFileType and FileTooLarge are InvalidInput too.
STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (Unauthorized, status.HTTP_403_FORBIDDEN),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidFileType, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    (FileTooLarge, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED),
    (StorageFailure, status.HTTP_502_BAD_GATEWAY),
    (PersistenceFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def to_http_exception(exc: DomainError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
