"""
Domain error taxonomy.

Services raise these; adapters translate driver/client errors into
PersistenceFailure and StorageFailure so callers only ever see DomainError
subclasses. The builtin bases keep `except PermissionError` / `except ValueError`
call sites working.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    code = "domain_error"


class Unauthorized(DomainError, PermissionError):
    """Requester is not the creator/owner of the resource."""

    code = "unauthorized"


class Forbidden(DomainError, PermissionError):
    """Requester's role or folder ownership does not allow the action."""

    code = "forbidden"


class NotFound(DomainError, LookupError):
    code = "not_found"


class InvalidInput(DomainError, ValueError):
    """Malformed request fields."""

    code = "invalid_input"


class InvalidTransition(InvalidInput):
    """Moderation status does not allow the requested change."""

    code = "invalid_transition"


class InvalidFileType(InvalidInput):
    code = "invalid_file_type"


class FileTooLarge(InvalidInput):
    code = "file_too_large"


class InvalidCredentials(DomainError):
    code = "invalid_credentials"


class StorageFailure(DomainError):
    """Storage gateway error, passed through to the caller."""

    code = "storage_failure"


class PersistenceFailure(DomainError):
    """Repository error, passed through to the caller."""

    code = "persistence_failure"
