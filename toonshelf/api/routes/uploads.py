from fastapi import APIRouter, Depends, File, UploadFile

from toonshelf.api.deps import get_current_user, get_upload_service
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import UploadResponse
from toonshelf.domain.entities import User
from toonshelf.domain.errors import DomainError
from toonshelf.services.upload import UploadService

router = APIRouter()


@router.post("", response_model=UploadResponse)
def upload_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    """Upload an image into the caller's draft area."""
    content = file.file.read()
    mime_type = file.content_type or "application/octet-stream"

    try:
        result = service.upload_file(current_user.id, file.filename or "", content, mime_type)
    except DomainError as e:
        raise to_http_exception(e) from e

    return UploadResponse(url=result.url, path=result.path, size_bytes=result.size_bytes)
