"""
Moderation routes.

Every route here requires the admin role. The comic service itself does not
check roles, so this router is the only gate for approve and reject.
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from toonshelf.api.deps import get_comic_service, require_admin
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import ComicResponse, RejectRequest
from toonshelf.domain.entities import User
from toonshelf.domain.errors import DomainError
from toonshelf.services.comic import ComicService

router = APIRouter()


@router.get("/comics/pending", response_model=list[ComicResponse])
def list_pending_comics(
    admin: User = Depends(require_admin),
    service: ComicService = Depends(get_comic_service),
) -> list[ComicResponse]:
    try:
        comics = service.list_pending_comics()
    except DomainError as e:
        raise to_http_exception(e) from e
    return [ComicResponse.model_validate(c) for c in comics]


@router.post("/comics/{comic_id}/approve", response_model=ComicResponse)
def approve_comic(
    comic_id: UUID,
    admin: User = Depends(require_admin),
    service: ComicService = Depends(get_comic_service),
) -> ComicResponse:
    """Publish a pending comic, moving its draft assets to public storage."""
    try:
        comic = service.approve_comic(comic_id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return ComicResponse.model_validate(comic)


@router.post("/comics/{comic_id}/reject", response_model=ComicResponse)
def reject_comic(
    comic_id: UUID,
    req: RejectRequest,
    admin: User = Depends(require_admin),
    service: ComicService = Depends(get_comic_service),
) -> ComicResponse:
    try:
        comic = service.reject_comic(comic_id, req.reason)
    except DomainError as e:
        raise to_http_exception(e) from e
    return ComicResponse.model_validate(comic)
