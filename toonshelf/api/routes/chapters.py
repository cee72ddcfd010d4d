from uuid import UUID

from fastapi import APIRouter, Depends

from toonshelf.api.deps import get_comic_service
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import ChapterResponse
from toonshelf.domain.errors import DomainError
from toonshelf.services.comic import ComicService

router = APIRouter()


@router.get("/{chapter_id}", response_model=ChapterResponse)
def get_chapter(
    chapter_id: UUID,
    service: ComicService = Depends(get_comic_service),
) -> ChapterResponse:
    try:
        chapter = service.get_chapter(chapter_id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return ChapterResponse.model_validate(chapter)
