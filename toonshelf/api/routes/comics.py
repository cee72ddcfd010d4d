from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from toonshelf.api.deps import get_comic_service, get_current_user, get_optional_user
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import (
    ChapterCreateRequest,
    ChapterResponse,
    ComicCreateRequest,
    ComicResponse,
    ComicTranslationModel,
    ComicUpdateRequest,
)
from toonshelf.domain.entities import Comic, User
from toonshelf.domain.errors import DomainError
from toonshelf.services.comic import ComicService
from toonshelf.services.models import (
    ChapterTranslationInput,
    CreateChapterInput,
    CreateComicInput,
    TagInput,
    TagNameInput,
    TranslationInput,
    UpdateComicInput,
)

router = APIRouter()


def _translations(items: list[ComicTranslationModel]) -> list[TranslationInput]:
    return [
        TranslationInput(
            language=t.language, title=t.title, synopsis=t.synopsis, alt_title=t.alt_title
        )
        for t in items
    ]


def _can_view(comic: Comic, viewer: User | None) -> bool:
    if comic.status == "published":
        return True
    return viewer is not None and (viewer.id == comic.creator_id or viewer.role == "admin")


@router.get("", response_model=list[ComicResponse])
def list_public_comics(
    service: ComicService = Depends(get_comic_service),
) -> list[ComicResponse]:
    """List published, publicly visible comics, newest first."""
    try:
        comics = service.list_public_comics()
    except DomainError as e:
        raise to_http_exception(e) from e
    return [ComicResponse.model_validate(c) for c in comics]


@router.post("", response_model=ComicResponse, status_code=status.HTTP_201_CREATED)
def create_comic(
    req: ComicCreateRequest,
    current_user: User = Depends(get_current_user),
    service: ComicService = Depends(get_comic_service),
) -> ComicResponse:
    fields = CreateComicInput(
        translations=_translations(req.translations),
        author=req.author,
        tags=[
            TagInput(
                names=[TagNameInput(language=n.language, name=n.name) for n in tag.names],
                type=tag.type,
            )
            for tag in req.tags
        ],
        cover_image_url=req.cover_image_url,
        banner_image_url=req.banner_image_url,
        serialization_status=req.serialization_status,
        visibility=req.visibility,
        nsfw=req.nsfw,
        schedule_publish_at=req.schedule_publish_at,
    )
    try:
        comic = service.create_comic(current_user.id, fields)
    except DomainError as e:
        raise to_http_exception(e) from e
    return ComicResponse.model_validate(comic)


@router.get("/mine", response_model=list[ComicResponse])
def list_my_comics(
    current_user: User = Depends(get_current_user),
    service: ComicService = Depends(get_comic_service),
) -> list[ComicResponse]:
    try:
        comics = service.list_my_comics(current_user.id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return [ComicResponse.model_validate(c) for c in comics]


@router.get("/{comic_id}", response_model=ComicResponse)
def get_comic(
    comic_id: UUID,
    viewer: User | None = Depends(get_optional_user),
    service: ComicService = Depends(get_comic_service),
) -> ComicResponse:
    """Get a comic. Unpublished comics are only visible to their creator and admins."""
    try:
        comic = service.get_comic(comic_id)
    except DomainError as e:
        raise to_http_exception(e) from e

    if not _can_view(comic, viewer):
        raise HTTPException(status_code=404, detail="Comic not found")
    return ComicResponse.model_validate(comic)


@router.put("/{comic_id}", response_model=ComicResponse)
def update_comic(
    comic_id: UUID,
    req: ComicUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: ComicService = Depends(get_comic_service),
) -> ComicResponse:
    fields = UpdateComicInput(
        translations=_translations(req.translations),
        author=req.author,
        cover_image_url=req.cover_image_url,
        banner_image_url=req.banner_image_url,
        serialization_status=req.serialization_status,
        visibility=req.visibility,
        nsfw=req.nsfw,
        schedule_publish_at=req.schedule_publish_at,
    )
    try:
        comic = service.update_comic(comic_id, current_user.id, fields)
    except DomainError as e:
        raise to_http_exception(e) from e
    return ComicResponse.model_validate(comic)


@router.delete("/{comic_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comic(
    comic_id: UUID,
    current_user: User = Depends(get_current_user),
    service: ComicService = Depends(get_comic_service),
) -> Response:
    try:
        service.delete_comic(comic_id, current_user.id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{comic_id}/publish", response_model=ComicResponse)
def request_publish(
    comic_id: UUID,
    current_user: User = Depends(get_current_user),
    service: ComicService = Depends(get_comic_service),
) -> ComicResponse:
    """Submit a draft or rejected comic for admin review."""
    try:
        comic = service.request_publish(comic_id, current_user.id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return ComicResponse.model_validate(comic)


@router.post(
    "/{comic_id}/chapters", response_model=ChapterResponse, status_code=status.HTTP_201_CREATED
)
def create_chapter(
    comic_id: UUID,
    req: ChapterCreateRequest,
    current_user: User = Depends(get_current_user),
    service: ComicService = Depends(get_comic_service),
) -> ChapterResponse:
    fields = CreateChapterInput(
        chapter_number=req.chapter_number,
        translations=[
            ChapterTranslationInput(language=t.language, title=t.title) for t in req.translations
        ],
        image_urls=req.image_urls,
    )
    try:
        chapter = service.create_chapter(comic_id, current_user.id, fields)
    except DomainError as e:
        raise to_http_exception(e) from e
    return ChapterResponse.model_validate(chapter)
