from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from toonshelf.api.deps import get_current_user, get_library_service, get_optional_user
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import FolderCreateRequest, FolderItemResponse, FolderResponse
from toonshelf.domain.entities import User
from toonshelf.domain.errors import DomainError
from toonshelf.services.library import LibraryService

router = APIRouter()


# --- Default folder ---


@router.get("", response_model=list[FolderItemResponse])
def get_library(
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> list[FolderItemResponse]:
    try:
        items = service.get_user_library(current_user.id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return [FolderItemResponse.model_validate(i) for i in items]


@router.post("/items/{comic_id}", response_model=FolderResponse)
def add_to_library(
    comic_id: UUID,
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> FolderResponse:
    try:
        folder = service.add_to_library(current_user.id, comic_id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return FolderResponse.model_validate(folder)


@router.delete("/items/{comic_id}", response_model=FolderResponse)
def remove_from_library(
    comic_id: UUID,
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> FolderResponse:
    try:
        folder = service.remove_from_library(current_user.id, comic_id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return FolderResponse.model_validate(folder)


# --- Folders ---


@router.get("/folders", response_model=list[FolderResponse])
def list_folders(
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> list[FolderResponse]:
    try:
        folders = service.list_user_folders(current_user.id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return [FolderResponse.model_validate(f) for f in folders]


@router.post("/folders", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
def create_folder(
    req: FolderCreateRequest,
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> FolderResponse:
    try:
        folder = service.create_folder(
            current_user.id, req.name, description=req.description, is_public=req.is_public
        )
    except DomainError as e:
        raise to_http_exception(e) from e
    return FolderResponse.model_validate(folder)


@router.get("/folders/{folder_id}", response_model=FolderResponse)
def get_folder(
    folder_id: UUID,
    viewer: User | None = Depends(get_optional_user),
    service: LibraryService = Depends(get_library_service),
) -> FolderResponse:
    try:
        folder = service.get_folder(folder_id, viewer.id if viewer else None)
    except DomainError as e:
        raise to_http_exception(e) from e
    return FolderResponse.model_validate(folder)


@router.get("/shared/{slug}", response_model=FolderResponse)
def get_folder_by_slug(
    slug: str,
    viewer: User | None = Depends(get_optional_user),
    service: LibraryService = Depends(get_library_service),
) -> FolderResponse:
    """Shareable folder link. Private folders resolve only for their owner."""
    try:
        folder = service.get_folder_by_slug(slug, viewer.id if viewer else None)
    except DomainError as e:
        raise to_http_exception(e) from e
    return FolderResponse.model_validate(folder)


@router.delete("/folders/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_folder(
    folder_id: UUID,
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> Response:
    try:
        service.delete_folder(current_user.id, folder_id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/folders/{folder_id}/items/{comic_id}", response_model=FolderResponse)
def add_to_folder(
    folder_id: UUID,
    comic_id: UUID,
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> FolderResponse:
    try:
        folder = service.add_to_folder(current_user.id, folder_id, comic_id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return FolderResponse.model_validate(folder)


@router.delete("/folders/{folder_id}/items/{comic_id}", response_model=FolderResponse)
def remove_from_folder(
    folder_id: UUID,
    comic_id: UUID,
    current_user: User = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> FolderResponse:
    try:
        folder = service.remove_from_folder(current_user.id, folder_id, comic_id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return FolderResponse.model_validate(folder)
