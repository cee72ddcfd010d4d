from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from toonshelf.domain.entities import (
    ChapterStatus,
    ComicStatus,
    SerializationStatus,
    UserRole,
    Visibility,
)

# --- Auth / Users ---


class SignUpRequest(BaseModel):
    username: str
    email: str
    password: str


class LoginRequest(BaseModel):
    identifier: str  # email or username
    password: str


class UserResponse(BaseModel):
    id: UUID
    username: str
    email: str
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# --- Tags ---


class TagNameModel(BaseModel):
    language: str
    name: str

    class Config:
        from_attributes = True


class TagModel(BaseModel):
    names: list[TagNameModel]
    type: str = "genre"


class TagResponse(BaseModel):
    id: UUID
    slug: str
    type: str
    translations: list[TagNameModel] = []

    class Config:
        from_attributes = True


# --- Comics ---


class ComicTranslationModel(BaseModel):
    language: str
    title: str
    synopsis: str = ""
    alt_title: str = ""

    class Config:
        from_attributes = True


class ComicFields(BaseModel):
    translations: list[ComicTranslationModel] = []
    author: str = ""
    cover_image_url: str = ""
    banner_image_url: str = ""
    serialization_status: SerializationStatus | None = None
    visibility: Visibility | None = None
    nsfw: bool = False
    schedule_publish_at: datetime | None = None


class ComicCreateRequest(ComicFields):
    tags: list[TagModel] = []


class ComicUpdateRequest(ComicFields):
    """Full replacement: omitted scalars are reset to their defaults."""


class RejectRequest(BaseModel):
    reason: str


class ChapterTranslationModel(BaseModel):
    language: str
    title: str

    class Config:
        from_attributes = True


class ChapterImageModel(BaseModel):
    image_url: str
    order: int

    class Config:
        from_attributes = True


class ChapterCreateRequest(BaseModel):
    chapter_number: int
    translations: list[ChapterTranslationModel]
    image_urls: list[str]


class ChapterResponse(BaseModel):
    id: UUID
    comic_id: UUID
    chapter_number: int
    status: ChapterStatus
    published_at: datetime | None = None
    translations: list[ChapterTranslationModel] = []
    images: list[ChapterImageModel] = []
    created_at: datetime

    class Config:
        from_attributes = True


class ComicResponse(BaseModel):
    id: UUID
    creator_id: UUID
    author: str
    status: ComicStatus
    serialization_status: SerializationStatus
    visibility: Visibility
    nsfw: bool
    cover_image_url: str
    banner_image_url: str
    schedule_publish_at: datetime | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    translations: list[ComicTranslationModel] = []
    tags: list[TagResponse] = []
    chapters: list[ChapterResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# --- Uploads ---


class UploadResponse(BaseModel):
    url: str
    path: str
    size_bytes: int


# --- Library ---


class FolderCreateRequest(BaseModel):
    name: str
    description: str = ""
    is_public: bool = False


class FolderItemResponse(BaseModel):
    comic_id: UUID
    order: int
    added_at: datetime

    class Config:
        from_attributes = True


class FolderResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    description: str
    slug: str
    is_default: bool
    is_public: bool
    items: list[FolderItemResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
