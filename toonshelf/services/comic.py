import logging
from datetime import datetime
from uuid import UUID, uuid4

from toonshelf.domain.assets import AssetTier, promote_path, split_public_url, tier_of
from toonshelf.domain.entities import (
    DEFAULT_SERIALIZATION_STATUS,
    DEFAULT_VISIBILITY,
    Chapter,
    ChapterImage,
    ChapterTranslation,
    Comic,
    ComicTranslation,
    Tag,
    TagTranslation,
)
from toonshelf.domain.errors import (
    InvalidInput,
    NotFound,
    PersistenceFailure,
    StorageFailure,
    Unauthorized,
)
from toonshelf.domain.slug import simple_slug
from toonshelf.domain.state import transition
from toonshelf.ports.clock import ClockPort
from toonshelf.ports.repo import ChapterRepoPort, ComicRepoPort, TagRepoPort, UserRepoPort
from toonshelf.ports.storage import StorageGatewayPort
from toonshelf.services.models import (
    CreateChapterInput,
    CreateComicInput,
    TagInput,
    TranslationInput,
    UpdateComicInput,
)

logger = logging.getLogger(__name__)


class ComicService:
    """
    Comic lifecycle: creation and editing by the creator, submission for
    review, and the admin approve/reject workflow.

    Ownership is checked here. The admin role for approve/reject is checked by
    the caller.
    """

    def __init__(
        self,
        comic_repo: ComicRepoPort,
        chapter_repo: ChapterRepoPort,
        tag_repo: TagRepoPort,
        user_repo: UserRepoPort,
        storage: StorageGatewayPort,
        clock: ClockPort,
        bucket: str,
    ):
        self.comic_repo = comic_repo
        self.chapter_repo = chapter_repo
        self.tag_repo = tag_repo
        self.user_repo = user_repo
        self.storage = storage
        self.clock = clock
        self.bucket = bucket

    # --- Reads ---

    def get_comic(self, comic_id: UUID) -> Comic:
        comic = self.comic_repo.get_by_id(comic_id)
        if not comic:
            raise NotFound("Comic not found")
        return comic

    def get_chapter(self, chapter_id: UUID) -> Chapter:
        chapter = self.chapter_repo.get_by_id(chapter_id)
        if not chapter:
            raise NotFound("Chapter not found")
        return chapter

    def list_public_comics(self) -> list[Comic]:
        comics = self.comic_repo.list_public()
        comics.sort(key=lambda c: c.approved_at or c.created_at, reverse=True)
        return comics

    def list_pending_comics(self) -> list[Comic]:
        return self.comic_repo.list_by_status("pending_review")

    def list_my_comics(self, creator_id: UUID) -> list[Comic]:
        user = self.user_repo.get_by_id(creator_id)
        if not user:
            raise NotFound("User not found")
        return self.comic_repo.list_by_creator(user.id)

    # --- Creator actions ---

    def create_comic(self, creator_id: UUID, fields: CreateComicInput) -> Comic:
        now = self.clock.now()
        comic_id = uuid4()

        translations = self._build_translations(comic_id, fields.translations)
        if not any(t.title.strip() for t in translations):
            raise InvalidInput("At least one translation with a title is required")

        comic = Comic(
            id=comic_id,
            creator_id=creator_id,
            author=fields.author,
            status="draft",
            serialization_status=fields.serialization_status or DEFAULT_SERIALIZATION_STATUS,
            visibility=fields.visibility or DEFAULT_VISIBILITY,
            nsfw=fields.nsfw,
            cover_image_url=fields.cover_image_url,
            banner_image_url=fields.banner_image_url,
            schedule_publish_at=fields.schedule_publish_at,
            translations=translations,
            tags=self._materialize_tags(fields.tags, now),
            created_at=now,
            updated_at=now,
        )

        self.comic_repo.save(comic)
        logger.info("Comic %s created by %s", comic.id, creator_id)

        self._promote_to_creator(creator_id)
        return comic

    def update_comic(self, comic_id: UUID, requester_id: UUID, fields: UpdateComicInput) -> Comic:
        comic = self._get_owned(comic_id, requester_id)

        for tr_input in fields.translations:
            existing = comic.translation_for(tr_input.language.strip().lower())
            if existing:
                existing.title = tr_input.title
                existing.synopsis = tr_input.synopsis
                existing.alt_title = tr_input.alt_title
            else:
                comic.translations.append(self._build_translation(comic.id, tr_input))

        # Full overwrite: omitted scalars fall back to their defaults.
        comic.author = fields.author
        comic.cover_image_url = fields.cover_image_url
        comic.banner_image_url = fields.banner_image_url
        comic.serialization_status = fields.serialization_status or DEFAULT_SERIALIZATION_STATUS
        comic.visibility = fields.visibility or DEFAULT_VISIBILITY
        comic.nsfw = fields.nsfw
        comic.schedule_publish_at = fields.schedule_publish_at
        comic.updated_at = self.clock.now()

        self.comic_repo.save(comic)
        return comic

    def delete_comic(self, comic_id: UUID, requester_id: UUID) -> None:
        self._get_owned(comic_id, requester_id)
        self.comic_repo.delete(comic_id)
        logger.info("Comic %s deleted by %s", comic_id, requester_id)

    def request_publish(self, comic_id: UUID, requester_id: UUID) -> Comic:
        comic = self._get_owned(comic_id, requester_id)

        comic = transition(comic, "pending_review", self.clock.now())
        self.comic_repo.save(comic)
        logger.info("Comic %s submitted for review", comic_id)
        return comic

    def create_chapter(
        self, comic_id: UUID, requester_id: UUID, fields: CreateChapterInput
    ) -> Chapter:
        comic = self._get_owned(comic_id, requester_id)

        if not any(t.title.strip() for t in fields.translations):
            raise InvalidInput("At least one chapter title is required")
        if fields.chapter_number == 0:
            raise InvalidInput("Chapter number is required")
        if not fields.image_urls:
            raise InvalidInput("At least one image is required")

        now = self.clock.now()
        chapter_id = uuid4()
        chapter = Chapter(
            id=chapter_id,
            comic_id=comic.id,
            chapter_number=fields.chapter_number,
            status="published",
            published_at=now,
            translations=[
                ChapterTranslation(chapter_id=chapter_id, language=t.language, title=t.title)
                for t in fields.translations
                if t.title.strip()
            ],
            images=[
                ChapterImage(chapter_id=chapter_id, image_url=url, order=i)
                for i, url in enumerate(fields.image_urls, start=1)
            ],
            created_at=now,
        )

        self.chapter_repo.save(chapter)
        return chapter

    # --- Admin actions ---

    def approve_comic(self, comic_id: UUID) -> Comic:
        """
        Move every draft asset of the comic to the public tier and publish it.

        Accepted from any status. Assets already in the public tier are left
        alone, so approving a published comic again moves nothing.

        Not transactional: the first failed move aborts with StorageFailure.
        Objects moved before it stay moved and nothing is persisted, so a
        retry asks the backend to move those objects again.
        """
        comic = self.get_comic(comic_id)

        comic.cover_image_url = self._promote_asset(comic.cover_image_url)
        comic.banner_image_url = self._promote_asset(comic.banner_image_url)
        for chapter in comic.chapters:
            for image in chapter.images:
                image.image_url = self._promote_asset(image.image_url)

        comic = transition(comic, "published", self.clock.now())
        self.comic_repo.save(comic)
        logger.info("Comic %s approved", comic_id)
        return comic

    def reject_comic(self, comic_id: UUID, reason: str) -> Comic:
        comic = self.get_comic(comic_id)

        # Accepted from any status, including published (takedown).
        comic = transition(comic, "rejected", self.clock.now(), rejection_reason=reason)
        self.comic_repo.save(comic)
        logger.info("Comic %s rejected: %s", comic_id, reason)
        return comic

    # --- Helpers ---

    def _get_owned(self, comic_id: UUID, requester_id: UUID) -> Comic:
        comic = self.get_comic(comic_id)
        if comic.creator_id != requester_id:
            raise Unauthorized("unauthorized action")
        return comic

    def _promote_asset(self, url: str) -> str:
        parts = split_public_url(url, self.bucket)
        if parts is None:
            return url
        prefix, src_path = parts
        if tier_of(src_path) is not AssetTier.DRAFT:
            return url

        dest_path = promote_path(src_path)
        try:
            self.storage.move(self.bucket, src_path, dest_path)
        except StorageFailure:
            logger.error("Failed to move %s to %s", src_path, dest_path)
            raise
        logger.info("Moved %s to %s", src_path, dest_path)
        return prefix + dest_path

    def _promote_to_creator(self, user_id: UUID) -> None:
        """
        Upgrade a plain user to creator after their comic is stored.

        Fire-and-forget: a persistence failure is logged and swallowed, the
        comic creation it follows has already succeeded.
        """
        try:
            user = self.user_repo.get_by_id(user_id)
            if not user or user.role != "user":
                return
            user.role = "creator"
            user.updated_at = self.clock.now()
            self.user_repo.save(user)
            logger.info("User %s promoted to creator", user_id)
        except PersistenceFailure:
            logger.warning("Could not promote user %s to creator", user_id, exc_info=True)

    def _build_translation(self, comic_id: UUID, tr_input: TranslationInput) -> ComicTranslation:
        language = tr_input.language.strip().lower()
        if not language:
            raise InvalidInput("Translation language is required")
        return ComicTranslation(
            comic_id=comic_id,
            language=language,
            title=tr_input.title,
            synopsis=tr_input.synopsis,
            alt_title=tr_input.alt_title,
        )

    def _build_translations(
        self, comic_id: UUID, inputs: list[TranslationInput]
    ) -> list[ComicTranslation]:
        translations: list[ComicTranslation] = []
        seen: set[str] = set()
        for tr_input in inputs:
            translation = self._build_translation(comic_id, tr_input)
            if translation.language in seen:
                raise InvalidInput(f"Duplicate translation for '{translation.language}'")
            seen.add(translation.language)
            translations.append(translation)
        return translations

    def _materialize_tags(self, inputs: list[TagInput], now: datetime) -> list[Tag]:
        tags: dict[str, Tag] = {}
        for tag_input in inputs:
            names = [n for n in tag_input.names if n.name.strip()]
            if not names:
                raise InvalidInput("Tag requires at least one name")

            slug = simple_slug(names[0].name)
            if not slug:
                raise InvalidInput(f"Tag name '{names[0].name}' has no usable characters")
            if slug in tags:
                continue

            existing = self.tag_repo.get_by_slug(slug)
            if existing:
                tags[slug] = existing
                continue

            tag_id = uuid4()
            tags[slug] = Tag(
                id=tag_id,
                slug=slug,
                type=tag_input.type,
                translations=[
                    TagTranslation(tag_id=tag_id, language=n.language, name=n.name)
                    for n in names
                ],
                created_at=now,
                updated_at=now,
            )
        return list(tags.values())
