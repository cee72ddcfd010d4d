from datetime import datetime
from typing import Any

from toonshelf.domain.entities import Comic, ComicStatus
from toonshelf.domain.errors import InvalidTransition

# Creator-initiated transitions.
ALLOWED_TRANSITIONS: dict[ComicStatus, frozenset[ComicStatus]] = {
    "draft": frozenset({"pending_review"}),
    "rejected": frozenset({"pending_review"}),
}

# Admin verdicts are accepted from any status, including a repeat of the current one.
ADMIN_VERDICTS: frozenset[ComicStatus] = frozenset({"published", "rejected"})


def can_transition(current: ComicStatus, new: ComicStatus) -> bool:
    """
    Determine if a moderation status change is allowed.
    """
    if new in ADMIN_VERDICTS:
        return True
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(
    comic: Comic,
    new_status: ComicStatus,
    now: datetime,
    **updates: Any,
) -> Comic:
    """
    Return a NEW Comic with the updated status and timestamps.
    Raises InvalidTransition if the change is not allowed.
    """
    if not can_transition(comic.status, new_status):
        if new_status == "pending_review":
            raise InvalidTransition(
                "only drafts or rejected comics can be submitted for review"
            )
        raise InvalidTransition(f"Invalid transition from {comic.status} to {new_status}")

    changes: dict[str, Any] = {"status": new_status, "updated_at": now}

    if new_status == "published":
        changes["approved_at"] = now
        changes["visibility"] = "public"

    if new_status == "pending_review":
        # A resubmission clears the previous verdict.
        changes["rejection_reason"] = None

    changes.update(updates)
    return comic.model_copy(update=changes)
