"""
Story status transitions.

    new -> draft_created -> published
    new | draft_created | published -> archived
    archived -> new  (restore)

Publishing straight from new is allowed when the caller supplies the post
content. Every transition writes the status, updatedAt and its own
actor/timestamp stamps in a single transaction.
"""
import logging
from typing import Any, Dict, Optional, Union

from grok_trends.exceptions import InvalidStatusError, InvalidTransitionError
from grok_trends.models.story import Story, StoryStatus, utcnow
from grok_trends.services.audit_service import AuditService
from grok_trends.services.story_store import StoryStore

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    StoryStatus.NEW: {StoryStatus.DRAFT_CREATED, StoryStatus.PUBLISHED, StoryStatus.ARCHIVED},
    StoryStatus.DRAFT_CREATED: {StoryStatus.PUBLISHED, StoryStatus.ARCHIVED},
    StoryStatus.PUBLISHED: {StoryStatus.ARCHIVED},
    StoryStatus.ARCHIVED: {StoryStatus.NEW},
}


def parse_status(value: Union[str, StoryStatus, None]) -> StoryStatus:
    """Map a raw status value onto the enumeration or raise InvalidStatusError."""
    if isinstance(value, StoryStatus):
        return value
    try:
        return StoryStatus((value or "").strip())
    except ValueError:
        raise InvalidStatusError(f"Invalid status: {value!r}. Expected one of {StoryStatus.values()}")


def can_transition(current: Union[str, StoryStatus], target: Union[str, StoryStatus]) -> bool:
    return StoryStatus(target) in ALLOWED_TRANSITIONS.get(StoryStatus(current), set())


def transition_patch(
    story: Story,
    target: StoryStatus,
    actor: str,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the document fields for moving story to target, or raise."""
    current = StoryStatus(story.status)
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)

    now = utcnow()
    patch: Dict[str, Any] = {"status": target.value, "updatedAt": now}

    if target == StoryStatus.ARCHIVED:
        patch["archivedAt"] = now
        patch["archivedBy"] = actor
    elif target == StoryStatus.NEW and current == StoryStatus.ARCHIVED:
        patch["restoredAt"] = now
        patch["restoredBy"] = actor
    elif target == StoryStatus.PUBLISHED:
        patch["publishedAt"] = now
        patch["publishedBy"] = actor

    if extra:
        patch.update(extra)
    return patch


class StatusLifecycleManager:
    def __init__(self, story_store: StoryStore, audit: AuditService):
        self.story_store = story_store
        self.audit = audit

    def transition(
        self,
        story_id: str,
        status: Union[str, StoryStatus, None],
        actor: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Story:
        """
        Move a story to a new status.

        Raises:
            InvalidStatusError: status is not a known value (nothing written)
            InvalidTransitionError: the lifecycle does not allow the move
            StoryNotFoundError: no such story
        """
        target = parse_status(status)
        previous: Dict[str, str] = {}

        def _build(story: Story) -> Optional[Dict[str, Any]]:
            previous["status"] = story.status
            if StoryStatus(story.status) == target:
                return None
            return transition_patch(story, target, actor, extra)

        patch = self.story_store.update_atomically(story_id, _build)

        if patch:
            logger.info(f"Story {story_id} moved from {previous['status']} to {target.value} by {actor}")
            self.audit.append("grok_story_status_updated", actor, story_id, {
                "oldStatus": previous["status"],
                "newStatus": target.value,
            })
        else:
            logger.info(f"Story {story_id} already {target.value}, nothing to do")

        return self.story_store.get(story_id)

    def archive(self, story_id: str, actor: str) -> Story:
        return self.transition(story_id, StoryStatus.ARCHIVED, actor)

    def restore(self, story_id: str, actor: str) -> Story:
        return self.transition(story_id, StoryStatus.NEW, actor)

    def mark_published(self, story_id: str, post_id: str, actor: str) -> Story:
        return self.transition(story_id, StoryStatus.PUBLISHED, actor, extra={"published_post_id": post_id})
