"""Tests for grok_trends.services.status_lifecycle."""

import pytest

from grok_trends.exceptions import InvalidStatusError, InvalidTransitionError, StoryNotFoundError
from grok_trends.models.story import StoryStatus
from grok_trends.services.status_lifecycle import StatusLifecycleManager, can_transition, parse_status
from tests.conftest import make_story


@pytest.fixture
def lifecycle(story_store, audit) -> StatusLifecycleManager:
    return StatusLifecycleManager(story_store, audit)


def audit_actions(store) -> list:
    return [entry["action"] for entry in store.docs("audit_logs")]


class TestTransitionTable:
    @pytest.mark.parametrize("current, target", [
        ("new", "draft_created"),
        ("new", "published"),
        ("new", "archived"),
        ("draft_created", "published"),
        ("draft_created", "archived"),
        ("published", "archived"),
        ("archived", "new"),
    ])
    def test_allowed(self, current: str, target: str) -> None:
        assert can_transition(current, target)

    @pytest.mark.parametrize("current, target", [
        ("published", "new"),
        ("published", "draft_created"),
        ("archived", "published"),
        ("archived", "draft_created"),
        ("draft_created", "new"),
    ])
    def test_rejected(self, current: str, target: str) -> None:
        assert not can_transition(current, target)

    def test_parse_status(self) -> None:
        assert parse_status(" archived ") == StoryStatus.ARCHIVED
        with pytest.raises(InvalidStatusError):
            parse_status("deleted")
        with pytest.raises(InvalidStatusError):
            parse_status(None)


class TestTransition:
    def test_archive_stamps_actor(self, store, story_store, lifecycle) -> None:
        story = story_store.create(make_story("a", 1))

        updated = lifecycle.archive(story.id, "editor-1")

        assert updated.status == "archived"
        assert updated.archived_by == "editor-1"
        assert updated.archived_at is not None
        assert updated.restored_at is None
        entry = store.docs("audit_logs")[-1]
        assert entry["action"] == "grok_story_status_updated"
        assert entry["actor"] == "editor-1"
        assert entry["target"] == story.id
        assert entry["metadata"] == {"oldStatus": "new", "newStatus": "archived"}

    def test_restore_stamps_and_keeps_other_fields(self, store, story_store, lifecycle) -> None:
        story = story_store.create(make_story("a", 1))
        lifecycle.archive(story.id, "editor-1")
        before = store.get("grok_stories", story.id)

        lifecycle.restore(story.id, "editor-2")

        after = store.get("grok_stories", story.id)
        assert after["status"] == "new"
        assert after["restoredBy"] == "editor-2"
        assert "restoredAt" in after
        for key, value in before.items():
            if key not in ("status", "updatedAt"):
                assert after[key] == value

    def test_invalid_status_leaves_story_untouched(self, store, story_store, lifecycle) -> None:
        story = story_store.create(make_story("a", 1))
        before = store.get("grok_stories", story.id)

        with pytest.raises(InvalidStatusError):
            lifecycle.transition(story.id, "deleted", "editor-1")

        assert store.get("grok_stories", story.id) == before
        assert audit_actions(store) == []

    def test_illegal_transition(self, store, story_store, lifecycle) -> None:
        story = story_store.create(make_story("a", 1, status=StoryStatus.PUBLISHED))

        with pytest.raises(InvalidTransitionError) as excinfo:
            lifecycle.transition(story.id, "new", "editor-1")

        assert excinfo.value.current == "published"
        assert store.get("grok_stories", story.id)["status"] == "published"

    def test_same_status_is_a_no_op(self, store, story_store, lifecycle) -> None:
        story = story_store.create(make_story("a", 1, status=StoryStatus.ARCHIVED))

        lifecycle.archive(story.id, "editor-1")

        assert "archivedBy" not in store.get("grok_stories", story.id)
        assert audit_actions(store) == []

    def test_mark_published_records_post(self, story_store, lifecycle) -> None:
        story = story_store.create(make_story("a", 1, status=StoryStatus.DRAFT_CREATED))

        updated = lifecycle.mark_published(story.id, "posts-9", "editor-1")

        assert updated.status == "published"
        assert updated.published_post_id == "posts-9"
        assert updated.published_by == "editor-1"

    def test_missing_story(self, lifecycle) -> None:
        with pytest.raises(StoryNotFoundError):
            lifecycle.archive("missing", "editor-1")
