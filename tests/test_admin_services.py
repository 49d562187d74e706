"""Tests for the auto-draft config, publish and audit services."""

import pytest

from grok_trends.exceptions import InvalidCategoryError, InvalidTransitionError, PublishValidationError
from grok_trends.models.story import Category, StoryStatus
from grok_trends.services.audit_service import AuditService
from grok_trends.services.auto_draft_config_service import AutoDraftConfigService
from grok_trends.services.publish_service import PublishOverrides, PublishService
from grok_trends.services.status_lifecycle import StatusLifecycleManager
from tests.conftest import make_story

POST_ID = "1851234567891234567"


class TestAuditService:
    def test_entry_shape(self, store, audit) -> None:
        audit.append("grok_story_status_updated", "editor-1", "story-1", {"ipAddress": "10.0.0.1"})

        entry = store.docs("audit_logs")[0]
        assert entry["action"] == "grok_story_status_updated"
        assert entry["actor"] == "editor-1"
        assert entry["target"] == "story-1"
        assert entry["ipAddress"] == "10.0.0.1"
        assert entry["userAgent"] is None
        assert entry["timestamp"] is not None

    def test_failures_are_not_raised(self, store, trends_config) -> None:
        store.fail_creates.add("audit_logs")
        AuditService(store, trends_config).append("x", "y", "z")


class TestAutoDraftConfigService:
    @pytest.fixture
    def service(self, store, audit, trends_config) -> AutoDraftConfigService:
        return AutoDraftConfigService(store, audit, trends_config)

    def test_defaults_when_missing(self, service) -> None:
        config = service.get()
        assert config.enabled is False
        assert config.engagement_threshold == 5000
        assert config.categories == []

    def test_defaults_when_unreadable(self, store, service, monkeypatch) -> None:
        def broken_get(collection, doc_id):
            raise RuntimeError("unavailable")

        monkeypatch.setattr(store, "get", broken_get)
        assert service.get().enabled is False

    def test_update_merges_and_audits(self, store, service) -> None:
        service.update("editor-1", enabled=True, categories=["Funding & Investments"])
        updated = service.update("editor-2", engagement_threshold=2500)

        assert updated.enabled is True
        assert updated.engagement_threshold == 2500
        assert updated.categories == ["Funding & Investments"]
        assert updated.updated_by == "editor-2"
        raw = store.get("grok_config", "auto_draft")
        assert raw["engagementThreshold"] == 2500
        actions = [entry["action"] for entry in store.docs("audit_logs")]
        assert actions == ["grok_auto_draft_config_updated", "grok_auto_draft_config_updated"]

    def test_rejects_unknown_category(self, store, service) -> None:
        with pytest.raises(InvalidCategoryError):
            service.update("editor-1", categories=["Gossip"])
        assert store.get("grok_config", "auto_draft") is None

    def test_applies_to(self, service) -> None:
        service.update("editor-1", enabled=True, categories=["Breaking News"])
        config = service.get()
        assert config.applies_to("Breaking News")
        assert not config.applies_to("Funding & Investments")


class TestPublishService:
    @pytest.fixture
    def service(self, store, story_store, audit, trends_config) -> PublishService:
        lifecycle = StatusLifecycleManager(story_store, audit)
        return PublishService(store, story_store, lifecycle, audit, trends_config)

    def test_publish_from_draft(self, store, story_store, service) -> None:
        story = story_store.create(make_story(
            "Moniepoint raises", 1, Category.FUNDING, StoryStatus.DRAFT_CREATED, post_id=POST_ID,
            draft_title="Moniepoint raises $110m", draft_body="<p>Body</p>", draft_excerpt="Excerpt",
            suggested_tags=["funding"],
        ))

        published = service.publish(story.id, "editor-1", author_name="Ada")

        assert published.slug == "moniepoint-raises-110m"
        assert published.to_dict()["url"] == "/moniepoint-raises-110m"
        post = store.get("posts", published.post_id)
        assert post["title"] == "Moniepoint raises $110m"
        assert post["category"] == "Funding"
        assert post["tags"] == ["funding"]
        assert post["author"] == {"uid": "editor-1", "name": "Ada"}
        assert post["source"]["storyId"] == story.id
        assert post["source"]["original_link"] == f"https://x.com/i/web/status/{POST_ID}"
        raw = store.get("grok_stories", story.id)
        assert raw["status"] == "published"
        assert raw["published_post_id"] == published.post_id
        assert raw["publishedBy"] == "editor-1"
        assert "grok_story_published" in [entry["action"] for entry in store.docs("audit_logs")]

    def test_overrides_and_unique_slug(self, store, story_store, service) -> None:
        store.create("posts", {"slug": "custom-title"})
        story = story_store.create(make_story("plain", 1, post_id=POST_ID))

        published = service.publish(
            story.id, "editor-1", PublishOverrides(title="Custom Title", content_html="<p>x</p>", excerpt="e"),
        )

        assert published.slug == "custom-title-1"
        post = store.get("posts", published.post_id)
        assert post["contentHtml"] == "<p>x</p>"
        assert post["excerpt"] == "e"

    def test_new_story_falls_back_to_summary(self, store, story_store, service) -> None:
        story = story_store.create(make_story("plain", 1, post_id=POST_ID))

        published = service.publish(story.id, "editor-1")

        post = store.get("posts", published.post_id)
        assert post["content"] == "plain summary"
        assert post["excerpt"] == "plain summary"

    def test_missing_content(self, store, story_store, service) -> None:
        story = story_store.create(make_story("plain", 1, post_id=POST_ID, summary=""))

        with pytest.raises(PublishValidationError):
            service.publish(story.id, "editor-1")
        assert store.docs("posts") == []

    def test_archived_story_cannot_publish(self, store, story_store, service) -> None:
        story = story_store.create(make_story("plain", 1, status=StoryStatus.ARCHIVED, post_id=POST_ID))

        with pytest.raises(InvalidTransitionError):
            service.publish(story.id, "editor-1")
        assert store.docs("posts") == []

    def test_concurrent_archive_logs_orphaned_post(self, store, story_store, service, monkeypatch, caplog) -> None:
        story = story_store.create(make_story("plain", 1, post_id=POST_ID))
        create_post = store.create

        def create_then_archive(collection, data):
            doc_id = create_post(collection, data)
            store.update("grok_stories", story.id, {"status": "archived"})
            return doc_id

        monkeypatch.setattr(store, "create", create_then_archive)

        with caplog.at_level("ERROR", logger="grok_trends.services.publish_service"):
            with pytest.raises(InvalidTransitionError):
                service.publish(story.id, "editor-1")

        [post_id] = store.collections["posts"]
        assert f"post {post_id} is orphaned" in caplog.text
        assert store.get("grok_stories", story.id)["status"] == "archived"

    def test_publish_uses_stored_draft_category(self, store, story_store, service) -> None:
        story = story_store.create(make_story(
            "plain", 1, status=StoryStatus.DRAFT_CREATED, post_id=POST_ID,
            draft_title="Draft", draft_body="<p>Body</p>", draft_excerpt="Excerpt", draft_category="Funding",
        ))

        published = service.publish(story.id, "editor-1")

        assert store.get("posts", published.post_id)["category"] == "Funding"
