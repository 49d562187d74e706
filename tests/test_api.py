"""Tests for the admin API in app.main."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.main import app
from grok_trends.dependencies import get_clock, get_config, get_llm, get_store
from grok_trends.exceptions import CompletionError
from grok_trends.models.story import Category, StoryStatus
from tests.conftest import draft_response, feed_item, make_story

AUTH = {"Authorization": "Bearer editor-token"}
POST_ID = "1851234567891234567"


@pytest.fixture
def client(store, llm, trends_config, clock):
    store.tokens["editor-token"] = {"uid": "editor-1", "email": "ada@techblit.com"}
    store.tokens["reader-token"] = {"uid": "reader-1"}
    store.set("users", "editor-1", {"role": "editor", "name": "Ada"})
    store.set("users", "reader-1", {"role": "viewer"})

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_llm] = lambda: llm
    app.dependency_overrides[get_config] = lambda: trends_config
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuth:
    def test_missing_token(self, client) -> None:
        response = client.get("/grok-trends/stories")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_invalid_token(self, client) -> None:
        response = client.get("/grok-trends/stories", headers={"Authorization": "Bearer forged"})
        assert response.status_code == 401

    def test_non_admin_role(self, client) -> None:
        response = client.get("/grok-trends/stories", headers={"Authorization": "Bearer reader-token"})
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Admin access required"


class TestStories:
    def test_list_envelope(self, client, story_store) -> None:
        story_store.create(make_story("older", 5))
        story_store.create(make_story("newer", 1))

        response = client.get("/grok-trends/stories", headers=AUTH)

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["message"] == "Stories retrieved successfully"
        assert "timestamp" in body
        assert [story["title"] for story in body["data"]] == ["newer", "older"]
        assert "x_post_ids" in body["data"][0]
        assert body["data"][0]["id"]

    def test_list_filters(self, client, story_store) -> None:
        story_store.create(make_story("a", 1, Category.FUNDING))
        story_store.create(make_story("b", 2, Category.SECURITY))

        response = client.get(
            "/grok-trends/stories", params={"category": "Security & Hacking", "status": "all"}, headers=AUTH,
        )

        assert [story["title"] for story in response.json()["data"]] == ["b"]

    def test_stats(self, client, story_store) -> None:
        story_store.create(make_story("a", 1, Category.FUNDING))

        data = client.get("/grok-trends/stats", headers=AUTH).json()["data"]

        assert data["total"] == 1
        assert data["new"] == 1
        assert data["byCategory"] == {"Funding & Investments": 1}


class TestStatusUpdate:
    def test_archive(self, client, store, story_store) -> None:
        story = story_store.create(make_story("a", 1))

        response = client.patch(f"/grok-trends/stories/{story.id}/status", json={"status": "archived"}, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "archived"
        assert store.get("grok_stories", story.id)["archivedBy"] == "editor-1"

    def test_invalid_status(self, client, story_store) -> None:
        story = story_store.create(make_story("a", 1))

        response = client.patch(f"/grok-trends/stories/{story.id}/status", json={"status": "deleted"}, headers=AUTH)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == 400

    def test_illegal_transition(self, client, story_store) -> None:
        story = story_store.create(make_story("a", 1, status=StoryStatus.PUBLISHED))

        response = client.patch(f"/grok-trends/stories/{story.id}/status", json={"status": "new"}, headers=AUTH)

        assert response.status_code == 409
        assert response.json()["error"]["details"]["currentStatus"] == "published"

    def test_unknown_story(self, client) -> None:
        response = client.patch("/grok-trends/stories/missing/status", json={"status": "archived"}, headers=AUTH)
        assert response.status_code == 404


class TestFetch:
    def test_manual_fetch(self, client, store, llm) -> None:
        llm.queue({"category": "Trending Stories", "stories": [feed_item(POST_ID), feed_item("11111111111111111")]})

        response = client.post("/grok-trends/fetch", json={"category": "Trending Stories"}, headers=AUTH)

        data = response.json()["data"]
        assert data["fetched"] == 2
        assert data["stored"] == 1
        assert data["skipped"] == 1
        assert data["draftsGenerated"] == 0
        assert store.docs("audit_logs")[-1]["actor"] == "editor-1"

    def test_invalid_category(self, client, llm) -> None:
        response = client.post("/grok-trends/fetch", json={"category": "Gossip"}, headers=AUTH)

        assert response.status_code == 400
        assert llm.calls == []

    def test_feed_failure(self, client, llm) -> None:
        llm.queue(CompletionError("Grok API error (500): boom"))

        response = client.post("/grok-trends/fetch", json={}, headers=AUTH)

        assert response.status_code == 500
        assert "boom" in response.json()["error"]["message"]

    def test_auto_drafts(self, client, llm) -> None:
        llm.queue(
            {"category": "Trending Stories", "stories": [feed_item(POST_ID, engagement_score=9000, age=timedelta(hours=1))]},
            draft_response(),
        )

        response = client.post(
            "/grok-trends/fetch",
            json={"category": "Trending Stories", "autoGenerateDrafts": True, "engagementThreshold": 5000},
            headers=AUTH,
        )

        assert response.json()["data"]["draftsGenerated"] == 1


class TestDraftAndPublish:
    def test_generate_then_publish(self, client, store, story_store, llm) -> None:
        story = story_store.create(make_story("a", 1, post_id=POST_ID))
        llm.queue(draft_response())

        draft = client.post(f"/grok-trends/stories/{story.id}/generate-draft", headers=AUTH).json()["data"]
        assert draft["title"] == "Paystack expands to new markets"
        assert draft["metaTitle"] == "Paystack expands to new markets"
        assert draft["recommendedImages"][0]["url"] == "https://cdn.example.org/paystack.jpg"

        again = client.post(f"/grok-trends/stories/{story.id}/generate-draft", headers=AUTH).json()["data"]
        assert again == draft
        assert len(llm.calls) == 1

        response = client.post(f"/grok-trends/stories/{story.id}/publish", json={"tags": ["paystack"]}, headers=AUTH)

        data = response.json()["data"]
        assert data["slug"] == "paystack-expands-to-new-markets"
        post = store.get("posts", data["postId"])
        assert post["tags"] == ["paystack"]
        assert post["author"]["name"] == "Ada"
        assert store.get("grok_stories", story.id)["status"] == "published"

    def test_draft_parse_failure(self, client, story_store, llm) -> None:
        story = story_store.create(make_story("a", 1, post_id=POST_ID))
        llm.queue("no json here")

        response = client.post(f"/grok-trends/stories/{story.id}/generate-draft", headers=AUTH)

        assert response.status_code == 500
        assert response.json()["success"] is False

    def test_publish_archived_conflicts(self, client, story_store) -> None:
        story = story_store.create(make_story("a", 1, status=StoryStatus.ARCHIVED))

        response = client.post(f"/grok-trends/stories/{story.id}/publish", json={}, headers=AUTH)

        assert response.status_code == 409


class TestAutoDraftConfig:
    def test_get_defaults(self, client) -> None:
        data = client.get("/grok-trends/config/auto-draft", headers=AUTH).json()["data"]
        assert data["enabled"] is False
        assert data["engagementThreshold"] == 5000
        assert data["categories"] == []

    def test_update(self, client, store) -> None:
        response = client.put(
            "/grok-trends/config/auto-draft",
            json={"enabled": True, "engagementThreshold": 1500, "categories": ["Breaking News"]},
            headers=AUTH,
        )

        data = response.json()["data"]
        assert data["enabled"] is True
        assert data["engagementThreshold"] == 1500
        assert data["updatedBy"] == "editor-1"
        assert store.get("grok_config", "auto_draft")["categories"] == ["Breaking News"]

    def test_update_rejects_unknown_category(self, client) -> None:
        response = client.put("/grok-trends/config/auto-draft", json={"categories": ["Gossip"]}, headers=AUTH)
        assert response.status_code == 400

    def test_update_rejects_negative_threshold(self, client) -> None:
        response = client.put("/grok-trends/config/auto-draft", json={"engagementThreshold": -1}, headers=AUTH)
        assert response.status_code == 400


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}
