"""Shared fixtures: an in-memory Firestore-shaped store and a scripted model."""

from __future__ import annotations

import copy
import itertools
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest
from google.api_core import exceptions as google_exceptions

from grok_trends.config import TrendsConfig
from grok_trends.models.story import Category, Story, StoryStatus
from grok_trends.services.audit_service import AuditService
from grok_trends.services.story_store import StoryStore
from techblit_config import ConfigManager

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

NOW = datetime(2025, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


class FakeDocumentStore:
    """Dict-backed store with the same surface as FirebaseService.

    Queries that combine filters with an ordering fail the way Firestore does
    without a composite index. Set fail_ordered_queries to make every ordered
    query fail.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {}
        self.tokens: dict[str, dict] = {}
        self.fail_ordered_queries = False
        self.fail_creates: set[str] = set()
        self.queries: list[dict] = []
        self._ids = itertools.count(1)

    def _collection(self, name: str) -> dict[str, dict]:
        return self.collections.setdefault(name, {})

    def docs(self, collection: str) -> list[dict]:
        return [copy.deepcopy(data) for data in self._collection(collection).values()]

    def verify_id_token(self, id_token: str) -> dict:
        if id_token not in self.tokens:
            raise ValueError("Invalid authentication token: unknown token")
        return dict(self.tokens[id_token])

    def create(self, collection: str, data: dict[str, Any]) -> str:
        if collection in self.fail_creates:
            raise RuntimeError(f"write to {collection} failed")
        doc_id = f"{collection}-{next(self._ids)}"
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    def get(self, collection: str, doc_id: str) -> dict | None:
        data = self._collection(collection).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        docs = self._collection(collection)
        if merge and doc_id in docs:
            docs[doc_id].update(copy.deepcopy(data))
        else:
            docs[doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, patch: dict[str, Any]) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise google_exceptions.NotFound(f"No document to update: {collection}/{doc_id}")
        docs[doc_id].update(copy.deepcopy(patch))

    def query(self, collection, filters=(), order_by=None, limit=None):
        self.queries.append({"collection": collection, "filters": list(filters), "order_by": order_by, "limit": limit})
        if order_by and (filters or self.fail_ordered_queries):
            raise google_exceptions.FailedPrecondition("The query requires an index.")

        results = []
        for doc_id, data in self._collection(collection).items():
            if all(self._matches(data, field, op, value) for field, op, value in filters):
                results.append((doc_id, copy.deepcopy(data)))

        if order_by:
            field, direction = order_by
            results.sort(key=lambda item: item[1].get(field), reverse=direction == "desc")
        if limit:
            results = results[:limit]
        return results

    @staticmethod
    def _matches(data: dict, field: str, op: str, value: Any) -> bool:
        if op == "==":
            return data.get(field) == value
        if op == "array_contains":
            return value in (data.get(field) or [])
        raise ValueError(f"Unsupported operator: {op}")

    def update_in_transaction(self, collection, doc_id, build_patch: Callable):
        patch = build_patch(self.get(collection, doc_id))
        if patch:
            self.update(collection, doc_id, patch)
        return patch


class ScriptedLLM:
    """Completion client that answers from a queue and records each prompt."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str]] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if not self.responses:
            raise AssertionError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, (dict, list)):
            return json.dumps(response)
        return response


def iso(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def feed_item(post_id: str = "1851234567891234567", age: timedelta = timedelta(minutes=30), **overrides) -> dict:
    item = {
        "title": f"Story {post_id}",
        "summary": "Something happened in Lagos tech.",
        "x_post_ids": [post_id],
        "primary_link": f"https://x.com/techcabal/status/{post_id}",
        "engagement_score": 1200,
        "first_seen_at": iso(NOW - age),
        "author_handles": ["@techcabal"],
        "media_urls": [],
    }
    item.update(overrides)
    return item


def draft_response(**overrides) -> dict:
    response = {
        "title": "Paystack expands to new markets",
        "content": "<p>Paystack has announced an expansion.</p><h2>Context</h2><p>More detail.</p>",
        "excerpt": "Paystack is expanding its reach across Africa.",
        "metaTitle": "Paystack expands to new markets",
        "metaDescription": "Paystack is expanding its reach across Africa.",
        "tags": ["Paystack", "fintech"],
        "suggestedCategory": "Tech News",
        "recommendedImages": [
            {"url": "https://cdn.example.org/paystack.jpg", "description": "Logo", "source": "Company website"},
        ],
    }
    response.update(overrides)
    return response


@pytest.fixture
def config_manager() -> ConfigManager:
    return ConfigManager(config_dir=CONFIG_DIR, environment="test")


@pytest.fixture
def trends_config(config_manager: ConfigManager) -> TrendsConfig:
    return TrendsConfig(config_manager)


@pytest.fixture
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def story_store(store: FakeDocumentStore, trends_config: TrendsConfig) -> StoryStore:
    return StoryStore(store, trends_config)


@pytest.fixture
def audit(store: FakeDocumentStore, trends_config: TrendsConfig) -> AuditService:
    return AuditService(store, trends_config)


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


def make_story(title: str, hours_ago: float, category=Category.TRENDING, status=StoryStatus.NEW, post_id=None, **fields) -> Story:
    values = {
        "title": title,
        "summary": f"{title} summary",
        "category": category,
        "source_post_ids": [post_id or f"18512{int(hours_ago * 10):014d}"],
        "first_seen_at": NOW - timedelta(hours=hours_ago),
        "fetched_at": NOW,
        "status": status,
    }
    values.update(fields)
    return Story(**values)
