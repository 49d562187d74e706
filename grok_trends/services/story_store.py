"""
Story persistence on top of the Firestore document store.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from google.api_core import exceptions as google_exceptions

from grok_trends.config import TrendsConfig, get_trends_config
from grok_trends.exceptions import StoryNotFoundError
from grok_trends.models.story import Story, StoryStatus

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

ALL = "all"


def _sort_key(story: Story) -> datetime:
    first_seen = story.first_seen_at
    if first_seen.tzinfo is None:
        first_seen = first_seen.replace(tzinfo=timezone.utc)
    return first_seen


def _is_index_error(error: Exception) -> bool:
    message = str(error).lower()
    return isinstance(error, google_exceptions.FailedPrecondition) or "index" in message


def _active_filter(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value == ALL:
        return None
    return value


class StoryStore:
    def __init__(self, store, config: Optional[TrendsConfig] = None):
        self.store = store
        self.config = config or get_trends_config()
        self.collection = self.config.stories_collection

    def create(self, story: Story) -> Story:
        story_id = self.store.create(self.collection, story.to_document())
        return story.model_copy(update={"id": story_id})

    def get(self, story_id: str) -> Story:
        data = self.store.get(self.collection, story_id)
        if data is None:
            raise StoryNotFoundError(story_id)
        return Story.from_document(story_id, data)

    def update_atomically(
        self,
        story_id: str,
        build_patch: Callable[[Story], Optional[Dict[str, Any]]],
    ) -> Optional[Dict[str, Any]]:
        """Apply a patch derived from the current story in one transaction."""

        def _build(data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
            if data is None:
                raise StoryNotFoundError(story_id)
            return build_patch(Story.from_document(story_id, data))

        return self.store.update_in_transaction(self.collection, story_id, _build)

    def find_by_source_post_id(self, post_id: str) -> Optional[Story]:
        results = self.store.query(
            self.collection,
            filters=[("x_post_ids", "array_contains", post_id)],
            limit=1,
        )
        if not results:
            return None
        doc_id, data = results[0]
        return Story.from_document(doc_id, data)

    def list_stories(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Story]:
        """
        List stories newest first.

        Filtered queries skip the store-side ordering (it would need a
        composite index) and are sorted in memory over a wider window.
        """
        status = _active_filter(status)
        category = _active_filter(category)
        final_limit = limit or self.config.default_story_limit
        offset = max(offset or 0, 0)

        filters = []
        if status:
            filters.append(("status", "==", status))
        if category:
            filters.append(("category", "==", category))

        has_filters = bool(filters)
        if has_filters:
            fetch_limit = self.config.filtered_fetch_window
            order_by = None
        else:
            fetch_limit = final_limit + offset
            order_by = ("first_seen_at", "desc")

        try:
            results = self.store.query(self.collection, filters=filters, order_by=order_by, limit=fetch_limit)
        except Exception as e:
            if order_by is None or not _is_index_error(e):
                raise
            logger.warning(f"Story query needs an index, sorting in memory instead: {e}")
            results = self.store.query(self.collection, filters=filters, limit=fetch_limit)

        stories = []
        for doc_id, data in results:
            try:
                stories.append(Story.from_document(doc_id, data))
            except ValueError as e:
                logger.warning(f"Skipping unreadable story {doc_id}: {e}")

        stories.sort(key=_sort_key, reverse=True)
        return stories[offset:offset + final_limit]

    def get_stats(self) -> Dict[str, Any]:
        """Counts by status and by category over the whole collection."""
        stats: Dict[str, Any] = {"total": 0, "byCategory": {}}
        for status in StoryStatus.values():
            stats[status] = 0

        for _, data in self.store.query(self.collection):
            stats["total"] += 1
            status = data.get("status")
            if status in StoryStatus.values():
                stats[status] += 1
            category = data.get("category")
            stats["byCategory"][category] = stats["byCategory"].get(category, 0) + 1

        return stats
