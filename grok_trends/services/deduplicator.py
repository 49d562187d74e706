import logging
from typing import Sequence

from grok_trends.services.story_store import StoryStore

logger = logging.getLogger(__name__)


class Deduplicator:
    """Detects candidates whose lead source post is already stored.

    Only the first post id is looked up: the feed de-duplicates on its side
    and one array-contains query per candidate keeps fetches cheap.
    """

    def __init__(self, story_store: StoryStore):
        self.story_store = story_store

    def is_duplicate(self, source_post_ids: Sequence[str]) -> bool:
        if not source_post_ids:
            return False

        existing = self.story_store.find_by_source_post_id(source_post_ids[0])
        if existing is not None:
            logger.info(f"Post {source_post_ids[0]} already stored as story {existing.id}")
            return True
        return False
