import json
import logging
import re
from datetime import datetime
from typing import Any, Dict, Optional

from grok_trends.exceptions import CompletionError
from grok_trends.models.feed import FeedResponse
from grok_trends.models.story import Category
from grok_trends.pipeline.prompts import SYSTEM_PROMPT, build_feed_prompt

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse model output as a JSON object.

    Falls back to the first fenced ```json block when the text is not JSON
    on its own. Returns None when neither yields an object.
    """
    if not text:
        return None

    try:
        data = json.loads(text)
    except ValueError:
        match = _FENCED_JSON.search(text)
        if not match:
            return None
        try:
            data = json.loads(match.group(1))
        except ValueError:
            return None

    return data if isinstance(data, dict) else None


class FeedService:
    """Fetches candidate stories for a category from the trends model."""

    def __init__(self, llm):
        self.llm = llm

    def fetch(self, category: Category, now: datetime) -> FeedResponse:
        prompt = build_feed_prompt(category, now)
        logger.info(f"Requesting trends feed for {category.value}")

        response_text = self.llm.complete(SYSTEM_PROMPT, prompt)
        data = extract_json_object(response_text)
        if data is None:
            raise CompletionError(f"Trends feed for {category.value} did not return a JSON object")

        feed = FeedResponse.model_validate(data)
        logger.info(f"Trends feed returned {len(feed.stories)} candidates for {category.value}")
        return feed
