"""
Validated shapes for model output.

Both the feed response and the draft completion come back as loosely-typed
JSON. Every field here is optional or coerced so that one malformed value
never sinks the whole payload; callers decide what is required.
"""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from grok_trends.models.story import RecommendedImage


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


class FeedItem(BaseModel):
    """One candidate story from the trends feed."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    summary: Optional[str] = None
    x_post_ids: List[str] = Field(default_factory=list)
    primary_link: Optional[str] = None
    engagement_score: float = 0
    first_seen_at: Optional[Union[datetime, str]] = None
    author_handles: List[str] = Field(default_factory=list)
    media_urls: List[str] = Field(default_factory=list)

    @field_validator("x_post_ids", "author_handles", "media_urls", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return _string_list(value)

    @field_validator("title", "summary", "primary_link", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("engagement_score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> float:
        try:
            score = float(value)
        except (TypeError, ValueError):
            return 0
        return score if score > 0 else 0

    @field_validator("first_seen_at", mode="before")
    @classmethod
    def _keep_raw_timestamp(cls, value: Any) -> Optional[Union[datetime, str]]:
        if value is None or isinstance(value, datetime):
            return value
        return str(value)


class FeedResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    category: Optional[str] = None
    stories: List[FeedItem] = Field(default_factory=list)

    @field_validator("stories", mode="before")
    @classmethod
    def _drop_non_objects(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class DraftPayload(BaseModel):
    """The structured blog draft requested from the model."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    metaTitle: Optional[str] = None
    metaDescription: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    suggestedCategory: Optional[str] = None
    recommendedImages: List[RecommendedImage] = Field(default_factory=list)

    @field_validator("title", "content", "excerpt", "metaTitle", "metaDescription", "suggestedCategory", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> List[str]:
        return _string_list(value)

    @field_validator("recommendedImages", mode="before")
    @classmethod
    def _keep_images_with_url(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        images = []
        for item in value:
            if isinstance(item, dict) and isinstance(item.get("url"), str) and item["url"].strip():
                images.append({
                    "url": item["url"].strip(),
                    "description": str(item.get("description") or ""),
                    "source": str(item.get("source") or ""),
                })
        return images
