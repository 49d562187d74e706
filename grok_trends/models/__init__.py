from grok_trends.models.story import Category, Draft, RecommendedImage, Story, StoryStatus, utcnow
from grok_trends.models.feed import DraftPayload, FeedItem, FeedResponse
from grok_trends.models.fetch import AutoDraftConfig, FetchOptions, FetchResult, ItemOutcome

__all__ = [
    "AutoDraftConfig",
    "Category",
    "Draft",
    "DraftPayload",
    "FeedItem",
    "FeedResponse",
    "FetchOptions",
    "FetchResult",
    "ItemOutcome",
    "RecommendedImage",
    "Story",
    "StoryStatus",
    "utcnow",
]
