from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ENGAGEMENT_THRESHOLD = 5000


@dataclass
class FetchOptions:
    auto_generate_drafts: bool = False
    engagement_threshold: float = DEFAULT_ENGAGEMENT_THRESHOLD


@dataclass
class ItemOutcome:
    """What happened to one feed candidate."""
    title: str
    stored: bool
    story_id: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[str] = None
    draft_generated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        if self.stored:
            return {"id": self.story_id, "title": self.title}
        data = {"title": self.title, "reason": self.reason}
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class FetchResult:
    category: str
    fetched_count: int = 0
    outcomes: List[ItemOutcome] = field(default_factory=list)

    @property
    def stored_items(self) -> List[ItemOutcome]:
        return [outcome for outcome in self.outcomes if outcome.stored]

    @property
    def skipped_items(self) -> List[ItemOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.stored]

    @property
    def stored_count(self) -> int:
        return len(self.stored_items)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_items)

    @property
    def drafts_generated(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.draft_generated)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "fetched": self.fetched_count,
            "stored": self.stored_count,
            "skipped": self.skipped_count,
            "draftsGenerated": self.drafts_generated,
            "stories": [outcome.to_dict() for outcome in self.stored_items],
            "skipped_stories": [outcome.to_dict() for outcome in self.skipped_items],
        }


class AutoDraftConfig(BaseModel):
    """Persisted auto-draft settings (grok_config/auto_draft)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    enabled: bool = False
    engagement_threshold: float = Field(default=DEFAULT_ENGAGEMENT_THRESHOLD, alias="engagementThreshold")
    categories: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    updated_by: Optional[str] = Field(default=None, alias="updatedBy")

    @field_validator("enabled", mode="before")
    @classmethod
    def _falsy_to_false(cls, value: Any) -> bool:
        return bool(value) if value is not None else False

    @field_validator("engagement_threshold", mode="before")
    @classmethod
    def _zero_to_default(cls, value: Any) -> float:
        return value or DEFAULT_ENGAGEMENT_THRESHOLD

    @field_validator("categories", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> List[str]:
        return list(value) if value else []

    def applies_to(self, category: str) -> bool:
        """True when auto-drafting is on for this category."""
        if not self.enabled:
            return False
        return not self.categories or category in self.categories
