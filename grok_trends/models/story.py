from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoryStatus(str, Enum):
    NEW = "new"
    DRAFT_CREATED = "draft_created"
    PUBLISHED = "published"
    ARCHIVED = "archived"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class Category(str, Enum):
    BREAKING_NEWS = "Breaking News"
    TRENDING = "Trending Stories"
    COMPANY_NEWS = "Company News"
    PRODUCT_LAUNCHES = "Product Launches & Reviews"
    FUNDING = "Funding & Investments"
    REGULATORY = "Regulatory & Policy Changes"
    SECURITY = "Security & Hacking"
    EMERGING_TECH = "Emerging Technologies"

    @classmethod
    def values(cls) -> List[str]:
        return [category.value for category in cls]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Category"]:
        """Return the matching category or None for unknown values."""
        if not value:
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None


class RecommendedImage(BaseModel):
    url: str
    description: str = ""
    source: str = ""


class Story(BaseModel):
    """A curated news item as stored in the grok_stories collection.

    Attribute names are snake_case; aliases are the document field names
    the admin UI already reads.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, validate_default=True)

    id: Optional[str] = None
    title: str
    summary: str = ""
    category: Category
    source_post_ids: List[str] = Field(default_factory=list, alias="x_post_ids")
    primary_link: str = ""
    engagement_score: float = 0
    author_handles: List[str] = Field(default_factory=list)
    media_urls: List[str] = Field(default_factory=list)
    first_seen_at: datetime
    fetched_at: datetime
    status: StoryStatus = StoryStatus.NEW

    draft_title: Optional[str] = None
    draft_body: Optional[str] = None
    draft_excerpt: Optional[str] = None
    draft_meta_title: Optional[str] = None
    draft_meta_description: Optional[str] = None
    draft_category: Optional[str] = None
    suggested_tags: Optional[List[str]] = None
    recommended_images: Optional[List[RecommendedImage]] = None
    draft_generated_at: Optional[datetime] = Field(default=None, alias="draftGeneratedAt")
    draft_generated_by: Optional[str] = Field(default=None, alias="draftGeneratedBy")

    published_post_id: Optional[str] = None
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")
    published_by: Optional[str] = Field(default=None, alias="publishedBy")
    archived_at: Optional[datetime] = Field(default=None, alias="archivedAt")
    archived_by: Optional[str] = Field(default=None, alias="archivedBy")
    restored_at: Optional[datetime] = Field(default=None, alias="restoredAt")
    restored_by: Optional[str] = Field(default=None, alias="restoredBy")

    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @field_validator("source_post_ids", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> List[str]:
        if not value:
            return []
        return [str(item).strip() for item in value if item is not None]

    @property
    def has_draft(self) -> bool:
        return bool(self.draft_title) and bool(self.draft_body)

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Story":
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> Dict[str, Any]:
        """Firestore representation (document id excluded, unset fields omitted)."""
        return self.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)


class Draft(BaseModel):
    """A generated blog-post draft as returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    content: str
    excerpt: str = ""
    meta_title: str = Field(default="", alias="metaTitle")
    meta_description: str = Field(default="", alias="metaDescription")
    tags: List[str] = Field(default_factory=list)
    category: str = ""
    recommended_images: List[RecommendedImage] = Field(default_factory=list, alias="recommendedImages")
    slug: str = ""
