"""
Request bodies for the admin API. Field names follow the admin UI's JSON.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


class FetchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: Optional[str] = None
    auto_generate_drafts: bool = Field(default=False, alias="autoGenerateDrafts")
    engagement_threshold: Optional[float] = Field(default=None, alias="engagementThreshold")


class PublishRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content: Optional[str] = None
    content_html: Optional[str] = Field(default=None, alias="contentHtml")
    excerpt: Optional[str] = None
    tags: Optional[List[str]] = None
    category: Optional[str] = None
    meta_title: Optional[str] = Field(default=None, alias="metaTitle")
    meta_description: Optional[str] = Field(default=None, alias="metaDescription")
    canonical: Optional[str] = None
    featured_image: Optional[Dict[str, Any]] = Field(default=None, alias="featuredImage")


class AutoDraftConfigUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: Optional[bool] = None
    engagement_threshold: Optional[float] = Field(default=None, alias="engagementThreshold")
    categories: Optional[List[str]] = None
