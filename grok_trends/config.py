"""
Pipeline Configuration

Typed access to the shared configuration for the Grok Trends pipeline.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

from techblit_config import ConfigManager, get_config

load_dotenv()


class TrendsConfig:
    """Pipeline-specific configuration wrapper with convenience methods."""

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or get_config()

        required_keys = [
            "llm.xai.url",
            "llm.xai.model",
            "firestore.collections.stories",
        ]

        try:
            self.config.validate_required_keys(required_keys)
        except KeyError as e:
            raise RuntimeError(f"Missing required pipeline configuration: {e}")

    # LLM Configuration
    @property
    def llm_provider(self) -> str:
        return os.getenv("LLM_PROVIDER", self.config.get("llm.provider", "xai")).lower()

    @property
    def xai_url(self) -> str:
        return os.getenv("GROK_API_URL", self.config.get("llm.xai.url"))

    @property
    def xai_model(self) -> str:
        return self.config.get("llm.xai.model")

    @property
    def xai_temperature(self) -> float:
        return self.config.get("llm.xai.temperature", 0.3)

    @property
    def xai_timeout(self) -> int:
        return self.config.get("llm.xai.timeout", 120)

    @property
    def gemini_model(self) -> str:
        return self.config.get("llm.gemini.model", "gemini-2.0-flash")

    @property
    def gemini_temperature(self) -> float:
        return self.config.get("llm.gemini.temperature", 0.4)

    @property
    def gemini_location(self) -> str:
        return os.getenv("GOOGLE_CLOUD_LOCATION", self.config.get("llm.gemini.location", "us-central1"))

    # Firestore collections
    @property
    def stories_collection(self) -> str:
        return self.config.get("firestore.collections.stories")

    @property
    def config_collection(self) -> str:
        return self.config.get("firestore.collections.config", "grok_config")

    @property
    def audit_logs_collection(self) -> str:
        return self.config.get("firestore.collections.audit_logs", "audit_logs")

    @property
    def posts_collection(self) -> str:
        return self.config.get("firestore.collections.posts", "posts")

    @property
    def users_collection(self) -> str:
        return self.config.get("firestore.collections.users", "users")

    # Limits
    @property
    def default_story_limit(self) -> int:
        return self.config.get("limits.stories.default_limit", 100)

    @property
    def filtered_fetch_window(self) -> int:
        return self.config.get("limits.stories.filtered_fetch_window", 1000)

    @property
    def max_recommended_images(self) -> int:
        return self.config.get("limits.drafts.max_recommended_images", 5)

    @property
    def meta_title_length(self) -> int:
        return self.config.get("limits.drafts.meta_title_length", 60)

    @property
    def meta_description_length(self) -> int:
        return self.config.get("limits.drafts.meta_description_length", 160)

    # Algorithms
    @property
    def default_engagement_threshold(self) -> float:
        return self.config.get("algorithms.auto_draft.default_engagement_threshold", 5000)

    @property
    def schedule_timezone(self) -> str:
        return self.config.get("algorithms.scheduling.timezone", "Africa/Lagos")

    @property
    def breaking_news_hours(self) -> List[int]:
        return [
            self.config.get("algorithms.scheduling.breaking_news_hours.start", 8),
            self.config.get("algorithms.scheduling.breaking_news_hours.end", 20),
        ]

    @property
    def admin_roles(self) -> List[str]:
        return self.config.get("api.admin_roles", ["super_admin", "editor"])

    @property
    def cors_origins(self) -> List[str]:
        return self.config.get("api.cors.allowed_origins", [])

    # API Keys (environment only)
    @property
    def xai_api_key(self) -> str:
        return os.getenv("XAI_API_KEY") or os.getenv("GROK_API_KEY", "")

    @property
    def google_cloud_project(self) -> str:
        return os.getenv("GOOGLE_CLOUD_PROJECT", "")


# Global instance
_trends_config: Optional[TrendsConfig] = None


def get_trends_config() -> TrendsConfig:
    """Get the global pipeline configuration instance."""
    global _trends_config
    if _trends_config is None:
        _trends_config = TrendsConfig()
    return _trends_config


def reset_trends_config() -> None:
    """Drop the cached pipeline configuration (mainly for testing)."""
    global _trends_config
    _trends_config = None
