import logging
from typing import Any, Dict, List, Optional

from grok_trends.config import TrendsConfig, get_trends_config
from grok_trends.exceptions import InvalidCategoryError
from grok_trends.models.fetch import AutoDraftConfig
from grok_trends.models.story import Category, utcnow
from grok_trends.services.audit_service import AuditService

logger = logging.getLogger(__name__)

AUTO_DRAFT_DOC_ID = "auto_draft"


class AutoDraftConfigService:
    """Reads and writes the persisted auto-draft settings document."""

    def __init__(self, store, audit: AuditService, config: Optional[TrendsConfig] = None):
        self.store = store
        self.audit = audit
        self.config = config or get_trends_config()

    def defaults(self) -> AutoDraftConfig:
        return AutoDraftConfig(
            enabled=False,
            engagement_threshold=self.config.default_engagement_threshold,
            categories=[],
        )

    def get(self) -> AutoDraftConfig:
        """Current settings; defaults when the document is missing or unreadable."""
        try:
            data = self.store.get(self.config.config_collection, AUTO_DRAFT_DOC_ID)
        except Exception as e:
            logger.warning(f"Could not read auto-draft config, using defaults: {e}")
            return self.defaults()

        if data is None:
            return self.defaults()

        try:
            return AutoDraftConfig.model_validate(data)
        except ValueError as e:
            logger.warning(f"Auto-draft config document is malformed, using defaults: {e}")
            return self.defaults()

    def update(
        self,
        actor: str,
        enabled: Optional[bool] = None,
        engagement_threshold: Optional[float] = None,
        categories: Optional[List[str]] = None,
    ) -> AutoDraftConfig:
        """
        Merge the given settings into the stored document.

        Raises:
            InvalidCategoryError: a category is not one of the story categories
            ValueError: a negative engagement threshold
        """
        patch: Dict[str, Any] = {}
        if enabled is not None:
            patch["enabled"] = bool(enabled)
        if engagement_threshold is not None:
            if engagement_threshold < 0:
                raise ValueError("engagementThreshold must be zero or positive")
            patch["engagementThreshold"] = engagement_threshold
        if categories is not None:
            unknown = [category for category in categories if Category.parse(category) is None]
            if unknown:
                raise InvalidCategoryError(f"Invalid categories: {unknown}. Expected any of {Category.values()}")
            patch["categories"] = [Category.parse(category).value for category in categories]

        patch["updatedAt"] = utcnow()
        patch["updatedBy"] = actor

        self.store.set(self.config.config_collection, AUTO_DRAFT_DOC_ID, patch, merge=True)
        logger.info(f"Auto-draft config updated by {actor}")

        self.audit.append("grok_auto_draft_config_updated", actor, AUTO_DRAFT_DOC_ID, {
            key: value for key, value in patch.items() if key not in ("updatedAt", "updatedBy")
        })
        return self.get()
