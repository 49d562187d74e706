"""
Fetch Orchestrator

Turns one trends-feed response into stored stories. Candidates are handled
one at a time in feed order so that de-duplication sees the stories written
earlier in the same batch; a failing candidate is recorded and the batch
carries on.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from dateutil import parser as dateutil_parser

from grok_trends.exceptions import InvalidCategoryError
from grok_trends.models.feed import FeedItem
from grok_trends.models.fetch import AutoDraftConfig, FetchOptions, FetchResult, ItemOutcome
from grok_trends.models.story import Category, Story, StoryStatus, utcnow
from grok_trends.pipeline.prompts import resolve_category
from grok_trends.services import recency_policy
from grok_trends.services.audit_service import SYSTEM_ACTOR, AuditService
from grok_trends.services.deduplicator import Deduplicator
from grok_trends.services.draft_generator import DraftGenerator
from grok_trends.services.feed_service import FeedService
from grok_trends.services.link_validator import is_placeholder_post_id, resolve_primary_link
from grok_trends.services.story_store import StoryStore

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Story"


def parse_first_seen(value: Union[datetime, str, None], now: datetime) -> datetime:
    """Timestamp of the source post, or now when missing or unparsable."""
    if value is None:
        return now

    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = dateutil_parser.parse(value)
        except (ValueError, TypeError, OverflowError):
            logger.warning(f"Unparsable first_seen_at {value!r}, using fetch time")
            return now

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FetchOrchestrator:
    def __init__(
        self,
        feed_service: FeedService,
        story_store: StoryStore,
        deduplicator: Deduplicator,
        draft_generator: DraftGenerator,
        audit: AuditService,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.feed_service = feed_service
        self.story_store = story_store
        self.deduplicator = deduplicator
        self.draft_generator = draft_generator
        self.audit = audit
        self.clock = clock or utcnow

    def run_manual_fetch(
        self,
        category: Optional[str],
        auto_generate_drafts: bool = False,
        engagement_threshold: Optional[float] = None,
        actor: str = SYSTEM_ACTOR,
    ) -> FetchResult:
        """Operator-triggered fetch; options come from the request."""
        options = FetchOptions(auto_generate_drafts=bool(auto_generate_drafts))
        if engagement_threshold is not None:
            options.engagement_threshold = engagement_threshold
        return self.fetch_category(category, options, actor=actor)

    def run_scheduled_fetch(self, category: Optional[str], auto_draft: AutoDraftConfig) -> FetchResult:
        """Scheduler-triggered fetch; options come from the persisted auto-draft config."""
        resolved = self._resolve(category)
        options = FetchOptions(
            auto_generate_drafts=auto_draft.applies_to(resolved.value),
            engagement_threshold=auto_draft.engagement_threshold,
        )
        logger.info(
            f"Starting scheduled fetch for {resolved.value} "
            f"(auto drafts: {options.auto_generate_drafts}, threshold: {options.engagement_threshold})"
        )
        return self.fetch_category(resolved, options, actor=SYSTEM_ACTOR)

    def fetch_category(
        self,
        category: Union[Category, str, None],
        options: Optional[FetchOptions] = None,
        actor: str = SYSTEM_ACTOR,
    ) -> FetchResult:
        """
        Fetch, filter and store one category's candidates.

        Raises:
            InvalidCategoryError: unknown category (before any external call)
            CompletionError: the feed could not be fetched or parsed
        """
        resolved = self._resolve(category)
        options = options or FetchOptions()

        feed = self.feed_service.fetch(resolved, self.clock())
        stored_category = Category.parse(feed.category) or resolved

        result = FetchResult(category=resolved.value, fetched_count=len(feed.stories))
        for item in feed.stories:
            result.outcomes.append(self._process_item(item, resolved, stored_category, options))

        logger.info(
            f"Fetch for {resolved.value} completed: {result.stored_count} stored, "
            f"{result.skipped_count} skipped, {result.drafts_generated} drafts generated"
        )
        self.audit.append("grok_stories_fetched", actor, "grok_stories", {
            "category": resolved.value,
            "fetched": result.fetched_count,
            "stored": result.stored_count,
            "skipped": result.skipped_count,
            "draftsGenerated": result.drafts_generated,
        })
        return result

    @staticmethod
    def _resolve(category: Union[Category, str, None]) -> Category:
        if isinstance(category, Category):
            return category
        resolved = resolve_category(category)
        if resolved is None:
            raise InvalidCategoryError(f"Invalid category: {category!r}. Expected one of {Category.values()}")
        return resolved

    def _process_item(
        self,
        item: FeedItem,
        category: Category,
        stored_category: Category,
        options: FetchOptions,
    ) -> ItemOutcome:
        title = item.title or UNTITLED
        try:
            now = self.clock()
            first_seen_at = parse_first_seen(item.first_seen_at, now)

            if not recency_policy.is_acceptable(category, first_seen_at, now):
                age = recency_policy.age_hours(first_seen_at, now)
                reason = f"too old ({round(age)}h old, max {recency_policy.max_age_hours(category)}h)"
                logger.warning(f"Skipping story: {title} - {reason}")
                return ItemOutcome(title=title, stored=False, reason=reason)

            placeholder_ids = [post_id for post_id in item.x_post_ids if is_placeholder_post_id(post_id)]
            if placeholder_ids:
                reason = f"invalid tweet IDs: {', '.join(placeholder_ids)}"
                logger.warning(f"Skipping story: {title} - {reason}")
                return ItemOutcome(title=title, stored=False, reason=reason)

            if self.deduplicator.is_duplicate(item.x_post_ids):
                logger.warning(f"Skipping story: {title} - duplicate")
                return ItemOutcome(title=title, stored=False, reason="duplicate")

            primary_link = resolve_primary_link(item.primary_link, item.x_post_ids)
            if item.primary_link and item.primary_link != primary_link:
                logger.info(f"Corrected primary_link for {title}: {item.primary_link} -> {primary_link!r}")

            story = self.story_store.create(Story(
                title=title,
                summary=item.summary or "",
                category=stored_category,
                source_post_ids=item.x_post_ids,
                primary_link=primary_link,
                engagement_score=item.engagement_score,
                author_handles=item.author_handles,
                media_urls=item.media_urls,
                first_seen_at=first_seen_at,
                fetched_at=now,
                status=StoryStatus.NEW,
                created_at=now,
                updated_at=now,
            ))
        except Exception as e:
            logger.error(f"Error storing story \"{title}\": {e}")
            return ItemOutcome(title=title, stored=False, reason="error", error=str(e))

        outcome = ItemOutcome(title=title, stored=True, story_id=story.id)
        if options.auto_generate_drafts and story.engagement_score >= options.engagement_threshold:
            outcome.draft_generated = self._auto_draft(story)
        return outcome

    def _auto_draft(self, story: Story) -> bool:
        try:
            self.draft_generator.generate(story, auto=True)
        except Exception as e:
            logger.warning(f"Failed to auto-generate draft for story {story.id}: {e}")
            return False
        logger.info(f"Auto-generated draft for high-engagement story: {story.title} (score: {story.engagement_score})")
        return True
