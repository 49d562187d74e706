"""
FastAPI dependency providers shared by the scheduler worker and the admin API.

Tests swap the store, the completion client or the clock through
app.dependency_overrides.
"""
from datetime import datetime
from typing import Callable

from fastapi import Depends

from grok_trends.config import TrendsConfig, get_trends_config
from grok_trends.models.story import utcnow
from grok_trends.pipeline.fetch_orchestrator import FetchOrchestrator
from grok_trends.services.audit_service import AuditService
from grok_trends.services.auto_draft_config_service import AutoDraftConfigService
from grok_trends.services.deduplicator import Deduplicator
from grok_trends.services.draft_generator import DraftGenerator
from grok_trends.services.feed_service import FeedService
from grok_trends.services.firebase_service import get_firebase_service
from grok_trends.services.llm_service import LLMService
from grok_trends.services.publish_service import PublishService
from grok_trends.services.status_lifecycle import StatusLifecycleManager
from grok_trends.services.story_store import StoryStore


def get_config() -> TrendsConfig:
    return get_trends_config()


def get_store():
    return get_firebase_service()


def get_llm(config: TrendsConfig = Depends(get_config)):
    return LLMService(config)


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_audit(store=Depends(get_store), config: TrendsConfig = Depends(get_config)) -> AuditService:
    return AuditService(store, config)


def get_story_store(store=Depends(get_store), config: TrendsConfig = Depends(get_config)) -> StoryStore:
    return StoryStore(store, config)


def get_lifecycle(
    story_store: StoryStore = Depends(get_story_store),
    audit: AuditService = Depends(get_audit),
) -> StatusLifecycleManager:
    return StatusLifecycleManager(story_store, audit)


def get_draft_generator(
    llm=Depends(get_llm),
    story_store: StoryStore = Depends(get_story_store),
    audit: AuditService = Depends(get_audit),
    config: TrendsConfig = Depends(get_config),
) -> DraftGenerator:
    return DraftGenerator(llm, story_store, audit, config)


def get_auto_draft_config_service(
    store=Depends(get_store),
    audit: AuditService = Depends(get_audit),
    config: TrendsConfig = Depends(get_config),
) -> AutoDraftConfigService:
    return AutoDraftConfigService(store, audit, config)


def get_publish_service(
    store=Depends(get_store),
    story_store: StoryStore = Depends(get_story_store),
    lifecycle: StatusLifecycleManager = Depends(get_lifecycle),
    audit: AuditService = Depends(get_audit),
    config: TrendsConfig = Depends(get_config),
) -> PublishService:
    return PublishService(store, story_store, lifecycle, audit, config)


def get_fetch_orchestrator(
    llm=Depends(get_llm),
    story_store: StoryStore = Depends(get_story_store),
    draft_generator: DraftGenerator = Depends(get_draft_generator),
    audit: AuditService = Depends(get_audit),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> FetchOrchestrator:
    return FetchOrchestrator(
        FeedService(llm),
        story_store,
        Deduplicator(story_store),
        draft_generator,
        audit,
        clock=clock,
    )
