from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.middleware.auth import get_admin_user
from app.responses import success_response
from app.schemas import AutoDraftConfigUpdate, FetchRequest, PublishRequest, StatusUpdateRequest
from grok_trends.dependencies import (
    get_auto_draft_config_service,
    get_draft_generator,
    get_fetch_orchestrator,
    get_lifecycle,
    get_publish_service,
    get_story_store,
)
from grok_trends.models.story import Story
from grok_trends.services.publish_service import PublishOverrides

router = APIRouter(dependencies=[Depends(get_admin_user)])


def _story_json(story: Story) -> dict:
    return story.model_dump(by_alias=True, mode="json")


@router.get("/stories")
def list_stories(
    status: Optional[str] = None,
    category: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    story_store=Depends(get_story_store),
):
    """
    List stories newest first, optionally filtered by status and category
    """
    stories = story_store.list_stories(status=status, category=category, limit=limit, offset=offset)
    return success_response([_story_json(story) for story in stories], "Stories retrieved successfully")


@router.patch("/stories/{story_id}/status")
def update_story_status(
    story_id: str,
    body: StatusUpdateRequest,
    user: dict = Depends(get_admin_user),
    lifecycle=Depends(get_lifecycle),
):
    story = lifecycle.transition(story_id, body.status, user["uid"])
    return success_response(_story_json(story), "Story status updated")


@router.get("/stats")
def get_stats(story_store=Depends(get_story_store)):
    return success_response(story_store.get_stats(), "Stats retrieved successfully")


@router.post("/fetch")
def fetch_stories(
    body: FetchRequest,
    user: dict = Depends(get_admin_user),
    orchestrator=Depends(get_fetch_orchestrator),
):
    """
    Fetch one category from the trends feed and store the new stories
    """
    result = orchestrator.run_manual_fetch(
        body.category,
        auto_generate_drafts=body.auto_generate_drafts,
        engagement_threshold=body.engagement_threshold,
        actor=user["uid"],
    )
    return success_response(result.to_dict(), "Stories fetched successfully")


@router.post("/stories/{story_id}/generate-draft")
def generate_draft(
    story_id: str,
    user: dict = Depends(get_admin_user),
    draft_generator=Depends(get_draft_generator),
):
    """
    Return the story's draft, generating it first when the story has none
    """
    draft = draft_generator.generate_for_id(story_id, actor=user["uid"])
    return success_response(draft.model_dump(by_alias=True), "Draft generated successfully")


@router.post("/stories/{story_id}/publish")
def publish_story(
    story_id: str,
    body: Optional[PublishRequest] = None,
    user: dict = Depends(get_admin_user),
    publish_service=Depends(get_publish_service),
):
    overrides = PublishOverrides(**body.model_dump()) if body else None
    published = publish_service.publish(
        story_id,
        actor=user["uid"],
        overrides=overrides,
        author_name=user.get("name") or "Unknown User",
    )
    return success_response(published.to_dict(), "Story published as blog post successfully")


@router.get("/config/auto-draft")
def get_auto_draft_config(service=Depends(get_auto_draft_config_service)):
    config = service.get()
    return success_response(config.model_dump(by_alias=True), "Auto-draft configuration retrieved")


@router.put("/config/auto-draft")
def update_auto_draft_config(
    body: AutoDraftConfigUpdate,
    user: dict = Depends(get_admin_user),
    service=Depends(get_auto_draft_config_service),
):
    config = service.update(
        actor=user["uid"],
        enabled=body.enabled,
        engagement_threshold=body.engagement_threshold,
        categories=body.categories,
    )
    return success_response(config.model_dump(by_alias=True), "Auto-draft configuration updated")
