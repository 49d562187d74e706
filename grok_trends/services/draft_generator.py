"""
Blog draft generation for stored stories.

A story's draft fields are written together in one transaction together
with the status change, so a story either has a complete draft
(title + body) or none at all.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from grok_trends.config import TrendsConfig, get_trends_config
from grok_trends.exceptions import DraftGenerationError
from grok_trends.models.feed import DraftPayload
from grok_trends.models.story import Category, Draft, RecommendedImage, Story, StoryStatus, utcnow
from grok_trends.pipeline.prompts import SYSTEM_PROMPT, build_draft_prompt
from grok_trends.services.audit_service import SYSTEM_ACTOR, AuditService
from grok_trends.services.feed_service import extract_json_object
from grok_trends.services.link_validator import resolve_primary_link
from grok_trends.services.story_store import StoryStore

logger = logging.getLogger(__name__)

AUTO_ACTOR = "system_auto"
DEFAULT_POST_CATEGORY = "Tech News"

POST_CATEGORY_MAP = {
    Category.FUNDING.value: "Funding",
    Category.EMERGING_TECH.value: "AI & Innovation",
}

REGION_TAGS = ["Nigeria", "Africa", "tech"]

CATEGORY_TAG_KEYWORDS = [
    (("funding",), ["funding", "startup", "investment"]),
    (("breaking", "security"), ["breaking", "news"]),
    (("company",), ["company", "business"]),
    (("product",), ["product", "launch"]),
    (("regulatory",), ["regulation", "policy"]),
    (("emerging", "ai"), ["AI", "innovation", "technology"]),
]


def post_category_for(category: str) -> str:
    return POST_CATEGORY_MAP.get(category, DEFAULT_POST_CATEGORY)


def fallback_tags(story: Story) -> List[str]:
    """Tags derived from the category, region and up to three author handles."""
    tags: List[str] = []
    category_lower = str(story.category).lower()
    for keywords, keyword_tags in CATEGORY_TAG_KEYWORDS:
        if any(keyword in category_lower for keyword in keywords):
            tags.extend(keyword_tags)

    tags.extend(REGION_TAGS)

    for handle in story.author_handles[:3]:
        if handle.startswith("@"):
            tags.append(handle[1:])

    return list(dict.fromkeys(tags))


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9 -]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def attribution_block(primary_link: str, author_handles: List[str]) -> str:
    block = (
        '\n\n<div class="mt-6 p-4 bg-gray-50 rounded-lg border-l-4 border-purple-500">'
        '<p class="text-sm text-gray-600 mb-2"><strong>Source:</strong></p>'
        f'<p class="text-sm"><a href="{primary_link}" target="_blank" rel="noopener noreferrer" '
        'class="text-purple-600 hover:text-purple-800 underline">View original post on X (Twitter)</a></p>'
    )
    if author_handles:
        block += f'<p class="text-xs text-gray-500 mt-2">From: {", ".join(author_handles)}</p>'
    return block + "</div>"


def has_attribution(content: str) -> bool:
    return "Source:" in content or "source" in content


def merge_images(
    recommended: List[RecommendedImage],
    media_urls: List[str],
    limit: int,
) -> List[RecommendedImage]:
    images = list(recommended)
    seen = {image.url for image in images}
    for url in media_urls:
        if url not in seen:
            images.append(RecommendedImage(url=url, description="Image from original tweet", source="Tweet media"))
            seen.add(url)
    return images[:limit]


def draft_from_story(story: Story) -> Draft:
    """The draft already stored on a story."""
    excerpt = story.draft_excerpt or story.summary
    return Draft(
        title=story.draft_title,
        content=story.draft_body,
        excerpt=excerpt,
        meta_title=story.draft_meta_title or story.draft_title,
        meta_description=story.draft_meta_description or excerpt,
        tags=story.suggested_tags or [],
        category=story.draft_category or post_category_for(story.category),
        recommended_images=story.recommended_images or [],
        slug=slugify(story.draft_title),
    )


class DraftGenerator:
    def __init__(
        self,
        llm,
        story_store: StoryStore,
        audit: AuditService,
        config: Optional[TrendsConfig] = None,
    ):
        self.llm = llm
        self.story_store = story_store
        self.audit = audit
        self.config = config or get_trends_config()

    def generate_for_id(self, story_id: str, actor: str = SYSTEM_ACTOR) -> Draft:
        return self.generate(self.story_store.get(story_id), actor=actor)

    def generate(self, story: Story, actor: str = SYSTEM_ACTOR, auto: bool = False) -> Draft:
        """
        Return the story's draft, generating and storing it if it has none.

        Raises:
            CompletionError: the model call failed
            DraftGenerationError: the answer was not usable JSON or lacked
                title/content
        """
        if story.has_draft:
            logger.info(f"Draft already exists for story {story.id}, returning stored draft")
            return draft_from_story(story)

        primary_link = resolve_primary_link(story.primary_link, story.source_post_ids)
        post_category = post_category_for(story.category)

        response_text = self.llm.complete(SYSTEM_PROMPT, build_draft_prompt(story, primary_link, post_category))
        payload = self._parse_payload(response_text)
        draft = self._build_draft(story, payload, primary_link, post_category)

        generated_by = AUTO_ACTOR if auto else actor
        written = self.story_store.update_atomically(
            story.id, lambda current: self._draft_patch(current, draft, generated_by)
        )
        if written is None:
            # Another writer stored a draft first; keep theirs
            logger.info(f"Story {story.id} received a draft concurrently, returning stored draft")
            return draft_from_story(self.story_store.get(story.id))

        metadata: Dict[str, Any] = {"title": draft.title, "category": draft.category}
        if auto:
            metadata["engagement_score"] = story.engagement_score
            self.audit.append("grok_draft_auto_generated", SYSTEM_ACTOR, story.id, metadata)
        else:
            self.audit.append("grok_draft_generated", actor, story.id, metadata)

        logger.info(f"Generated draft for story {story.id}: {draft.title}")
        return draft

    def _parse_payload(self, response_text: str) -> DraftPayload:
        data = extract_json_object(response_text)
        if data is None:
            raise DraftGenerationError("Failed to parse model response as JSON")

        payload = DraftPayload.model_validate(data)
        if not payload.title or not payload.content:
            raise DraftGenerationError("Generated draft missing required fields (title, content)")
        return payload

    def _build_draft(self, story: Story, payload: DraftPayload, primary_link: str, post_category: str) -> Draft:
        content = payload.content
        if primary_link and not has_attribution(content):
            content += attribution_block(primary_link, story.author_handles)

        excerpt = payload.excerpt or story.summary[:self.config.meta_description_length]
        meta_title = (payload.metaTitle or payload.title or story.title)[:self.config.meta_title_length].strip()
        meta_description = (
            payload.metaDescription or payload.excerpt or story.summary
        )[:self.config.meta_description_length].strip()

        return Draft(
            title=payload.title,
            content=content,
            excerpt=excerpt,
            meta_title=meta_title,
            meta_description=meta_description,
            tags=payload.tags or fallback_tags(story),
            category=payload.suggestedCategory or post_category,
            recommended_images=merge_images(
                payload.recommendedImages, story.media_urls, self.config.max_recommended_images
            ),
            slug=slugify(payload.title),
        )

    @staticmethod
    def _draft_patch(current: Story, draft: Draft, actor: str) -> Optional[Dict[str, Any]]:
        if current.has_draft:
            return None

        now = utcnow()
        patch: Dict[str, Any] = {
            "draft_title": draft.title,
            "draft_body": draft.content,
            "draft_excerpt": draft.excerpt,
            "draft_meta_title": draft.meta_title,
            "draft_meta_description": draft.meta_description,
            "draft_category": draft.category,
            "suggested_tags": draft.tags,
            "recommended_images": [image.model_dump() for image in draft.recommended_images],
            "draftGeneratedAt": now,
            "draftGeneratedBy": actor,
            "updatedAt": now,
        }
        # Archived or published stories keep their status
        if current.status == StoryStatus.NEW.value:
            patch["status"] = StoryStatus.DRAFT_CREATED.value
        return patch
