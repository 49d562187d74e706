"""
Promotes a story to a blog post in the posts collection.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from grok_trends.config import TrendsConfig, get_trends_config
from grok_trends.exceptions import InvalidTransitionError, PublishValidationError
from grok_trends.models.story import Story, StoryStatus, utcnow
from grok_trends.services.audit_service import AuditService
from grok_trends.services.draft_generator import post_category_for, slugify
from grok_trends.services.link_validator import resolve_primary_link
from grok_trends.services.status_lifecycle import StatusLifecycleManager, can_transition
from grok_trends.services.story_store import StoryStore

logger = logging.getLogger(__name__)


@dataclass
class PublishOverrides:
    title: Optional[str] = None
    content: Optional[str] = None
    content_html: Optional[str] = None
    excerpt: Optional[str] = None
    tags: Optional[List[str]] = None
    category: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    canonical: Optional[str] = None
    featured_image: Optional[Dict[str, Any]] = None


@dataclass
class PublishedPost:
    post_id: str
    slug: str
    title: str

    def to_dict(self) -> Dict[str, Any]:
        return {"postId": self.post_id, "slug": self.slug, "title": self.title, "url": f"/{self.slug}"}


@dataclass
class _Resolved:
    title: str
    content: str
    excerpt: str
    tags: List[str] = field(default_factory=list)
    category: str = ""


class PublishService:
    def __init__(
        self,
        store,
        story_store: StoryStore,
        lifecycle: StatusLifecycleManager,
        audit: AuditService,
        config: Optional[TrendsConfig] = None,
    ):
        self.store = store
        self.story_store = story_store
        self.lifecycle = lifecycle
        self.audit = audit
        self.config = config or get_trends_config()

    def unique_slug(self, title: str) -> str:
        base_slug = slugify(title)
        slug = base_slug
        counter = 1
        while self.store.query(self.config.posts_collection, filters=[("slug", "==", slug)], limit=1):
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug

    def publish(
        self,
        story_id: str,
        actor: str,
        overrides: Optional[PublishOverrides] = None,
        author_name: str = "Unknown User",
    ) -> PublishedPost:
        """
        Create a published post from the story and mark the story published.

        Raises:
            StoryNotFoundError: no such story
            InvalidTransitionError: the story is archived or already published
            PublishValidationError: title, content or excerpt cannot be resolved
        """
        overrides = overrides or PublishOverrides()
        story = self.story_store.get(story_id)

        if not can_transition(story.status, StoryStatus.PUBLISHED):
            raise InvalidTransitionError(story.status, StoryStatus.PUBLISHED.value)

        resolved = self._resolve(story, overrides)
        slug = self.unique_slug(resolved.title)
        post = self._post_document(story, resolved, overrides, slug, actor, author_name)

        post_id = self.store.create(self.config.posts_collection, post)
        try:
            self.lifecycle.mark_published(story_id, post_id, actor)
        except InvalidTransitionError as e:
            # The post document is not rolled back
            logger.error(f"Story {story_id} changed status while publishing, post {post_id} is orphaned: {e}")
            raise

        self.audit.append("grok_story_published", actor, story_id, {
            "postId": post_id,
            "title": resolved.title,
            "slug": slug,
        })
        logger.info(f"Published story {story_id} as post {post_id}")
        return PublishedPost(post_id=post_id, slug=slug, title=resolved.title)

    def _resolve(self, story: Story, overrides: PublishOverrides) -> _Resolved:
        title = overrides.title or story.draft_title or story.title
        content = overrides.content_html or overrides.content or story.draft_body or story.summary
        excerpt = overrides.excerpt or story.draft_excerpt or story.summary[:self.config.meta_description_length]

        if not title or not content or not excerpt:
            raise PublishValidationError(
                "Title, content, and excerpt are required. Generate a draft first or provide them in the request."
            )

        return _Resolved(
            title=title,
            content=content,
            excerpt=excerpt,
            tags=overrides.tags if overrides.tags is not None else (story.suggested_tags or []),
            category=overrides.category or story.draft_category or post_category_for(story.category),
        )

    def _post_document(
        self,
        story: Story,
        resolved: _Resolved,
        overrides: PublishOverrides,
        slug: str,
        actor: str,
        author_name: str,
    ) -> Dict[str, Any]:
        now = utcnow()
        meta_title = (
            overrides.meta_title or story.draft_meta_title or resolved.title[:self.config.meta_title_length]
        )
        meta_description = (
            overrides.meta_description
            or story.draft_meta_description
            or resolved.excerpt[:self.config.meta_description_length]
        )

        post: Dict[str, Any] = {
            "title": resolved.title,
            "slug": slug,
            "content": resolved.content,
            "contentHtml": overrides.content_html or resolved.content,
            "excerpt": resolved.excerpt,
            "tags": resolved.tags,
            "categories": [resolved.category],
            "category": resolved.category,
            "status": "published",
            "author": {"uid": actor, "name": author_name},
            "createdAt": now,
            "updatedAt": now,
            "publishedAt": now,
            "viewCount": 0,
            "likeCount": 0,
            "visibility": "public",
            "metaTitle": meta_title,
            "metaDescription": meta_description,
            "canonical": overrides.canonical or "",
            "social": {
                "ogTitle": overrides.meta_title or resolved.title,
                "ogDescription": overrides.meta_description or resolved.excerpt,
                "twitterCard": "summary_large_image",
            },
            "seo": {"noindex": False, "nofollow": False},
            "source": {
                "type": "grok_story",
                "storyId": story.id,
                "x_post_ids": story.source_post_ids,
                "original_category": story.category,
                "original_link": resolve_primary_link(story.primary_link, story.source_post_ids),
            },
            "history": [{
                "action": "published_from_grok",
                "by": actor,
                "at": now,
                "note": f"Published from Grok story: {story.title}",
            }],
        }
        if overrides.featured_image:
            post["featuredImage"] = overrides.featured_image
        return post
