"""
Prompts for the trends feed and for draft generation.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from grok_trends.models.story import Category, Story

SYSTEM_PROMPT = """You are a tech news analyst focused on Nigeria's tech ecosystem.
Analyze X (Twitter) posts and extract relevant tech news stories.
Output ONLY valid JSON. No explanations, no markdown, no extra text."""


@dataclass(frozen=True)
class CategorySearch:
    lookback: timedelta
    lookback_label: str
    query: str
    max_stories: int
    strict_recency: bool = False


CATEGORY_SEARCHES: Dict[Category, CategorySearch] = {
    Category.BREAKING_NEWS: CategorySearch(
        lookback=timedelta(minutes=90),
        lookback_label="90 minutes",
        query=(
            'Search X for breaking Nigeria tech news. Keywords: (outage OR downtime OR breach OR hack '
            'OR "data leak" OR "zero-day" OR ransomware OR exploit OR "critical vulnerability") AND '
            '(Nigeria OR Nigerian OR Lagos OR Abuja OR fintech OR agritech OR edtech OR healthtech OR startup). '
            'Use filter:verified min_replies:50 OR min_faves:300.'
        ),
        max_stories=8,
        strict_recency=True,
    ),
    Category.TRENDING: CategorySearch(
        lookback=timedelta(hours=24),
        lookback_label="24 hours",
        query=(
            'Using X semantic + keyword search, find the currently trending Nigeria tech topics. '
            'Focus: Nigerian fintech, agritech, edtech, healthtech, AI, startups, Lagos ecosystem. '
            'Require min_faves:600 OR min_retweets:400. Exclude ads and promos. Diverse viewpoints required.'
        ),
        max_stories=10,
        strict_recency=True,
    ),
    Category.COMPANY_NEWS: CategorySearch(
        lookback=timedelta(hours=48),
        lookback_label="48 hours",
        query=(
            'Search X for major Nigerian tech company updates: (Flutterwave OR Paystack OR Moniepoint OR '
            'Interswitch OR Jumia OR Andela OR Opay OR PiggyVest OR Jobberman OR MTN OR Airtel OR SystemSpecs) '
            'AND (earnings OR acquisition OR lawsuit OR partnership OR layoff OR "new feature" OR controversy '
            'OR funding). filter:news OR filter:verified min_faves:400.'
        ),
        max_stories=10,
    ),
    Category.PRODUCT_LAUNCHES: CategorySearch(
        lookback=timedelta(hours=72),
        lookback_label="72 hours",
        query=(
            'Find new Nigerian tech product launches, reviews, or benchmarks: ("just launched" OR unboxing '
            'OR review OR benchmark OR "hands-on") AND (Nigeria OR Nigerian OR Lagos OR fintech app OR '
            'agritech tool OR edtech platform OR healthtech OR mobile money OR e-commerce). '
            'Require media (images/videos) + min_faves:350.'
        ),
        max_stories=12,
    ),
    Category.FUNDING: CategorySearch(
        lookback=timedelta(days=7),
        lookback_label="7 days",
        query=(
            'Search X for Nigerian startup funding or M&A news: ("raised" OR "Series" OR seed OR "valuation" '
            'OR acquired OR IPO OR SPAC OR iDICE) AND (Nigeria OR Nigerian OR Lagos OR fintech OR agritech '
            'OR edtech OR healthtech OR startup). filter:verified OR filter:news min_faves:250. '
            'Include round size when mentioned.'
        ),
        max_stories=10,
    ),
    Category.REGULATORY: CategorySearch(
        lookback=timedelta(hours=48),
        lookback_label="48 hours",
        query=(
            'Find regulatory or policy news affecting Nigeria tech: (antitrust OR CBN OR NITDA OR '
            '"data privacy" OR ban OR fine OR lawsuit OR bill OR regulation OR 3MTT OR iDICE) AND '
            '(Nigeria OR Nigerian OR Lagos OR fintech OR digital economy). filter:news min_faves:300.'
        ),
        max_stories=8,
    ),
    Category.SECURITY: CategorySearch(
        lookback=timedelta(hours=48),
        lookback_label="48 hours",
        query=(
            'Search X for cybersecurity incidents or vulnerabilities in Nigeria tech: (breach OR hack OR '
            'exploit OR CVE OR ransomware OR phishing OR "supply chain" OR patch) AND (Nigeria OR Nigerian '
            'OR Lagos OR fintech OR startup OR mobile money). Require min_faves:400 OR from known security accounts.'
        ),
        max_stories=10,
    ),
    Category.EMERGING_TECH: CategorySearch(
        lookback=timedelta(hours=96),
        lookback_label="96 hours",
        query=(
            'Using semantic search, find cutting-edge Nigeria tech breakthroughs: (AI OR blockchain OR 5G OR '
            'agritech OR healthtech OR edtech OR voice tech OR gamification OR cybersecurity) AND (Nigeria '
            'OR Nigerian OR Lagos OR startup OR ecosystem). Require min_faves:500 + media. Diverse sources.'
        ),
        max_stories=10,
    ),
}

SOURCE_LINK_RULES = """**CRITICAL: Source Link Requirements (MANDATORY VALIDATION):**
- primary_link MUST be a valid Twitter/X URL pointing to the EXACT ORIGINAL source tweet of this story
- Format: https://x.com/username/status/TWEET_ID or https://twitter.com/username/status/TWEET_ID
- x_post_ids MUST contain valid numeric tweet IDs (15-20 digits) from REAL, EXISTING tweets
- NEVER use placeholder URLs like example.com, test.com, dummy links, or sequential numbers (e.g., 1234567890123456791)
- NEVER invent or guess tweet IDs - only use IDs extracted directly from tweet URLs you can see in X/Twitter search results
- If multiple tweets exist, choose the one with highest engagement or from verified accounts, but ensure it is the REAL source
- Reject any story if you cannot find a valid, verifiable source tweet ID"""


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC without fractional seconds, e.g. 2025-01-31T08:00:00Z."""
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_feed_prompt(category: Category, now: datetime) -> str:
    search = CATEGORY_SEARCHES[category]
    since = format_timestamp(now - search.lookback)

    sections = [
        f"{search.query} Only posts since:{since}. Return maximum {search.max_stories} stories, "
        f"ranked by recency first, then engagement.",
    ]
    if search.strict_recency:
        sections.append(
            "**CRITICAL RECENCY REQUIREMENTS:**\n"
            f"- ONLY include stories from tweets posted in the last {search.lookback_label} (since {since})\n"
            f"- first_seen_at MUST be within the last {search.lookback_label} - reject any older stories\n"
            f"- If the original tweet is older than {search.lookback_label}, DO NOT include it"
        )
    sections.append(SOURCE_LINK_RULES)
    sections.append("Output ONLY valid JSON matching this schema:\n" + json.dumps({
        "category": category.value,
        "stories": [{
            "title": "string",
            "summary": "string (2-4 sentences)",
            "x_post_ids": ["string (valid numeric tweet ID)"],
            "primary_link": "string (valid Twitter/X URL to source tweet)",
            "engagement_score": "number",
            "first_seen_at": "YYYY-MM-DDTHH:MM:SSZ",
            "author_handles": ["@handle"],
            "media_urls": ["string (image URL attached to the tweet)"],
        }],
    }, indent=2))

    return "\n\n".join(sections)


def build_draft_prompt(story: Story, primary_link: str, post_category: str) -> str:
    """Prompt asking for a publishable blog post as structured JSON."""
    details: List[str] = [
        f"**Story Title:** {story.title}",
        f"**Summary:** {story.summary}",
        f"**Category:** {story.category}",
        f"**Engagement Score:** {story.engagement_score or 0}",
    ]
    if primary_link:
        details.append(f"**Source Link:** {primary_link}")
    if story.author_handles:
        details.append(f"**Author(s):** {', '.join(story.author_handles)}")
    if story.media_urls:
        details.append(f"**Available Media URLs:** {json.dumps(story.media_urls)}")

    schema = {
        "title": "Engaging, SEO-optimized title (60-70 characters)",
        "content": "Full HTML content with <p> tags, <h2> subheadings, and proper formatting. "
                   "Include source attribution at the end.",
        "excerpt": "Compelling excerpt/summary (150-160 characters) for meta description",
        "metaTitle": "SEO meta title (50-60 characters, can be same as title)",
        "metaDescription": "SEO meta description (150-160 characters, can be same as excerpt)",
        "tags": ["tag1", "tag2", "tag3", "tag4", "tag5"],
        "suggestedCategory": post_category,
        "recommendedImages": [{
            "url": "https://example.com/image1.jpg",
            "description": "Brief description of why this image is relevant",
            "source": "Source of the image (e.g., 'Tweet media', 'Company website')",
        }],
    }

    return f"""You are a professional tech journalist writing for TechBlit, a leading African tech news platform focused on Nigeria's tech ecosystem.

Generate a comprehensive, well-structured blog post based on this tech news story:

{chr(10).join(details)}

**Requirements:**
1. Write a professional, engaging blog post (400-800 words)
2. Use a neutral, journalistic tone suitable for tech news
3. Include context relevant to Nigeria's tech ecosystem
4. Structure with clear paragraphs and subheadings
5. Include relevant background information
6. Add a call-to-action or conclusion paragraph
7. Ensure SEO-friendly content

**Output Format (JSON only, no markdown):**
{json.dumps(schema, indent=2)}

**Image Recommendations:**
- Suggest 3-5 images related to the story topic, companies mentioned, or tech concepts
- Include images from the tweet media if available
- Provide direct, publicly accessible image URLs with a brief description of their relevance

**Important:**
- Output ONLY valid JSON
- No markdown formatting in content field, use HTML tags
- Include the source link in content if available"""


def resolve_category(category: Optional[str]) -> Optional[Category]:
    """Requested category, defaulting to Trending Stories when none was given."""
    if category is None or not str(category).strip():
        return Category.TRENDING
    return Category.parse(category)
