"""Per-category maximum age for fetched stories."""
from datetime import datetime, timedelta
from typing import Optional

from grok_trends.models.story import Category

DEFAULT_MAX_AGE_HOURS = 24

MAX_AGE_HOURS = {
    # Feed looks back 90 minutes; 2h leaves room for clock skew
    Category.BREAKING_NEWS: 2,
    Category.COMPANY_NEWS: 48,
    Category.REGULATORY: 48,
    Category.SECURITY: 48,
    Category.PRODUCT_LAUNCHES: 72,
    Category.EMERGING_TECH: 96,
    Category.FUNDING: 168,
    Category.TRENDING: DEFAULT_MAX_AGE_HOURS,
}


def max_age_hours(category: Optional[str]) -> int:
    parsed = Category.parse(category) if isinstance(category, str) else category
    return MAX_AGE_HOURS.get(parsed, DEFAULT_MAX_AGE_HOURS)


def max_age(category: Optional[str]) -> timedelta:
    return timedelta(hours=max_age_hours(category))


def age_hours(first_seen_at: datetime, now: datetime) -> float:
    return (now - first_seen_at).total_seconds() / 3600


def is_acceptable(category: Optional[str], first_seen_at: datetime, now: datetime) -> bool:
    """False when the story is older than its category allows."""
    return now - first_seen_at <= max_age(category)
