"""
Source link validation for X (Twitter) posts.

The feed is produced by a language model, which sometimes invents post ids
or links. Nothing reaches a stored story's primary_link unless it passes the
checks here.
"""
import logging
import re
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

KNOWN_HOSTS = ("twitter.com", "x.com")
PLACEHOLDER_HOST_TOKENS = ("example.com", "placeholder", "test.com", "dummy")

_POST_URL_PATTERNS = [
    re.compile(r"(?:twitter\.com|x\.com)/(?:\w+/)?status/(\d+)", re.IGNORECASE),
    re.compile(r"(?:twitter\.com|x\.com)/i/web/status/(\d+)", re.IGNORECASE),
    re.compile(r"/status/(\d+)", re.IGNORECASE),
]

_POST_ID_FORMAT = re.compile(r"^\d{15,20}$")

_PLACEHOLDER_PATTERNS = [
    re.compile(r"^1234567890"),
    re.compile(r"^12345+$"),
    re.compile(r"^123456789012345"),
    re.compile(r"^(\d)\1{10,}$"),
    re.compile(r"^(\d{2})\1{7,9}$"),
    re.compile(r"^(\d{3})\1{4,6}$"),
    re.compile(r"^(\d{4})\1{3,4}$"),
    re.compile(r"^(\d{5})\1{2,3}$"),
]

# Steps of +1 (mod 10) in a row that mark an id as counted-out rather than real
MAX_ASCENDING_STEPS = 10
ASCENDING_CHECK_MIN_LENGTH = 15

CANONICAL_URL_TEMPLATE = "https://x.com/i/web/status/{post_id}"


def extract_post_id(url: Optional[str]) -> Optional[str]:
    """
    Pull the numeric post id out of an X/Twitter status URL.

    Handles x.com/<user>/status/<id>, twitter.com/<user>/status/<id> and the
    /i/web/status/<id> forms; query strings and fragments are ignored.
    """
    if not url or not isinstance(url, str):
        return None

    clean_url = url.split("?")[0].split("#")[0].strip()
    for pattern in _POST_URL_PATTERNS:
        match = pattern.search(clean_url)
        if match:
            return match.group(1)
    return None


def _longest_ascending_run(post_id: str) -> int:
    longest = 0
    current = 0
    for prev, curr in zip(post_id, post_id[1:]):
        if int(curr) == (int(prev) + 1) % 10:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def is_placeholder_post_id(post_id: Optional[str]) -> bool:
    """True when an id looks synthetic (repeated, patterned or counted digits)."""
    if not post_id or not isinstance(post_id, str):
        return True

    clean_id = post_id.strip()
    if any(pattern.search(clean_id) for pattern in _PLACEHOLDER_PATTERNS):
        return True

    if len(clean_id) >= ASCENDING_CHECK_MIN_LENGTH and clean_id.isdigit():
        if _longest_ascending_run(clean_id) >= MAX_ASCENDING_STEPS:
            return True

    return False


def is_valid_post_id(post_id: Optional[str]) -> bool:
    """A real post id is 15-20 digits and not a placeholder."""
    if not post_id or not isinstance(post_id, str):
        return False

    clean_id = post_id.strip()
    if not _POST_ID_FORMAT.match(clean_id):
        return False

    if is_placeholder_post_id(clean_id):
        logger.warning(f"Detected placeholder post id: {clean_id}")
        return False

    return True


def is_valid_source_url(url: Optional[str]) -> bool:
    """Absolute http(s) X/Twitter status URL carrying a valid post id."""
    if not url or not isinstance(url, str):
        return False

    clean_url = url.strip().lower()
    if not clean_url.startswith(("http://", "https://")):
        return False

    if not any(host in clean_url for host in KNOWN_HOSTS):
        return False

    if any(token in clean_url for token in PLACEHOLDER_HOST_TOKENS):
        return False

    post_id = extract_post_id(url)
    if post_id is None:
        return False

    if not is_valid_post_id(post_id):
        logger.warning(f"Invalid or placeholder post id in URL: {url} ({post_id})")
        return False

    return True


def construct_url(post_id: Optional[str]) -> str:
    """Canonical x.com URL for a valid post id, or an empty string."""
    if not post_id:
        return ""

    clean_id = str(post_id).strip()
    if not is_valid_post_id(clean_id):
        logger.warning(f"Invalid post id format: {clean_id}")
        return ""

    return CANONICAL_URL_TEMPLATE.format(post_id=clean_id)


def resolve_primary_link(candidate_url: Optional[str], source_post_ids: Iterable[str]) -> str:
    """
    Pick the link to store as a story's source.

    Order: the candidate URL if it validates, then a canonical URL built from
    the first valid entry of source_post_ids, then "".
    """
    if candidate_url:
        primary_link = str(candidate_url).strip()
        if is_valid_source_url(primary_link) and is_valid_post_id(extract_post_id(primary_link)):
            return primary_link

        if primary_link and "example.com" not in primary_link:
            logger.warning(f"Invalid primary link, trying post ids instead: {primary_link}")

    post_ids = list(source_post_ids or [])
    for post_id in post_ids:
        constructed = construct_url(post_id)
        if constructed:
            return constructed

    if post_ids:
        logger.warning(f"Post ids provided but none are valid: {post_ids}")

    return ""
