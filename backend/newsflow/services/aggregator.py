"""
Feed assembly

Turns a user's interest list into display-ready article lists:
- the generic feed for a single category
- the personalized feed, fanned out over standard categories and custom
  topics, merged, shuffled, truncated and tagged with a reason string

The personalized ordering is a uniform shuffle, not a ranking. Two
identical requests may return different orders and, past the size cap,
different subsets.
"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

from newsflow.core.categories import DEFAULT_CATEGORY, is_standard_category
from newsflow.services.news_api import NewsApiClient

logger = logging.getLogger(__name__)

MAX_STANDARD_SOURCES = 3
MAX_CUSTOM_SOURCES = 3
PER_SOURCE_PAGE_SIZE = 10
GENERIC_FEED_SIZE = 20
PERSONALIZED_FEED_SIZE = 20
REASON_TEMPLATE = "Selected based on your interest in {category}"

NO_INTERESTS_MESSAGE = "No interests found"
NO_API_KEY_MESSAGE = "Gemini API key not found. Please set it in your profile."


class MissingPrerequisite(Exception):
    """The user has not set up what the personalized feed needs."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def partition_interests(categories: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split interests into (standard, custom), each keeping the original order."""
    standard = [c for c in categories if is_standard_category(c)]
    custom = [c for c in categories if not is_standard_category(c)]
    return standard, custom


def resolve_feed_category(requested: Optional[str], categories: Sequence[str]) -> str:
    """Explicit request wins, then the first stored interest, then 'general'."""
    if requested:
        return requested
    if categories:
        return categories[0]
    return DEFAULT_CATEGORY


async def fetch_category_feed(category: str, client: NewsApiClient) -> List[Dict[str, Any]]:
    """
    Articles for the generic feed. Standard categories use top headlines;
    a custom topic (possible via the first-interest fallback) uses search.
    Errors propagate to the caller.
    """
    if is_standard_category(category):
        return await client.fetch_top_headlines(category, page_size=GENERIC_FEED_SIZE)
    return await client.search_everything(category, page_size=GENERIC_FEED_SIZE)


def _tag(articles: List[Dict[str, Any]], category: str) -> List[Dict[str, Any]]:
    return [{**article, "category": category} for article in articles]


async def fetch_personalized(
    categories: Sequence[str],
    gemini_key: Optional[str],
    client: NewsApiClient,
    rng: Optional[random.Random] = None,
) -> List[Dict[str, Any]]:
    """
    Build the personalized feed for one user.

    Raises MissingPrerequisite when the interest list is empty or no Gemini
    key is stored. A failing source is logged and skipped, so the result is
    only empty when every source failed or returned nothing.
    """
    if not categories:
        raise MissingPrerequisite(NO_INTERESTS_MESSAGE)
    if not gemini_key:
        raise MissingPrerequisite(NO_API_KEY_MESSAGE)

    standard, custom = partition_interests(categories)

    sources = []
    for category in standard[:MAX_STANDARD_SOURCES]:
        sources.append((category, "category", client.fetch_top_headlines(category, page_size=PER_SOURCE_PAGE_SIZE)))
    for topic in custom[:MAX_CUSTOM_SOURCES]:
        sources.append((topic, "custom topic", client.search_everything(topic, page_size=PER_SOURCE_PAGE_SIZE)))

    # Fetch in parallel; one slow or failing source never voids the others
    results = await asyncio.gather(*(coro for _, _, coro in sources), return_exceptions=True)

    all_articles: List[Dict[str, Any]] = []
    for (label, kind, _), result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.error(f"Error fetching news for {kind} '{label}': {result}")
            continue
        all_articles.extend(_tag(result, label))

    if not all_articles:
        return []

    (rng or random).shuffle(all_articles)
    selected = all_articles[:PERSONALIZED_FEED_SIZE]

    return [
        {**article, "ai_reason": REASON_TEMPLATE.format(category=article.get("category") or "news")}
        for article in selected
    ]
