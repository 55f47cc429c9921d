"""
NewsAPI.org client

Thin async wrapper over the two listing endpoints the feeds use:
- /top-headlines for a standard category
- /everything for a free-text topic, sorted by relevance

Articles come back exactly as NewsAPI shapes them. Only the first page is
ever requested and nothing is retried.
"""

import httpx
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class NewsApiError(Exception):
    """NewsAPI could not be reached or answered with an error."""


class NewsApiClient:

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://newsapi.org/v2",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get_articles(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{path}"
        query = {"apiKey": self.api_key, "language": "en", **params}
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                resp = await client.get(url, params=query)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NewsApiError(f"NewsAPI request to /{path} failed: {e}") from e

        if not isinstance(data, dict):
            raise NewsApiError(f"NewsAPI returned an unexpected body from /{path}")
        if data.get("status") == "error":
            raise NewsApiError(f"NewsAPI error {data.get('code')}: {data.get('message')}")

        return data.get("articles") or []

    async def fetch_top_headlines(self, category: str, page_size: int = DEFAULT_PAGE_SIZE) -> List[Dict[str, Any]]:
        """Top headlines for one NewsAPI category."""
        articles = await self._get_articles("top-headlines", {"category": category, "pageSize": page_size})
        logger.info(f"Fetched {len(articles)} top headlines for '{category}'")
        return articles

    async def search_everything(self, query: str, page_size: int = 10) -> List[Dict[str, Any]]:
        """Free-text search across all sources, most relevant first."""
        articles = await self._get_articles(
            "everything",
            {"q": query, "sortBy": "relevancy", "pageSize": page_size},
        )
        logger.info(f"Fetched {len(articles)} articles matching '{query}'")
        return articles
