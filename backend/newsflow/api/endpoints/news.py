"""
News feeds and AI article generation.

Storage calls are blocking, so the async handlers push them to the
threadpool; NewsAPI and Gemini calls stay on the event loop.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from newsflow.api.deps import get_current_user, get_gemini_client, get_news_client, get_storage
from newsflow.core.categories import NEWS_CATEGORIES
from newsflow.schemas import ArticleContent, GeneratedArticle, UserRecord
from newsflow.services.aggregator import (
    MissingPrerequisite,
    NO_API_KEY_MESSAGE,
    fetch_category_feed,
    fetch_personalized,
    resolve_feed_category,
)
from newsflow.services.gemini import GeminiClient, GeminiError, GeminiTimeout
from newsflow.services.news_api import NewsApiClient, NewsApiError
from newsflow.storage import Storage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter()

NO_INTERESTS_SET_MESSAGE = "Please set your interests first"


@router.get("/categories", response_model=List[Dict[str, str]])
def list_categories():
    """The standard categories a user can pick from."""
    return NEWS_CATEGORIES


@router.get("/news", response_model=List[Dict[str, Any]])
async def get_news(
    category: Optional[str] = None,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    client: NewsApiClient = Depends(get_news_client),
):
    """
    Top headlines for one category, passed through as NewsAPI returns them.
    Without ?category= the user's first interest is used.
    """
    try:
        interests = await run_in_threadpool(storage.get_interests, user.id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch news")
    if interests is None:
        raise HTTPException(status_code=400, detail=NO_INTERESTS_SET_MESSAGE)

    news_category = resolve_feed_category(category, interests.categories)
    try:
        return await fetch_category_feed(news_category, client)
    except NewsApiError as e:
        logger.error(f"News fetch failed for '{news_category}': {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch news")


@router.get("/news/personalized", response_model=List[Dict[str, Any]])
async def get_personalized_news(
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    client: NewsApiClient = Depends(get_news_client),
):
    """Merged feed over the user's interests, each article tagged with ai_reason."""
    try:
        interests = await run_in_threadpool(storage.get_interests, user.id)
        if interests is None:
            raise HTTPException(status_code=400, detail=NO_INTERESTS_SET_MESSAGE)
        api_key = await run_in_threadpool(storage.get_api_key, user.id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch personalized news")

    if api_key is None or not api_key.gemini_key:
        raise HTTPException(status_code=400, detail=NO_API_KEY_MESSAGE)

    try:
        return await fetch_personalized(interests.categories, api_key.gemini_key, client)
    except MissingPrerequisite as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.post("/articles/summarize", response_model=GeneratedArticle)
async def summarize_article(
    article: ArticleContent,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    gemini: GeminiClient = Depends(get_gemini_client),
):
    """Write a full article from a headline using the user's Gemini key."""
    try:
        api_key = await run_in_threadpool(storage.get_api_key, user.id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to generate article content")

    if api_key is None or not api_key.gemini_key:
        raise HTTPException(
            status_code=400,
            detail="No Gemini API key found. Please set your API key in the profile settings.",
        )

    try:
        content = await gemini.summarize_article(article, api_key.gemini_key)
    except GeminiTimeout:
        raise HTTPException(status_code=500, detail="Article generation timed out")
    except GeminiError as e:
        logger.error(f"Article generation failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate article content")
    return {"content": content}
