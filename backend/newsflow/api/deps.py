"""
Request dependencies

- Collaborators (storage, NewsAPI and Gemini clients) live on app.state and
  are chosen once at startup.
- get_current_user / get_current_admin gate every protected route before
  the handler body runs.
"""

import logging

from fastapi import Depends, HTTPException, Request

from newsflow.schemas import UserRecord
from newsflow.services.gemini import GeminiClient
from newsflow.services.news_api import NewsApiClient
from newsflow.storage import Storage, StorageError

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_news_client(request: Request) -> NewsApiClient:
    return request.app.state.news_client


def get_gemini_client(request: Request) -> GeminiClient:
    return request.app.state.gemini_client


def login_session(request: Request, user: UserRecord) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def get_current_user(request: Request, storage: Storage = Depends(get_storage)) -> UserRecord:
    """The logged-in user, or 401."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        user = storage.get_user(user_id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to load session user")

    if user is None:
        # Account was deleted while the session was alive
        request.session.clear()
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def get_current_admin(user: UserRecord = Depends(get_current_user)) -> UserRecord:
    """The logged-in user if they hold the admin flag, or 403."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden - Admin access required")
    return user
