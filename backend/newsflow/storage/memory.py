import itertools
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ValidationError

from newsflow.schemas import (
    AdminLogCreate,
    AdminLogRecord,
    ApiKeyRecord,
    InterestRecord,
    SavedArticleCreate,
    SavedArticleRecord,
    UserCreate,
    UserRecord,
)
from newsflow.storage.base import ConflictError, Storage, StorageError, USER_UPDATABLE_FIELDS

logger = logging.getLogger(__name__)


class MemoryStorage(Storage):
    """
    Process-local storage backed by plain dicts.

    Records are copied on the way in and out so callers can never mutate
    stored state. A single lock serializes all access; handlers run in a
    threadpool.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[int, UserRecord] = {}
        self._interests: Dict[int, InterestRecord] = {}
        self._api_keys: Dict[int, ApiKeyRecord] = {}
        self._saved_articles: Dict[int, SavedArticleRecord] = {}
        self._admin_logs: Dict[int, AdminLogRecord] = {}
        self._ids = {name: itertools.count(1) for name in ("user", "interest", "api_key", "saved_article", "admin_log")}

    def init_db(self) -> None:
        logger.info("Using in-memory storage; data is lost on restart")

    def _next_id(self, name: str) -> int:
        return next(self._ids[name])

    # ── Users ──

    def _find_user(self, **criteria) -> Optional[UserRecord]:
        for user in self._users.values():
            if all(getattr(user, key) == value for key, value in criteria.items()):
                return user.model_copy()
        return None

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            return self._find_user(username=username)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            return self._find_user(email=email)

    def get_user_by_supabase_id(self, supabase_id: str) -> Optional[UserRecord]:
        with self._lock:
            return self._find_user(supabase_id=supabase_id)

    def _check_user_unique(self, user_id: Optional[int], **fields) -> None:
        for other in self._users.values():
            if other.id == user_id:
                continue
            for key, value in fields.items():
                if value is not None and getattr(other, key) == value:
                    raise ConflictError(f"{key} already in use")

    def create_user(self, user: UserCreate) -> UserRecord:
        with self._lock:
            self._check_user_unique(None, username=user.username, email=user.email, supabase_id=user.supabase_id)
            record = UserRecord(id=self._next_id("user"), created_at=datetime.utcnow(), **user.model_dump())
            self._users[record.id] = record
            return record.model_copy()

    def update_user(self, user_id: int, **updates) -> Optional[UserRecord]:
        changes = {k: v for k, v in updates.items() if k in USER_UPDATABLE_FIELDS and v is not None}
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            self._check_user_unique(user_id, username=changes.get("username"), email=changes.get("email"))
            updated = user.model_copy(update=changes)
            self._users[user_id] = updated
            return updated.model_copy()

    # ── Interests ──

    def _interest_for(self, user_id: int) -> Optional[InterestRecord]:
        return next((i for i in self._interests.values() if i.user_id == user_id), None)

    def get_interests(self, user_id: int) -> Optional[InterestRecord]:
        with self._lock:
            interest = self._interest_for(user_id)
            return interest.model_copy(deep=True) if interest else None

    def create_interests(self, user_id: int, categories: List[str]) -> InterestRecord:
        with self._lock:
            if self._interest_for(user_id):
                raise ConflictError(f"Interests already exist for user {user_id}")
            record = InterestRecord(id=self._next_id("interest"), user_id=user_id, categories=list(categories))
            self._interests[record.id] = record
            return record.model_copy(deep=True)

    def update_interests(self, user_id: int, categories: List[str]) -> Optional[InterestRecord]:
        with self._lock:
            interest = self._interest_for(user_id)
            if interest is None:
                return None
            updated = interest.model_copy(update={"categories": list(categories)})
            self._interests[interest.id] = updated
            return updated.model_copy(deep=True)

    # ── Gemini keys ──

    def _api_key_for(self, user_id: int) -> Optional[ApiKeyRecord]:
        return next((k for k in self._api_keys.values() if k.user_id == user_id), None)

    def get_api_key(self, user_id: int) -> Optional[ApiKeyRecord]:
        with self._lock:
            key = self._api_key_for(user_id)
            return key.model_copy() if key else None

    def create_api_key(self, user_id: int, gemini_key: Optional[str]) -> ApiKeyRecord:
        with self._lock:
            if self._api_key_for(user_id):
                raise ConflictError(f"API key already exists for user {user_id}")
            record = ApiKeyRecord(id=self._next_id("api_key"), user_id=user_id, gemini_key=gemini_key)
            self._api_keys[record.id] = record
            return record.model_copy()

    def update_api_key(self, user_id: int, gemini_key: str) -> Optional[ApiKeyRecord]:
        with self._lock:
            key = self._api_key_for(user_id)
            if key is None:
                return None
            updated = key.model_copy(update={"gemini_key": gemini_key})
            self._api_keys[key.id] = updated
            return updated.model_copy()

    # ── Saved articles ──

    def _saved_article_for(self, user_id: int, article_id: str) -> Optional[SavedArticleRecord]:
        return next(
            (a for a in self._saved_articles.values() if a.user_id == user_id and a.article_id == article_id),
            None,
        )

    def get_saved_articles(self, user_id: int) -> List[SavedArticleRecord]:
        with self._lock:
            return [a.model_copy() for a in self._saved_articles.values() if a.user_id == user_id]

    def get_saved_article(self, user_id: int, article_id: str) -> Optional[SavedArticleRecord]:
        with self._lock:
            article = self._saved_article_for(user_id, article_id)
            return article.model_copy() if article else None

    def create_saved_article(self, user_id: int, article: SavedArticleCreate) -> SavedArticleRecord:
        with self._lock:
            if self._saved_article_for(user_id, article.article_id):
                raise ConflictError("Article already saved")
            record = SavedArticleRecord(
                id=self._next_id("saved_article"),
                user_id=user_id,
                saved_at=datetime.utcnow(),
                **article.model_dump(),
            )
            self._saved_articles[record.id] = record
            return record.model_copy()

    def delete_saved_article(self, user_id: int, article_id: str) -> bool:
        with self._lock:
            article = self._saved_article_for(user_id, article_id)
            if article is None:
                return False
            del self._saved_articles[article.id]
            return True

    # ── Admin ──

    def get_all_users(self) -> List[UserRecord]:
        with self._lock:
            return [u.model_copy() for u in self._users.values()]

    def get_all_saved_articles(self) -> List[SavedArticleRecord]:
        with self._lock:
            return [a.model_copy() for a in self._saved_articles.values()]

    def set_user_admin_status(
        self, user_id: int, is_admin: bool, log: Optional[AdminLogCreate] = None,
    ) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            record = self._new_admin_log(log) if log is not None else None
            updated = user.model_copy(update={"is_admin": is_admin})
            self._users[user_id] = updated
            if record is not None:
                self._admin_logs[record.id] = record
            return updated.model_copy()

    def delete_user(self, user_id: int, log: Optional[AdminLogCreate] = None) -> bool:
        # Holding the lock for the whole cascade keeps it all-or-nothing;
        # the audit record is built before anything is removed
        with self._lock:
            if user_id not in self._users:
                return False
            record = self._new_admin_log(log) if log is not None else None
            self._interests = {k: v for k, v in self._interests.items() if v.user_id != user_id}
            self._api_keys = {k: v for k, v in self._api_keys.items() if v.user_id != user_id}
            self._saved_articles = {k: v for k, v in self._saved_articles.items() if v.user_id != user_id}
            self._admin_logs = {k: v for k, v in self._admin_logs.items() if v.admin_id != user_id}
            del self._users[user_id]
            if record is not None:
                self._admin_logs[record.id] = record
            return True

    def _new_admin_log(self, log: AdminLogCreate) -> AdminLogRecord:
        try:
            return AdminLogRecord(id=self._next_id("admin_log"), created_at=datetime.utcnow(), **log.model_dump())
        except ValidationError as e:
            raise StorageError(f"Invalid admin log: {e}") from e

    def create_admin_log(self, log: AdminLogCreate) -> AdminLogRecord:
        with self._lock:
            record = self._new_admin_log(log)
            self._admin_logs[record.id] = record
            return record.model_copy(deep=True)

    def get_admin_logs(self) -> List[AdminLogRecord]:
        with self._lock:
            # ids increase monotonically, so they break created_at ties
            logs = sorted(self._admin_logs.values(), key=lambda log: (log.created_at, log.id), reverse=True)
            return [log.model_copy(deep=True) for log in logs]
