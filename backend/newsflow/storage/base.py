"""
Storage interface

One abstract repository covering users, interests, Gemini keys, saved
articles and the admin audit log. Implementations:
- MemoryStorage: dict-backed, for local development and tests
- SQLStorage: SQLAlchemy ORM over DATABASE_URL

Lookups return None/False when the row is absent. Backend failures raise
StorageError; uniqueness violations raise ConflictError.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

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

# Columns update_user is allowed to touch
USER_UPDATABLE_FIELDS = ("username", "email", "password", "first_name", "last_name", "is_admin")


class StorageError(Exception):
    """The backing store failed to complete an operation."""


class ConflictError(StorageError):
    """A uniqueness rule rejected the write."""


class Storage(ABC):

    def init_db(self) -> None:
        """Create whatever the backend needs before serving requests."""

    def close(self) -> None:
        """Release backend resources."""

    # ── Users ──

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_supabase_id(self, supabase_id: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def create_user(self, user: UserCreate) -> UserRecord: ...

    @abstractmethod
    def update_user(self, user_id: int, **updates) -> Optional[UserRecord]:
        """Apply the non-None USER_UPDATABLE_FIELDS in updates; None if the user is missing."""

    # ── Interests ──

    @abstractmethod
    def get_interests(self, user_id: int) -> Optional[InterestRecord]: ...

    @abstractmethod
    def create_interests(self, user_id: int, categories: List[str]) -> InterestRecord: ...

    @abstractmethod
    def update_interests(self, user_id: int, categories: List[str]) -> Optional[InterestRecord]: ...

    # ── Gemini keys ──

    @abstractmethod
    def get_api_key(self, user_id: int) -> Optional[ApiKeyRecord]: ...

    @abstractmethod
    def create_api_key(self, user_id: int, gemini_key: Optional[str]) -> ApiKeyRecord: ...

    @abstractmethod
    def update_api_key(self, user_id: int, gemini_key: str) -> Optional[ApiKeyRecord]: ...

    # ── Saved articles ──

    @abstractmethod
    def get_saved_articles(self, user_id: int) -> List[SavedArticleRecord]: ...

    @abstractmethod
    def get_saved_article(self, user_id: int, article_id: str) -> Optional[SavedArticleRecord]: ...

    @abstractmethod
    def create_saved_article(self, user_id: int, article: SavedArticleCreate) -> SavedArticleRecord: ...

    @abstractmethod
    def delete_saved_article(self, user_id: int, article_id: str) -> bool: ...

    # ── Admin ──

    @abstractmethod
    def get_all_users(self) -> List[UserRecord]: ...

    @abstractmethod
    def get_all_saved_articles(self) -> List[SavedArticleRecord]: ...

    @abstractmethod
    def set_user_admin_status(
        self, user_id: int, is_admin: bool, log: Optional[AdminLogCreate] = None,
    ) -> Optional[UserRecord]:
        """Flip the admin flag. When log is given it is appended in the same write, or neither happens."""

    @abstractmethod
    def delete_user(self, user_id: int, log: Optional[AdminLogCreate] = None) -> bool:
        """Remove the user, every row that references it, and append log if given, all or nothing."""

    @abstractmethod
    def create_admin_log(self, log: AdminLogCreate) -> AdminLogRecord: ...

    @abstractmethod
    def get_admin_logs(self) -> List[AdminLogRecord]:
        """All audit entries, newest first."""
