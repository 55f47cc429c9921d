import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from newsflow.db.base import Base
from newsflow.db.session import make_engine, make_session_factory
from newsflow.models import AdminLog, ApiKey, Interest, SavedArticle, User
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


def _interest_record(row: Interest) -> InterestRecord:
    # categories are stored wrapped as {"categories": [...]}
    blob = row.categories or {}
    categories = blob.get("categories", []) if isinstance(blob, dict) else list(blob)
    return InterestRecord(id=row.id, user_id=row.user_id, categories=categories)


def _wrap_categories(categories: List[str]) -> dict:
    return {"categories": list(categories)}


class SQLStorage(Storage):
    """Storage over any SQLAlchemy-supported database."""

    def __init__(self, db_url: str):
        self.engine = make_engine(db_url)
        self._Session = make_session_factory(self.engine)

    def init_db(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to initialize database: {e}") from e
        logger.info(f"Database ready at {self.engine.url.render_as_string(hide_password=True)}")

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self, operation: str):
        """Session scope that turns driver errors into StorageError."""
        with self._Session() as session:
            try:
                yield session
            except IntegrityError as e:
                session.rollback()
                logger.warning(f"Integrity error during {operation}: {e.orig}")
                raise ConflictError(f"Conflict during {operation}") from e
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Database error during {operation}: {e}")
                raise StorageError(f"Failed to {operation}") from e

    # ── Users ──

    def _one_user(self, operation: str, *criteria) -> Optional[UserRecord]:
        with self._session(operation) as session:
            user = session.query(User).filter(*criteria).first()
            return UserRecord.model_validate(user) if user else None

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self._one_user("get user", User.id == user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        return self._one_user("get user by username", User.username == username)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        return self._one_user("get user by email", User.email == email)

    def get_user_by_supabase_id(self, supabase_id: str) -> Optional[UserRecord]:
        return self._one_user("get user by supabase id", User.supabase_id == supabase_id)

    def create_user(self, user: UserCreate) -> UserRecord:
        with self._session("create user") as session:
            row = User(**user.model_dump())
            session.add(row)
            session.commit()
            return UserRecord.model_validate(row)

    def update_user(self, user_id: int, **updates) -> Optional[UserRecord]:
        with self._session("update user") as session:
            row = session.query(User).filter(User.id == user_id).first()
            if not row:
                return None
            for field in USER_UPDATABLE_FIELDS:
                value = updates.get(field)
                if value is not None:
                    setattr(row, field, value)
            session.commit()
            return UserRecord.model_validate(row)

    # ── Interests ──

    def get_interests(self, user_id: int) -> Optional[InterestRecord]:
        with self._session("get interests") as session:
            row = session.query(Interest).filter(Interest.user_id == user_id).first()
            return _interest_record(row) if row else None

    def create_interests(self, user_id: int, categories: List[str]) -> InterestRecord:
        with self._session("create interests") as session:
            row = Interest(user_id=user_id, categories=_wrap_categories(categories))
            session.add(row)
            session.commit()
            return _interest_record(row)

    def update_interests(self, user_id: int, categories: List[str]) -> Optional[InterestRecord]:
        with self._session("update interests") as session:
            row = session.query(Interest).filter(Interest.user_id == user_id).first()
            if not row:
                return None
            row.categories = _wrap_categories(categories)
            session.commit()
            return _interest_record(row)

    # ── Gemini keys ──

    def get_api_key(self, user_id: int) -> Optional[ApiKeyRecord]:
        with self._session("get API key") as session:
            row = session.query(ApiKey).filter(ApiKey.user_id == user_id).first()
            return ApiKeyRecord.model_validate(row) if row else None

    def create_api_key(self, user_id: int, gemini_key: Optional[str]) -> ApiKeyRecord:
        with self._session("create API key") as session:
            row = ApiKey(user_id=user_id, gemini_key=gemini_key)
            session.add(row)
            session.commit()
            return ApiKeyRecord.model_validate(row)

    def update_api_key(self, user_id: int, gemini_key: str) -> Optional[ApiKeyRecord]:
        with self._session("update API key") as session:
            row = session.query(ApiKey).filter(ApiKey.user_id == user_id).first()
            if not row:
                return None
            row.gemini_key = gemini_key
            session.commit()
            return ApiKeyRecord.model_validate(row)

    # ── Saved articles ──

    def get_saved_articles(self, user_id: int) -> List[SavedArticleRecord]:
        with self._session("get saved articles") as session:
            rows = session.query(SavedArticle).filter(SavedArticle.user_id == user_id).order_by(SavedArticle.id).all()
            return [SavedArticleRecord.model_validate(r) for r in rows]

    def get_saved_article(self, user_id: int, article_id: str) -> Optional[SavedArticleRecord]:
        with self._session("get saved article") as session:
            row = session.query(SavedArticle).filter(
                SavedArticle.user_id == user_id,
                SavedArticle.article_id == article_id,
            ).first()
            return SavedArticleRecord.model_validate(row) if row else None

    def create_saved_article(self, user_id: int, article: SavedArticleCreate) -> SavedArticleRecord:
        with self._session("save article") as session:
            row = SavedArticle(user_id=user_id, **article.model_dump())
            session.add(row)
            session.commit()
            return SavedArticleRecord.model_validate(row)

    def delete_saved_article(self, user_id: int, article_id: str) -> bool:
        with self._session("delete saved article") as session:
            deleted = session.query(SavedArticle).filter(
                SavedArticle.user_id == user_id,
                SavedArticle.article_id == article_id,
            ).delete(synchronize_session=False)
            session.commit()
            return deleted > 0

    # ── Admin ──

    def get_all_users(self) -> List[UserRecord]:
        with self._session("get all users") as session:
            return [UserRecord.model_validate(u) for u in session.query(User).order_by(User.id).all()]

    def get_all_saved_articles(self) -> List[SavedArticleRecord]:
        with self._session("get all saved articles") as session:
            rows = session.query(SavedArticle).order_by(SavedArticle.id).all()
            return [SavedArticleRecord.model_validate(r) for r in rows]

    def set_user_admin_status(
        self, user_id: int, is_admin: bool, log: Optional[AdminLogCreate] = None,
    ) -> Optional[UserRecord]:
        with self._session("update user admin status") as session:
            row = session.query(User).filter(User.id == user_id).first()
            if not row:
                return None
            row.is_admin = is_admin
            if log is not None:
                session.add(AdminLog(**log.model_dump()))
            session.commit()
            return UserRecord.model_validate(row)

    def delete_user(self, user_id: int, log: Optional[AdminLogCreate] = None) -> bool:
        # One transaction: dependents, the user and the audit entry go together or not at all
        with self._session("delete user") as session:
            if session.query(User.id).filter(User.id == user_id).first() is None:
                return False
            session.query(Interest).filter(Interest.user_id == user_id).delete(synchronize_session=False)
            session.query(ApiKey).filter(ApiKey.user_id == user_id).delete(synchronize_session=False)
            session.query(SavedArticle).filter(SavedArticle.user_id == user_id).delete(synchronize_session=False)
            session.query(AdminLog).filter(AdminLog.admin_id == user_id).delete(synchronize_session=False)
            deleted = session.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            if log is not None:
                session.add(AdminLog(**log.model_dump()))
            session.commit()
            return deleted > 0

    def create_admin_log(self, log: AdminLogCreate) -> AdminLogRecord:
        with self._session("create admin log") as session:
            row = AdminLog(**log.model_dump())
            session.add(row)
            session.commit()
            return AdminLogRecord.model_validate(row)

    def get_admin_logs(self) -> List[AdminLogRecord]:
        with self._session("get admin logs") as session:
            rows = session.query(AdminLog).order_by(AdminLog.created_at.desc(), AdminLog.id.desc()).all()
            return [AdminLogRecord.model_validate(r) for r in rows]
