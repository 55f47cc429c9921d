"""
Typed records shared by the storage backends and the HTTP layer.

Both storage implementations accept the *Create models and return the
*Record models, so handlers never see ORM objects or raw JSON blobs.
"""

from pydantic import BaseModel, EmailStr, Field, StrictBool
from typing import Any, List, Optional, Union
from datetime import datetime

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"


# ── Users ──

class UserBase(BaseModel):
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserCreate(UserBase):
    password: str  # already hashed
    supabase_id: Optional[str] = None
    is_admin: bool = False


class UserOut(UserBase):
    id: int
    created_at: Optional[datetime] = None
    supabase_id: Optional[str] = None
    is_admin: bool = False

    class Config:
        from_attributes = True


class UserRecord(UserOut):
    password: str

    def public(self) -> UserOut:
        """Strip the password hash before the record leaves the service."""
        return UserOut.model_validate(self.model_dump(exclude={"password"}))


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    username: str = Field(min_length=3, pattern=USERNAME_PATTERN)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, pattern=USERNAME_PATTERN)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=8)


# ── Interests ──

class InterestIn(BaseModel):
    categories: List[str]


class InterestRecord(BaseModel):
    id: int
    user_id: int
    categories: List[str]


# ── Gemini API keys ──

class ApiKeyIn(BaseModel):
    gemini_key: str = Field(min_length=1)


class ApiKeyRecord(BaseModel):
    id: int
    user_id: int
    gemini_key: Optional[str] = None

    class Config:
        from_attributes = True


class KeyValidationOut(BaseModel):
    valid: bool
    reason: str


# ── Saved articles ──

class SavedArticleCreate(BaseModel):
    article_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: Optional[str] = None
    url: str = Field(min_length=1)
    image_url: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    published_at: Optional[str] = None


class SavedArticleRecord(SavedArticleCreate):
    id: int
    user_id: int
    saved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ── Admin ──

class AdminStatusUpdate(BaseModel):
    isAdmin: StrictBool


class AdminLogIn(BaseModel):
    action: Optional[str] = None
    target_type: Optional[str] = None
    target_id: Optional[Union[str, int]] = None
    details: Optional[Any] = None


class AdminLogCreate(BaseModel):
    admin_id: int
    action: str
    target_type: str
    target_id: str
    details: Optional[Any] = None


class AdminLogRecord(AdminLogCreate):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ── News ──

class ArticleContent(BaseModel):
    """The parts of an article the summarizer prompt is built from."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    url: Optional[str] = None


class GeneratedArticle(BaseModel):
    content: str


class MessageOut(BaseModel):
    message: str
