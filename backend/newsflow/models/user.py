"""
User Model

Stores accounts, salted password hashes, and the admin flag.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from newsflow.db.base_class import Base
from datetime import datetime


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    # Identifier issued by the external auth provider, when one is used
    supabase_id = Column(String, unique=True, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)

    interest = relationship("Interest", back_populates="user", uselist=False)
    api_key = relationship("ApiKey", back_populates="user", uselist=False)
    saved_articles = relationship("SavedArticle", back_populates="user")
