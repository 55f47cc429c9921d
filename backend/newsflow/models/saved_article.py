from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from newsflow.db.base_class import Base
from datetime import datetime


class SavedArticle(Base):
    __tablename__ = "saved_articles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    # Source URL of the article, used as its natural key
    article_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    url = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    source = Column(String, nullable=True)
    category = Column(String, nullable=True)
    published_at = Column(String, nullable=True)
    saved_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="saved_articles")

    __table_args__ = (
        UniqueConstraint('user_id', 'article_id', name='_user_article_uc'),
    )
