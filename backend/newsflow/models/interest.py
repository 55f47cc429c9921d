from sqlalchemy import Column, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from newsflow.db.base_class import Base


class Interest(Base):
    __tablename__ = "interests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True)
    # Stored as {"categories": [...]}; order matters for the feed fallback
    categories = Column(JSON, nullable=False)

    user = relationship("User", back_populates="interest")
