from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from newsflow.db.base_class import Base


class ApiKey(Base):
    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True)
    gemini_key = Column(String, nullable=True)

    user = relationship("User", back_populates="api_key")
