from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from newsflow.db.base_class import Base
from datetime import datetime
import enum


class AdminAction(str, enum.Enum):
    GRANT_ADMIN = "GRANT_ADMIN"
    REVOKE_ADMIN = "REVOKE_ADMIN"
    DELETE_USER = "DELETE_USER"


class AdminLog(Base):
    """Append-only audit record of a privileged action."""
    __tablename__ = "admin_logs"

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("users.id"), index=True)
    # Free-form, AdminAction values for actions taken by the service itself
    action = Column(String, nullable=False)
    target_type = Column(String, nullable=False)  # USER, ARTICLE, ...
    target_id = Column(String, nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
