"""Server-side login session definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from portal.database import Base


class AuthSession(Base):
    """Maps an opaque session id to a user until expires_at (naive UTC)."""
    __tablename__ = "sessions"

    id = Column(String, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
