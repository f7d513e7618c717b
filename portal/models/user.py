"""User model definitions."""

import enum

from sqlalchemy import Column, Integer, String
from portal.database import Base


class Role(str, enum.Enum):
    STUDENT = "student"
    ADMIN = "admin"


class User(Base):
    """Represents a registered portal user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.STUDENT.value)  # student/admin
