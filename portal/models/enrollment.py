"""Enrollment model definitions."""

from sqlalchemy import Column, ForeignKey, Integer
from portal.database import Base


class Enrollment(Base):
    """A (user, course) fact. The composite primary key keeps pairs unique."""
    __tablename__ = "enrollments"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True, index=True)
