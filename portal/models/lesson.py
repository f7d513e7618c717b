"""Lesson model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from portal.database import Base


class Lesson(Base):
    """Represents a lesson inside a course, displayed by ascending order_num."""
    __tablename__ = "lessons"
    __table_args__ = (UniqueConstraint("course_id", "order_num", name="uq_lessons_course_order"),)

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False, default="")
    order_num = Column(Integer, nullable=False)
