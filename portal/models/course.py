"""Course model definitions."""

from sqlalchemy import Column, Integer, String, Text
from portal.database import Base


class Course(Base):
    """Represents a course managed by an admin."""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    external_link = Column(String, nullable=False, default="")
