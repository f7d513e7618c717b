import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.models.course import Course
from portal.models.lesson import Lesson
from portal.services.enrollment import EnrollmentLedger

logger = logging.getLogger(__name__)


@dataclass
class CatalogPartition:
    enrolled: list[Course] = field(default_factory=list)
    available: list[Course] = field(default_factory=list)


class CourseCatalog:
    def __init__(self, db: Session, ledger: EnrollmentLedger | None = None):
        self.db = db
        self.ledger = ledger or EnrollmentLedger(db)

    def list_courses(self) -> list[Course]:
        return self.db.query(Course).order_by(Course.id.asc()).all()

    def get_course(self, course_id: int) -> Course | None:
        return self.db.get(Course, course_id)

    def create_course(self, title: str, description: str = "", external_link: str = "") -> Course:
        course = Course(title=title, description=description, external_link=external_link)
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        logger.info("Created course %s", course.id)
        return course

    def update_course(
        self,
        course_id: int,
        title: str,
        description: str = "",
        external_link: str = "",
    ) -> Course | None:
        course = self.get_course(course_id)
        if course is None:
            return None
        course.title = title
        course.description = description
        course.external_link = external_link
        self.db.commit()
        return course

    def delete_course(self, course_id: int) -> None:
        """Remove a course with its lessons and enrollments in one transaction."""
        try:
            self.ledger.cascade_on_course_delete(course_id)
            self.db.execute(delete(Lesson).where(Lesson.course_id == course_id))
            self.db.execute(delete(Course).where(Course.id == course_id))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info("Deleted course %s", course_id)

    def add_lesson(self, course_id: int, title: str, content: str = "") -> Lesson | None:
        if self.get_course(course_id) is None:
            return None
        max_order = self.db.query(func.coalesce(func.max(Lesson.order_num), 0)).filter(
            Lesson.course_id == course_id,
        ).scalar()
        lesson = Lesson(course_id=course_id, title=title, content=content, order_num=max_order + 1)
        self.db.add(lesson)
        self.db.commit()
        self.db.refresh(lesson)
        logger.info("Added lesson %s to course %s at position %s", lesson.id, course_id, lesson.order_num)
        return lesson

    def list_lessons(self, course_id: int) -> list[Lesson]:
        return self.db.query(Lesson).filter(
            Lesson.course_id == course_id,
        ).order_by(Lesson.order_num.asc(), Lesson.id.asc()).all()

    def partition(self, user_id: int) -> CatalogPartition:
        courses = self.list_courses()
        enrolled_ids = self.ledger.list_course_ids_for_user(user_id)

        result = CatalogPartition()
        for course in courses:
            if course.id in enrolled_ids:
                result.enrolled.append(course)
            else:
                result.available.append(course)
        return result
