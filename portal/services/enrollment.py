import logging

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.models.enrollment import Enrollment

logger = logging.getLogger(__name__)


class EnrollmentLedger:
    """Tracks which users are enrolled in which courses.

    Uniqueness of a (user, course) pair is left to the primary key, so two
    concurrent enrollments for the same pair cannot both land. Both mutations
    are idempotent: repeating them is a no-op, never an error.
    """

    def __init__(self, db: Session):
        self.db = db

    def enroll(self, user_id: int, course_id: int) -> None:
        try:
            self.db.execute(insert(Enrollment).values(user_id=user_id, course_id=course_id))
            self.db.commit()
        except IntegrityError:
            # Already enrolled, or the user/course no longer exists.
            self.db.rollback()
            logger.debug("Enrollment of user %s in course %s was a no-op", user_id, course_id)

    def unenroll(self, user_id: int, course_id: int) -> None:
        self.db.execute(
            delete(Enrollment).where(
                Enrollment.user_id == user_id,
                Enrollment.course_id == course_id,
            )
        )
        self.db.commit()

    def is_enrolled(self, user_id: int, course_id: int) -> bool:
        return self.db.query(Enrollment).filter(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
        ).first() is not None

    def list_course_ids_for_user(self, user_id: int) -> set[int]:
        rows = self.db.query(Enrollment.course_id).filter(Enrollment.user_id == user_id).all()
        return {course_id for (course_id,) in rows}

    def count_for_course(self, course_id: int) -> int:
        return self.db.query(Enrollment).filter(Enrollment.course_id == course_id).count()

    def cascade_on_course_delete(self, course_id: int) -> None:
        """Stage removal of every enrollment for the course.

        Does not commit; the caller's course deletion owns the transaction.
        """
        self.db.execute(delete(Enrollment).where(Enrollment.course_id == course_id))
