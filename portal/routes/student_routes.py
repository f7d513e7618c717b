import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.auth.dependencies import LoginRequired, require_user
from portal.database import get_db
from portal.models.user import Role
from portal.routes.common import course_not_found, see_other, storage_unavailable
from portal.services.catalog import CourseCatalog
from portal.services.identity import IdentityStore
from portal.views import (
    CourseCard,
    CoursePageView,
    DashboardView,
    LessonItem,
    error_message,
    render,
)

router = APIRouter(tags=['student'], dependencies=[Depends(require_user)])

logger = logging.getLogger(__name__)


def _wants_fragment(request: Request) -> bool:
    return request.headers.get('hx-request', '').lower() == 'true'


@router.get('/dashboard')
def dashboard(
    request: Request,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        user = IdentityStore(db).get(user_id)
        if user is None:
            # Session outlived its user.
            raise LoginRequired()

        partition = CourseCatalog(db).partition(user_id)
    except SQLAlchemyError as exc:
        logger.exception('Dashboard failed to load for user %s', user_id)
        raise storage_unavailable() from exc

    view = DashboardView(
        user_name=user.display_name,
        my_courses=[CourseCard.model_validate(course) for course in partition.enrolled],
        available_courses=[CourseCard.model_validate(course) for course in partition.available],
        my_count=len(partition.enrolled),
        available_count=len(partition.available),
    )
    return render(request, 'dashboard', view)


@router.get('/course/{course_id}')
def course_page(
    request: Request,
    course_id: int,
    error: str | None = None,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        catalog = CourseCatalog(db)
        course = catalog.get_course(course_id)
        if course is None:
            raise course_not_found()

        is_admin = IdentityStore(db).get_role(user_id) is Role.ADMIN
        is_enrolled = catalog.ledger.is_enrolled(user_id, course_id)
        lessons = catalog.list_lessons(course_id) if (is_admin or is_enrolled) else []
    except SQLAlchemyError as exc:
        logger.exception('Course %s failed to load', course_id)
        raise storage_unavailable() from exc

    view = CoursePageView(
        course_id=course.id,
        title=course.title,
        description=course.description or '',
        link=course.external_link or '',
        lessons=[LessonItem.model_validate(lesson) for lesson in lessons],
        is_admin=is_admin,
        is_enrolled=is_enrolled,
        error=error_message(error),
    )
    return render(request, 'course', view)


def _change_enrollment(request: Request, course_id: int, user_id: int, db: Session, enroll: bool):
    try:
        catalog = CourseCatalog(db)
        course = catalog.get_course(course_id)
        if course is None:
            raise course_not_found()
        card = CourseCard.model_validate(course)

        if enroll:
            catalog.ledger.enroll(user_id, course_id)
        else:
            catalog.ledger.unenroll(user_id, course_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Enrollment change failed for user %s, course %s', user_id, course_id)
        raise storage_unavailable() from exc

    if not _wants_fragment(request):
        return see_other('/dashboard')
    return render(request, 'course_enrolled' if enroll else 'course_available', card)


@router.post('/enroll/{course_id}')
def enroll(
    request: Request,
    course_id: int,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    return _change_enrollment(request, course_id, user_id, db, enroll=True)


@router.post('/unenroll/{course_id}')
def unenroll(
    request: Request,
    course_id: int,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    return _change_enrollment(request, course_id, user_id, db, enroll=False)
