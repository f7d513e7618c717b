import logging

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.auth.dependencies import require_admin
from portal.database import get_db
from portal.routes.common import course_not_found, see_other, storage_unavailable
from portal.services.catalog import CourseCatalog
from portal.views import AdminCourseRow, AdminPanelView, error_message, render

router = APIRouter(tags=['admin'], dependencies=[Depends(require_admin)])

logger = logging.getLogger(__name__)


@router.get('/admin')
def admin_panel(request: Request, error: str | None = None, db: Session = Depends(get_db)):
    try:
        catalog = CourseCatalog(db)
        rows = [
            AdminCourseRow(
                id=course.id,
                title=course.title,
                description=course.description or '',
                link=course.external_link or '',
                enrolled_count=catalog.ledger.count_for_course(course.id),
            )
            for course in catalog.list_courses()
        ]
    except SQLAlchemyError as exc:
        logger.exception('Admin panel failed to load courses')
        raise storage_unavailable() from exc

    return render(request, 'admin', AdminPanelView(courses=rows, error=error_message(error)))


@router.post('/admin/course')
def add_course(
    title: str = Form(''),
    description: str = Form(''),
    link: str = Form(''),
    db: Session = Depends(get_db),
):
    title = title.strip()
    if not title:
        return see_other('/admin', error='missing_title')

    try:
        CourseCatalog(db).create_course(title=title, description=description.strip(), external_link=link.strip())
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Course creation failed')
        raise storage_unavailable() from exc

    return see_other('/admin')


@router.post('/admin/course/edit/{course_id}')
def edit_course(
    course_id: int,
    title: str = Form(''),
    description: str = Form(''),
    link: str = Form(''),
    db: Session = Depends(get_db),
):
    title = title.strip()
    if not title:
        return see_other('/admin', error='missing_title')

    try:
        course = CourseCatalog(db).update_course(
            course_id,
            title=title,
            description=description.strip(),
            external_link=link.strip(),
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Course %s update failed', course_id)
        raise storage_unavailable() from exc

    if course is None:
        raise course_not_found()
    return see_other('/admin')


@router.post('/admin/course/delete/{course_id}')
def delete_course(course_id: int, db: Session = Depends(get_db)):
    try:
        CourseCatalog(db).delete_course(course_id)
    except SQLAlchemyError as exc:
        logger.exception('Course %s deletion failed', course_id)
        raise storage_unavailable() from exc

    return see_other('/admin')


@router.post('/course/{course_id}/lesson')
def add_lesson(
    course_id: int,
    title: str = Form(''),
    content: str = Form(''),
    db: Session = Depends(get_db),
):
    title = title.strip()
    if not title:
        return see_other(f'/course/{course_id}', error='missing_title')

    try:
        lesson = CourseCatalog(db).add_lesson(course_id, title=title, content=content)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Adding a lesson to course %s failed', course_id)
        raise storage_unavailable() from exc

    if lesson is None:
        raise course_not_found()
    return see_other(f'/course/{course_id}')
