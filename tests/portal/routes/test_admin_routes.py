import pytest
from sqlalchemy.exc import OperationalError

from portal.models.course import Course
from portal.models.enrollment import Enrollment
from portal.models.lesson import Lesson
from portal.models.user import Role
from portal.services.catalog import CourseCatalog
from portal.services.identity import IdentityStore


@pytest.fixture
def admin(make_user, login):
    user = make_user('boss@x.com', password='secret', name='Boss', role=Role.ADMIN)
    login('boss@x.com', 'secret')
    return user


@pytest.fixture
def student(make_user, login):
    user = make_user('alice@x.com', password='pw1', name='Alice')
    login('alice@x.com', 'pw1')
    return user


def _course_titles(session_factory) -> list[str]:
    with session_factory() as fresh:
        return [course.title for course in fresh.query(Course).order_by(Course.id).all()]


ADMIN_POSTS = [
    ('/admin/course', {'title': 'Hacked'}),
    ('/admin/course/edit/1', {'title': 'Hacked'}),
    ('/admin/course/delete/1', {}),
    ('/course/1/lesson', {'title': 'Hacked'}),
]


@pytest.mark.parametrize(('path', 'form'), ADMIN_POSTS)
def test_admin_posts_redirect_anonymous_to_login(client, path: str, form: dict) -> None:
    response = client.post(path, data=form)

    assert response.status_code == 303
    assert response.headers['location'] == '/login'


@pytest.mark.parametrize(('path', 'form'), ADMIN_POSTS)
def test_admin_posts_are_forbidden_for_students(client, db, student, session_factory, path: str, form: dict) -> None:
    CourseCatalog(db).create_course('Intro')

    response = client.post(path, data=form)

    assert response.status_code == 403
    assert _course_titles(session_factory) == ['Intro']
    with session_factory() as fresh:
        assert fresh.query(Lesson).count() == 0


def test_admin_panel_is_forbidden_for_students(client, student) -> None:
    assert client.get('/admin').status_code == 403


def test_admin_panel_lists_courses_with_enrollment_counts(client, db, admin, make_user) -> None:
    catalog = CourseCatalog(db)
    intro = catalog.create_course('Intro', 'Basics', 'https://example.com')
    catalog.create_course('Advanced')
    catalog.ledger.enroll(make_user('s1@x.com').id, intro.id)
    catalog.ledger.enroll(make_user('s2@x.com').id, intro.id)

    context = client.get('/admin').context

    assert [(row['title'], row['enrolled_count']) for row in context['courses']] == [
        ('Intro', 2),
        ('Advanced', 0),
    ]


def test_admin_creates_course_visible_as_available_to_students(client, admin, make_user, login, session_factory) -> None:
    response = client.post('/admin/course', data={'title': 'Intro', 'description': 'Basics', 'link': ''})

    assert response.status_code == 303
    assert response.headers['location'] == '/admin'
    assert _course_titles(session_factory) == ['Intro']

    make_user('alice@x.com', password='pw1')
    login('alice@x.com', 'pw1')
    dashboard = client.get('/dashboard').context
    assert [card['title'] for card in dashboard['available_courses']] == ['Intro']
    assert dashboard['my_courses'] == []


def test_create_course_without_title_is_rejected(client, admin, session_factory) -> None:
    response = client.post('/admin/course', data={'title': '  '})

    assert response.headers['location'] == '/admin?error=missing_title'
    assert _course_titles(session_factory) == []


def test_edit_course_updates_fields(client, db, admin, session_factory) -> None:
    course = CourseCatalog(db).create_course('Old')

    response = client.post(
        f'/admin/course/edit/{course.id}',
        data={'title': 'New', 'description': 'Fresh', 'link': 'https://example.com'},
    )

    assert response.status_code == 303
    with session_factory() as fresh:
        edited = fresh.get(Course, course.id)
        assert (edited.title, edited.description, edited.external_link) == ('New', 'Fresh', 'https://example.com')


def test_edit_missing_course_is_not_found(client, admin) -> None:
    assert client.post('/admin/course/edit/404', data={'title': 'New'}).status_code == 404


def test_delete_course_removes_enrollments(client, db, admin, make_user, session_factory) -> None:
    catalog = CourseCatalog(db)
    course = catalog.create_course('Doomed')
    catalog.add_lesson(course.id, 'L1')
    catalog.ledger.enroll(make_user('s1@x.com').id, course.id)
    course_id = course.id

    response = client.post(f'/admin/course/delete/{course_id}')
    repeated = client.post(f'/admin/course/delete/{course_id}')

    assert response.status_code == repeated.status_code == 303
    with session_factory() as fresh:
        assert fresh.get(Course, course_id) is None
        assert fresh.query(Enrollment).filter(Enrollment.course_id == course_id).count() == 0
        assert fresh.query(Lesson).filter(Lesson.course_id == course_id).count() == 0


def test_add_lessons_appends_in_creation_order(client, db, admin) -> None:
    course = CourseCatalog(db).create_course('Intro')

    for title in ('One', 'Two', 'Three'):
        response = client.post(f'/course/{course.id}/lesson', data={'title': title, 'content': 'text'})
        assert response.status_code == 303
        assert response.headers['location'] == f'/course/{course.id}'

    context = client.get(f'/course/{course.id}').context
    assert context['is_admin'] is True
    assert [(lesson['title'], lesson['order_num']) for lesson in context['lessons']] == [
        ('One', 1),
        ('Two', 2),
        ('Three', 3),
    ]


def test_add_lesson_without_title_redirects_with_error(client, db, admin) -> None:
    course = CourseCatalog(db).create_course('Intro')

    response = client.post(f'/course/{course.id}/lesson', data={'title': ''})

    assert response.headers['location'] == f'/course/{course.id}?error=missing_title'


def test_add_lesson_to_missing_course_is_not_found(client, admin) -> None:
    assert client.post('/course/404/lesson', data={'title': 'Orphan'}).status_code == 404


def test_role_change_applies_on_next_request_without_relogin(client, db, student) -> None:
    identity = IdentityStore(db)

    assert client.get('/admin').status_code == 403

    identity.set_role('alice@x.com', Role.ADMIN)
    assert client.get('/admin').status_code == 200

    identity.set_role('alice@x.com', Role.STUDENT)
    assert client.get('/admin').status_code == 403


def test_storage_failure_returns_generic_message(client, admin, monkeypatch) -> None:
    def broken_list(_self):
        raise OperationalError('SELECT', {}, Exception('database is locked'))

    monkeypatch.setattr('portal.services.catalog.CourseCatalog.list_courses', broken_list)

    response = client.get('/admin')

    assert response.status_code == 503
    assert response.json() == {'detail': 'Service temporarily unavailable. Please try again.'}
    assert 'locked' not in response.text
