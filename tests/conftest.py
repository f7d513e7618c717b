import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('SESSION_SECRET_KEY', 'test-secret-key-with-enough-length')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from portal.bootstrap import init_db  # noqa: E402
from portal.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from portal.main import app  # noqa: E402
from portal.models.user import Role  # noqa: E402
from portal.services.identity import IdentityStore  # noqa: E402


@pytest.fixture
def engine():
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    init_db(test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app, follow_redirects=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email: str, password: str = 'pw', name: str = 'User', role: Role = Role.STUDENT):
        return IdentityStore(db).create_user(email=email, password=password, display_name=name, role=role)

    return _make_user


@pytest.fixture
def login(client):
    def _login(email: str, password: str):
        return client.post('/login', data={'email': email, 'password': password})

    return _login
