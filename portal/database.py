from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from portal.core import config


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """Turn on FK enforcement for every new SQLite connection.

    SQLite ships with foreign keys disabled, which would leave the
    ON DELETE CASCADE clauses on lessons, enrollments and sessions inert.
    """
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    created = create_engine(url, connect_args=connect_args)
    enable_sqlite_foreign_keys(created)
    return created


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
