import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from portal.auth.dependencies import LoginRequired
from portal.bootstrap import ensure_bootstrap_admin, init_db
from portal.core import config
from portal.database import SessionLocal, engine
from portal.routes import admin_routes, auth_routes, student_routes
from portal.routes.common import STORAGE_FAILURE_DETAIL, see_other

app = FastAPI(title='Learning Portal')

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        init_db(engine)
        db = SessionLocal()
        try:
            ensure_bootstrap_admin(db)
        finally:
            db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.exception_handler(LoginRequired)
async def redirect_to_login(_request: Request, exc: LoginRequired):
    return see_other(exc.location)


@app.exception_handler(SQLAlchemyError)
async def storage_failure(_request: Request, exc: SQLAlchemyError):
    logger.exception('Unhandled storage failure', exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={'detail': STORAGE_FAILURE_DETAIL},
    )


app.include_router(auth_routes.router)
app.include_router(student_routes.router)
app.include_router(admin_routes.router)
