"""First-run setup: tables and the well-known admin account."""
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from portal.core import config
from portal.database import Base
from portal.models import course, enrollment, lesson, session, user  # noqa: F401
from portal.models.user import Role
from portal.services.identity import EmailAlreadyRegistered, IdentityStore

logger = logging.getLogger(__name__)


def init_db(target: Engine) -> None:
    Base.metadata.create_all(bind=target)


def ensure_bootstrap_admin(db: Session) -> bool:
    """Create the default admin when no admin exists. Returns True if created."""
    identity = IdentityStore(db)
    if identity.has_admin():
        return False

    try:
        identity.create_user(
            email=config.BOOTSTRAP_ADMIN_EMAIL,
            password=config.BOOTSTRAP_ADMIN_PASSWORD,
            display_name=config.BOOTSTRAP_ADMIN_NAME,
            role=Role.ADMIN,
        )
    except EmailAlreadyRegistered:
        logger.warning(
            'No admin exists and %s is taken by a non-admin account; '
            'promote a user with `python -m portal.manage set-role`.',
            config.BOOTSTRAP_ADMIN_EMAIL,
        )
        return False

    logger.warning(
        'Created bootstrap admin %s with the default password. '
        'Change it with `python -m portal.manage set-password`.',
        config.BOOTSTRAP_ADMIN_EMAIL,
    )
    return True
