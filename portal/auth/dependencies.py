from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from portal.auth.sessions import Authenticated, Identity, SessionResolver
from portal.core import config
from portal.database import get_db
from portal.models.user import Role
from portal.services.identity import IdentityStore

LOGIN_PATH = "/login"


class LoginRequired(Exception):
    """Raised by the auth guard; the app turns it into a redirect to the login page."""

    def __init__(self, location: str = LOGIN_PATH):
        super().__init__(location)
        self.location = location


def get_identity(request: Request, db: Session = Depends(get_db)) -> Identity:
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    return SessionResolver(db).resolve(token)


def require_user(identity: Identity = Depends(get_identity)) -> int:
    if not isinstance(identity, Authenticated):
        raise LoginRequired()
    return identity.user_id


def require_admin(
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
) -> int:
    # Always read the role from storage so a role change applies on the next request.
    role = IdentityStore(db).get_role(user_id)
    if role is not Role.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
    return user_id
