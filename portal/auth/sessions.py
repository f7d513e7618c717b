"""Session issuance and resolution.

The cookie carries a signed token whose subject is an opaque session id.
The id maps to a user through the ``sessions`` table, so a session can be
revoked server-side and cannot be forged by guessing a user id. Expiry is
checked lazily whenever a token is resolved.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy.orm import Session

from portal.auth import jwt_handler
from portal.core import config
from portal.models.session import AuthSession

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Anonymous:
    pass


@dataclass(frozen=True)
class Authenticated:
    user_id: int
    expires_at: datetime


Identity = Anonymous | Authenticated

ANONYMOUS = Anonymous()


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_at: datetime


class SessionResolver:
    def __init__(self, db: Session, lifetime: timedelta | None = None):
        self.db = db
        self.lifetime = lifetime or timedelta(hours=config.SESSION_LIFETIME_HOURS)

    def issue(self, user_id: int) -> IssuedSession:
        now = utcnow()
        record = AuthSession(
            id=secrets.token_urlsafe(32),
            user_id=user_id,
            created_at=now,
            expires_at=now + self.lifetime,
        )
        self.db.add(record)
        self.db.commit()
        token = jwt_handler.create_session_token(record.id, record.expires_at)
        return IssuedSession(token=token, expires_at=record.expires_at)

    def resolve(self, token: str | None) -> Identity:
        session_id = self._session_id(token)
        if session_id is None:
            return ANONYMOUS

        record = self.db.get(AuthSession, session_id)
        if record is None:
            return ANONYMOUS
        if record.expires_at <= utcnow():
            self.db.delete(record)
            self.db.commit()
            return ANONYMOUS
        return Authenticated(user_id=record.user_id, expires_at=record.expires_at)

    def revoke(self, token: str | None) -> None:
        session_id = self._session_id(token)
        if session_id is None:
            return
        self.db.query(AuthSession).filter(AuthSession.id == session_id).delete(synchronize_session=False)
        self.db.commit()

    @staticmethod
    def _session_id(token: str | None) -> str | None:
        if not token:
            return None
        try:
            payload = jwt_handler.decode_session_token(token)
        except jwt.InvalidTokenError:
            logger.debug("Ignoring undecodable session token")
            return None
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            return None
        return subject
