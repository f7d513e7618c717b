from datetime import datetime, timezone

import jwt

from portal.core import config


def create_session_token(session_id: str, expires_at: datetime) -> str:
    payload = {
        "sub": session_id,
        "exp": expires_at.replace(tzinfo=timezone.utc),
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, config.SESSION_SECRET_KEY, algorithm=config.SESSION_ALGORITHM)


def decode_session_token(token: str) -> dict:
    return jwt.decode(token, config.SESSION_SECRET_KEY, algorithms=[config.SESSION_ALGORITHM])
