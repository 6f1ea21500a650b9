# backend/checkin/services/auth/session.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt

from checkin.errors import Unauthenticated

log = logging.getLogger(__name__)

ALGORITHM = "HS256"


def issue_session_token(user_id: int, email: str, secret: str, ttl_hours: int = 24) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_session_token(token: str, secret: str) -> dict:
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("session has expired")
    except jwt.InvalidTokenError as e:
        log.info("[auth] rejected session token: %s", e)
        raise Unauthenticated("invalid session")
