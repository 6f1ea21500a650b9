# backend/checkin/api/deps.py
from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from checkin.config import Settings
from checkin.db import get_db
from checkin.errors import NotFound, Unauthenticated
from checkin.models.subject import Subject
from checkin.models.user import User
from checkin.services.auth.session import decode_session_token
from checkin.services.tokens.lifecycle import TokenLifecycle

log = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_geocoder(request: Request):
    return request.app.state.geocoder


def _session_token(request: Request, settings: Settings) -> str | None:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return request.cookies.get(settings.auth_cookie_name)


def current_admin(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    token = _session_token(request, settings)
    if not token:
        raise Unauthenticated("missing session")
    payload = decode_session_token(token, settings.secret_key)
    user_id = payload.get("user_id")
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise Unauthenticated("user not found")
    log.debug("[guard] %s %s uid=%s", request.method, request.url.path, user.id)
    return user


def get_token_lifecycle(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TokenLifecycle:
    return TokenLifecycle(db, expiration_hours=settings.token_expiration_hours)


def owned_subject(db: Session, admin: User, subject_id: int | None) -> Subject:
    subject = db.get(Subject, subject_id) if subject_id is not None else None
    if subject is None or subject.admin_id != admin.id:
        raise NotFound("subject not found")
    return subject


def owned_subject_ids(db: Session, admin: User) -> list[int]:
    return [sid for (sid,) in db.query(Subject.id).filter(Subject.admin_id == admin.id).all()]


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "127.0.0.1"


def user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "unknown")
