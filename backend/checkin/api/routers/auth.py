import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from checkin.api.deps import client_ip, current_admin, get_settings, user_agent
from checkin.config import Settings
from checkin.db import get_db
from checkin.errors import Unauthenticated, ValidationError
from checkin.models.user import User
from checkin.schemas.auth import LoginIn, LoginOut, MeOut, UserOut
from checkin.schemas.commons import OkOut
from checkin.services.audit.log import record
from checkin.services.auth.session import issue_session_token

log = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login")
def login(
    payload: LoginIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> LoginOut:
    if not payload.email or not payload.password:
        raise ValidationError("email and password are required")

    user = db.query(User).filter(User.email == payload.email.strip().lower()).one_or_none()
    if user is None or not user.check_password(payload.password):
        log.warning("[auth] failed login for %r from %s", payload.email, client_ip(request))
        raise Unauthenticated("invalid credentials")

    token = issue_session_token(user.id, user.email, settings.secret_key, settings.jwt_ttl_hours)
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.jwt_ttl_hours * 3600,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )

    record(
        db, "LOGIN", f"{user.name} logged in",
        ip=client_ip(request), user_agent=user_agent(request), user_id=user.id,
    )
    db.commit()
    return LoginOut(token=token, user=UserOut.model_validate(user))


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)) -> OkOut:
    response.delete_cookie(settings.auth_cookie_name)
    return OkOut()


@router.get("/me")
def me(admin: User = Depends(current_admin)) -> MeOut:
    return MeOut(user=UserOut.model_validate(admin))
