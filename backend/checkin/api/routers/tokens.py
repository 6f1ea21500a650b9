from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from checkin.api.deps import current_admin, get_settings, get_token_lifecycle
from checkin.config import Settings
from checkin.db import get_db
from checkin.errors import ValidationError
from checkin.models.user import User
from checkin.schemas.commons import OkOut
from checkin.schemas.token import IssuedTokenOut, TokenIn, TokenOut
from checkin.services.tokens.lifecycle import TokenLifecycle

router = APIRouter()


def checkin_url(settings: Settings, token: str) -> str:
    return f"{settings.public_base_url}/checkin?token={token}"


@router.post("", status_code=201)
@router.post("/", status_code=201)
def issue_token(
    payload: TokenIn,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
    tokens: TokenLifecycle = Depends(get_token_lifecycle),
    settings: Settings = Depends(get_settings),
) -> IssuedTokenOut:
    if payload.owner_id is None:
        raise ValidationError("ownerId is required")
    token = tokens.issue(payload.owner_id, admin_id=admin.id)
    db.commit()
    db.refresh(token)
    return IssuedTokenOut(
        token=TokenOut.model_validate(token),
        url=checkin_url(settings, token.token),
        expires_at=token.expires_at,
    )


@router.delete("/{token_id}")
def revoke_token(
    token_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
    tokens: TokenLifecycle = Depends(get_token_lifecycle),
) -> OkOut:
    tokens.revoke(token_id, admin_id=admin.id)
    db.commit()
    return OkOut()
