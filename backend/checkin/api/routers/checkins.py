from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from checkin.api.deps import client_ip, get_geocoder, get_settings, get_token_lifecycle, user_agent
from checkin.config import Settings
from checkin.db import get_db
from checkin.errors import ValidationError
from checkin.schemas.capture import CaptureIn, CaptureOut
from checkin.schemas.token import TokenValidationOut
from checkin.services.capture.ingest import CaptureIngest
from checkin.services.tokens.lifecycle import TokenLifecycle

router = APIRouter()


@router.get("/validate")
def validate_token(
    token: str | None = None,
    tokens: TokenLifecycle = Depends(get_token_lifecycle),
) -> TokenValidationOut:
    """Check a link before asking for consent. Sends nothing but the token."""
    if not token:
        raise ValidationError("token is required")
    record = tokens.lookup(token)
    status = tokens.status(record)
    return TokenValidationOut(
        valid=status.valid,
        reason=status.reason,
        owner_name=record.subject.name if status.valid else None,
    )


@router.post("", status_code=201)
@router.post("/", status_code=201)
def submit_capture(
    payload: CaptureIn,
    request: Request,
    db: Session = Depends(get_db),
    tokens: TokenLifecycle = Depends(get_token_lifecycle),
    settings: Settings = Depends(get_settings),
    geocoder=Depends(get_geocoder),
) -> CaptureOut:
    ingest = CaptureIngest(db, tokens, geocoder=geocoder, max_photo_bytes=settings.max_photo_bytes)
    result = ingest.submit(
        payload.token,
        payload.photo,
        payload.latitude,
        payload.longitude,
        payload.metadata,
        consent=payload.consent,
        ip=client_ip(request),
        user_agent=user_agent(request),
    )
    return CaptureOut(
        message="Check-in completed",
        capture_id=result.capture.id,
        out_of_bounds=result.out_of_bounds,
        violated_zones=result.violated_zones,
    )
