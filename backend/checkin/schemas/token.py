# backend/checkin/schemas/token.py
from typing import Optional

from .commons import CamelModel, UtcDateTime


class TokenIn(CamelModel):
    # Optional so a missing value surfaces as our own 400, not a schema error
    owner_id: Optional[int] = None


class TokenOut(CamelModel):
    id: int
    token: str
    expires_at: UtcDateTime
    used: bool


class IssuedTokenOut(CamelModel):
    token: TokenOut
    url: str
    expires_at: UtcDateTime


class TokenValidationOut(CamelModel):
    valid: bool
    reason: Optional[str] = None
    owner_name: Optional[str] = None
