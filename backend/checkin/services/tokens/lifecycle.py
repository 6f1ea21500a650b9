# backend/checkin/services/tokens/lifecycle.py
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from checkin.errors import InvalidToken, NotFound
from checkin.models.base import utcnow
from checkin.models.subject import Subject
from checkin.models.token import AccessToken
from checkin.services.audit.log import record

log = logging.getLogger(__name__)

REASON_USED = "already used"
REASON_EXPIRED = "expired"

# 32 random bytes -> 43 URL-safe characters
TOKEN_BYTES = 32


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def lock_subject(owner_id: int):
    return select(Subject).where(Subject.id == owner_id).with_for_update()


@dataclass
class TokenStatus:
    valid: bool
    reason: Optional[str] = None


class TokenLifecycle:
    """Issue, validate and consume single-use check-in tokens.

    Nothing here commits; callers own the transaction so that consuming a
    token can share it with the capture that uses it.
    """

    def __init__(
        self,
        db: Session,
        expiration_hours: int = 1,
        now: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.expiration_hours = expiration_hours
        self.now = now

    def issue(self, owner_id: int, admin_id: Optional[int] = None) -> AccessToken:
        """Invalidate the owner's unused tokens and create a fresh one.

        With ``admin_id`` the owner must belong to that admin, otherwise it
        is reported as not found.
        """
        # row lock serializes concurrent issues for one owner (no-op on SQLite)
        subject = self.db.execute(lock_subject(owner_id)).scalar_one_or_none()
        if subject is None or (admin_id is not None and subject.admin_id != admin_id):
            raise NotFound("subject not found")

        invalidated = self.db.execute(
            update(AccessToken)
            .where(AccessToken.subject_id == owner_id, AccessToken.used.is_(False))
            .values(used=True)
        ).rowcount

        now = self.now()
        token = AccessToken(
            subject_id=owner_id,
            token=generate_token(),
            expires_at=now + timedelta(hours=self.expiration_hours),
            used=False,
            created_at=now,
        )
        self.db.add(token)
        self.db.flush()

        record(self.db, "ISSUE_TOKEN", f"check-in link issued for {subject.name}", user_id=admin_id)
        log.info(
            "Issued token id=%s subject=%s (invalidated %s previous)",
            token.id, owner_id, invalidated,
        )
        return token

    def lookup(self, token_string: str) -> AccessToken:
        token = (
            self.db.query(AccessToken)
            .filter(AccessToken.token == token_string)
            .one_or_none()
        ) if token_string else None
        if token is None:
            raise NotFound("invalid link")
        return token

    def status(self, token: AccessToken) -> TokenStatus:
        if token.used:
            return TokenStatus(False, REASON_USED)
        if self.now() > token.expires_at:
            return TokenStatus(False, REASON_EXPIRED)
        return TokenStatus(True)

    def validate(self, token_string: str) -> TokenStatus:
        return self.status(self.lookup(token_string))

    def consume(self, token_string: str) -> AccessToken:
        """Mark the token used, once.

        A single conditional UPDATE: of any number of concurrent callers at
        most one sees a matched row.
        """
        now = self.now()
        matched = self.db.execute(
            update(AccessToken)
            .where(
                AccessToken.token == token_string,
                AccessToken.used.is_(False),
                AccessToken.expires_at >= now,
            )
            .values(used=True)
            .execution_options(synchronize_session=False)
        ).rowcount

        token = self.lookup(token_string)
        if matched != 1:
            self.db.refresh(token)
            status = self.status(token)
            raise InvalidToken(status.reason or REASON_USED)

        self.db.refresh(token)
        return token

    def revoke(self, token_id: int, admin_id: Optional[int] = None) -> AccessToken:
        token = self.db.get(AccessToken, token_id)
        if token is None or (admin_id is not None and token.subject.admin_id != admin_id):
            raise NotFound("token not found")
        if not token.used:
            token.used = True
            record(self.db, "REVOKE_TOKEN", f"check-in link {token.id} revoked", user_id=admin_id)
            log.info("Revoked token id=%s", token.id)
        return token
