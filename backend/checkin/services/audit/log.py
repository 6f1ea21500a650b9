# backend/checkin/services/audit/log.py
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from checkin.models.access_log import AccessLog


def record(
    db: Session,
    action: str,
    details: str = "",
    *,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
    user_id: Optional[int] = None,
) -> AccessLog:
    """Add an access-log row to the current transaction (no commit)."""
    entry = AccessLog(
        action=action,
        details=details,
        ip=ip,
        user_agent=(user_agent or "")[:512] or None,
        user_id=user_id,
    )
    db.add(entry)
    return entry


def recent(db: Session, user_id: int, limit: int = 50) -> list[AccessLog]:
    return (
        db.query(AccessLog)
        .filter(AccessLog.user_id == user_id)
        .order_by(AccessLog.created_at.desc(), AccessLog.id.desc())
        .limit(limit)
        .all()
    )
