# backend/checkin/schemas/alert.py
from typing import Optional

from .commons import CamelModel, UtcDateTime


class AlertOut(CamelModel):
    id: int
    owner_id: int
    owner_name: Optional[str] = None
    kind: str
    message: str
    capture_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    read: bool
    created_at: UtcDateTime

    @classmethod
    def of(cls, a) -> "AlertOut":
        cap = a.capture
        return cls(
            id=a.id,
            owner_id=a.subject_id,
            owner_name=a.subject.name if a.subject else None,
            kind=a.kind,
            message=a.message,
            capture_id=a.capture_id,
            latitude=cap.latitude if cap else None,
            longitude=cap.longitude if cap else None,
            address=cap.address if cap else None,
            read=a.read,
            created_at=a.created_at,
        )


class AlertList(CamelModel):
    alerts: list[AlertOut]
    unread_count: int


class UpdatedOut(CamelModel):
    updated: int


class AccessLogOut(CamelModel):
    id: int
    action: str
    details: Optional[str] = ""
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    user_id: Optional[int] = None
    created_at: UtcDateTime


class AccessLogList(CamelModel):
    logs: list[AccessLogOut]
