# backend/checkin/schemas/subject.py
from pydantic import Field
from typing import Optional

from .commons import CamelModel, SubjectKind, UtcDateTime
from .schedule import ScheduleOut
from .token import TokenOut


class SubjectIn(CamelModel):
    kind: SubjectKind
    name: str = Field(min_length=1, max_length=120)
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: str = ""


class SubjectUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None


class SubjectOut(CamelModel):
    id: int
    kind: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = ""
    status: str
    created_at: UtcDateTime


class CaptureSummary(CamelModel):
    id: int
    latitude: float
    longitude: float
    address: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: UtcDateTime


class SubjectDetail(SubjectOut):
    captures: list[CaptureSummary] = []


class ZoneRef(CamelModel):
    id: int
    name: str


class AlertPreview(CamelModel):
    id: int
    kind: str
    message: str
    created_at: UtcDateTime


class SubjectCounts(CamelModel):
    captures: int = 0
    tokens: int = 0
    alerts: int = 0
    geofences: int = 0


class SubjectSummary(SubjectOut):
    """List item: the subject plus what the dashboard shows next to it."""

    last_capture: Optional[CaptureSummary] = None
    last_token: Optional[TokenOut] = None
    active_geofences: list[ZoneRef] = []
    schedules: list[ScheduleOut] = []
    counts: SubjectCounts = SubjectCounts()
    unread_alert_count: int = 0
    unread_alerts: list[AlertPreview] = []
