# backend/checkin/schemas/schedule.py
import re
from typing import Literal, Optional

from pydantic import field_validator

from .commons import CamelModel, UtcDateTime

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_HH_MM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class ScheduleIn(CamelModel):
    # Optional so missing values surface as our own 400
    owner_id: Optional[int] = None
    weekday: Optional[Weekday] = None
    time: Optional[str] = None

    @field_validator("time")
    @classmethod
    def _hh_mm(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _HH_MM.match(v):
            raise ValueError("time must be in HH:mm format")
        return v


class ScheduleUpdate(CamelModel):
    active: Optional[bool] = None


class ScheduleOut(CamelModel):
    id: int
    owner_id: int
    weekday: str
    time: str
    active: bool
    created_at: UtcDateTime

    @classmethod
    def of(cls, s) -> "ScheduleOut":
        return cls(
            id=s.id,
            owner_id=s.subject_id,
            weekday=s.weekday,
            time=s.time,
            active=s.active,
            created_at=s.created_at,
        )


class ScheduleList(CamelModel):
    schedules: list[ScheduleOut]
