# backend/checkin/schemas/geofence.py
from pydantic import Field
from typing import Optional

from .commons import CamelModel, UtcDateTime


class GeofenceIn(CamelModel):
    owner_id: int
    name: str = Field(min_length=1, max_length=120)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    radius_meters: float = Field(gt=0)


class GeofenceUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    radius_meters: Optional[float] = Field(default=None, gt=0)
    active: Optional[bool] = None


class GeofenceOut(CamelModel):
    id: int
    owner_id: int
    name: str
    lat: float
    lng: float
    radius_meters: float
    active: bool
    created_at: UtcDateTime

    @classmethod
    def of(cls, g) -> "GeofenceOut":
        return cls(
            id=g.id,
            owner_id=g.subject_id,
            name=g.name,
            lat=g.center_lat,
            lng=g.center_lng,
            radius_meters=g.radius_m,
            active=g.active,
            created_at=g.created_at,
        )


class GeofenceList(CamelModel):
    geofences: list[GeofenceOut]
