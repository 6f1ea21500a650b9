# backend/checkin/services/geofence/evaluate.py
from __future__ import annotations
from math import radians, sin, cos, asin, sqrt
from typing import Iterable, Protocol

EARTH_RADIUS_M = 6371000.0


class Zone(Protocol):
    name: str
    center_lat: float
    center_lng: float
    radius_m: float
    active: bool


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two points in decimal degrees."""
    dlat, dlng = radians(lat2 - lat1), radians(lng2 - lng1)
    a = sin(dlat/2)**2 + cos(radians(lat1))*cos(radians(lat2))*sin(dlng/2)**2
    return 2 * EARTH_RADIUS_M * asin(sqrt(a))


def is_outside(lat: float, lng: float, zone: Zone) -> bool:
    return haversine_m(lat, lng, zone.center_lat, zone.center_lng) > zone.radius_m


def evaluate(lat: float, lng: float, zones: Iterable[Zone]) -> list[str]:
    """Names of the active zones the point lies outside of, in input order.

    Inactive zones are skipped. Names are not deduplicated: two zones
    sharing a name are reported independently.
    """
    return [z.name for z in zones if z.active and is_outside(lat, lng, z)]
