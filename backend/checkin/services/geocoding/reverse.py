# backend/checkin/services/geocoding/reverse.py
from __future__ import annotations

import logging
from typing import Optional

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

log = logging.getLogger(__name__)


def format_address(address: dict) -> Optional[str]:
    """Street, number - neighbourhood - city - state - postcode."""
    if not address:
        return None
    parts = []
    road = address.get("road")
    if road:
        if address.get("house_number"):
            road = f"{road}, {address['house_number']}"
        parts.append(road)
    district = address.get("suburb") or address.get("neighbourhood")
    if district:
        parts.append(district)
    city = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("municipality")
    )
    if city:
        parts.append(city)
    if address.get("state"):
        parts.append(address["state"])
    if address.get("postcode"):
        parts.append(f"Postcode: {address['postcode']}")
    return " - ".join(parts) or None


class ReverseGeocoder:
    """Best-effort Nominatim lookup. Never raises; failures yield ``None``."""

    def __init__(self, user_agent: str, timeout: int = 5, enabled: bool = True):
        self.enabled = enabled
        self._geolocator = Nominatim(user_agent=user_agent, timeout=timeout) if enabled else None

    def reverse(self, lat: float, lng: float) -> Optional[str]:
        if not self.enabled:
            return None
        try:
            location = self._geolocator.reverse((lat, lng), exactly_one=True, addressdetails=True, zoom=18)
        except (GeopyError, ValueError) as e:
            log.warning("Reverse geocoding failed: %s", e)
            return None
        if location is None:
            return None
        raw = location.raw or {}
        return format_address(raw.get("address") or {}) or location.address
