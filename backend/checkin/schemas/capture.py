# backend/checkin/schemas/capture.py
from typing import Any, Optional

from .commons import CamelModel


class CaptureIn(CamelModel):
    # Everything optional at the schema level; CaptureIngest reports what is missing
    token: Optional[str] = None
    photo: Optional[str] = None  # data URI or bare base64
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    consent: bool = False
    metadata: Optional[dict[str, Any]] = None


class CaptureOut(CamelModel):
    message: str
    capture_id: int
    out_of_bounds: bool
    violated_zones: list[str]
