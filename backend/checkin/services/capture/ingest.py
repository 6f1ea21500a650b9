# backend/checkin/services/capture/ingest.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from checkin.errors import CheckinError, Internal, InvalidToken, ValidationError
from checkin.models.base import utcnow
from checkin.models.capture import Capture
from checkin.services.alerts.emitter import AlertEmitter
from checkin.services.audit.log import record
from checkin.services.capture.photo import normalize_photo
from checkin.services.geofence.evaluate import evaluate
from checkin.services.tokens.lifecycle import TokenLifecycle

log = logging.getLogger(__name__)


@dataclass
class CaptureResult:
    capture: Capture
    violated_zones: list[str] = field(default_factory=list)

    @property
    def out_of_bounds(self) -> bool:
        return bool(self.violated_zones)


class CaptureIngest:
    """Turn a consented check-in submission into a stored capture.

    Token consumption, the capture row, geofence alerts and the audit
    entry are committed together or not at all.
    """

    def __init__(
        self,
        db: Session,
        tokens: TokenLifecycle,
        geocoder=None,
        max_photo_bytes: int = 5 * 1024 * 1024,
        now: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.tokens = tokens
        self.geocoder = geocoder
        self.max_photo_bytes = max_photo_bytes
        self.now = now

    @staticmethod
    def _check_fields(token_string, photo, lat, lng, consent) -> None:
        if not token_string:
            raise ValidationError("token is required")
        if not photo:
            raise ValidationError("photo is required")
        if lat is None or lng is None:
            raise ValidationError("location is required")
        if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
            raise ValidationError("location is out of range")
        if consent is not True:
            raise ValidationError("consent is required")

    def _address(self, lat: float, lng: float) -> Optional[str]:
        if self.geocoder is None:
            return None
        try:
            return self.geocoder.reverse(lat, lng)
        except Exception:
            # geocoding failures never fail the submission
            log.warning("Reverse geocoding failed for (%s, %s)", lat, lng, exc_info=True)
            return None

    def submit(
        self,
        token_string: Optional[str],
        photo: Optional[str],
        lat: Optional[float],
        lng: Optional[float],
        metadata: Optional[dict[str, Any]] = None,
        *,
        consent: bool = False,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> CaptureResult:
        self._check_fields(token_string, photo, lat, lng, consent)

        token = self.tokens.lookup(token_string)
        status = self.tokens.status(token)
        if not status.valid:
            log.info("Rejected submission for token id=%s: %s", token.id, status.reason)
            raise InvalidToken(status.reason)

        photo_uri = normalize_photo(photo, self.max_photo_bytes)
        address = self._address(lat, lng)
        subject = token.subject
        subject_id = subject.id

        try:
            # consume first: a replay racing us fails here before anything is written
            self.tokens.consume(token_string)

            capture = Capture(
                subject_id=subject.id,
                photo=photo_uri,
                latitude=lat,
                longitude=lng,
                address=address,
                ip=ip,
                user_agent=(user_agent or "")[:512] or None,
                device_metadata=metadata or None,
                consented_at=self.now(),
            )
            self.db.add(capture)
            self.db.flush()

            violated = evaluate(lat, lng, subject.geofences)

            alerts = AlertEmitter(self.db)
            alerts.capture_completed(subject, capture)
            for zone_name in violated:
                alerts.geofence_violated(subject, capture, zone_name)

            subject.status = "verified"
            record(
                self.db,
                "CAPTURE",
                f"{subject.name} completed a check-in",
                ip=ip,
                user_agent=user_agent,
                user_id=subject.admin_id,
            )
            self.db.commit()
        except CheckinError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("Capture for subject %s failed", subject_id)
            raise Internal("could not store capture") from e

        self.db.refresh(capture)
        log.info(
            "Capture id=%s stored for subject %s (violations=%d)",
            capture.id, subject_id, len(violated),
        )
        return CaptureResult(capture=capture, violated_zones=violated)
