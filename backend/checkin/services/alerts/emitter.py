# backend/checkin/services/alerts/emitter.py
from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import update, func
from sqlalchemy.orm import Session, joinedload

from checkin.errors import NotFound
from checkin.models.alert import Alert, CAPTURE_COMPLETED, GEOFENCE_VIOLATED
from checkin.models.capture import Capture
from checkin.models.subject import Subject

log = logging.getLogger(__name__)


class AlertEmitter:
    def __init__(self, db: Session):
        self.db = db

    def _emit(self, subject: Subject, kind: str, message: str, capture: Optional[Capture]) -> Alert:
        alert = Alert(
            subject_id=subject.id,
            kind=kind,
            message=message,
            capture_id=capture.id if capture is not None else None,
            read=False,
        )
        self.db.add(alert)
        return alert

    def capture_completed(self, subject: Subject, capture: Capture) -> Alert:
        where = f" at {capture.address}" if capture.address else ""
        return self._emit(subject, CAPTURE_COMPLETED, f"{subject.name} checked in{where}", capture)

    def geofence_violated(self, subject: Subject, capture: Capture, zone_name: str) -> Alert:
        log.warning("Subject %s outside geofence %r (capture %s)", subject.id, zone_name, capture.id)
        return self._emit(
            subject, GEOFENCE_VIOLATED, f'{subject.name} is outside the zone "{zone_name}"', capture
        )

    def mark_read(self, alert_id: int, owner_ids: Optional[Iterable[int]] = None) -> Alert:
        """Flip one alert to read. Re-marking a read alert is a no-op."""
        alert = self.db.get(Alert, alert_id)
        if alert is None or (owner_ids is not None and alert.subject_id not in set(owner_ids)):
            raise NotFound("alert not found")
        alert.read = True
        return alert

    def mark_all_read(self, owner_id: int) -> int:
        return self.mark_all_read_for([owner_id])

    def mark_all_read_for(self, owner_ids: Iterable[int]) -> int:
        ids = list(owner_ids)
        if not ids:
            return 0
        return self.db.execute(
            update(Alert)
            .where(Alert.subject_id.in_(ids), Alert.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        ).rowcount

    def list(self, owner_ids: Iterable[int], unread_only: bool = False, limit: int = 50) -> list[Alert]:
        ids = list(owner_ids)
        if not ids:
            return []
        q = (
            self.db.query(Alert)
            .options(joinedload(Alert.subject), joinedload(Alert.capture))
            .filter(Alert.subject_id.in_(ids))
        )
        if unread_only:
            q = q.filter(Alert.read.is_(False))
        return q.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit).all()

    def unread_count(self, owner_ids: Iterable[int]) -> int:
        ids = list(owner_ids)
        if not ids:
            return 0
        return (
            self.db.query(func.count(Alert.id))
            .filter(Alert.subject_id.in_(ids), Alert.read.is_(False))
            .scalar()
        )
