from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from checkin.api.deps import current_admin, owned_subject, owned_subject_ids
from checkin.db import get_db
from checkin.models.user import User
from checkin.schemas.alert import AlertList, AlertOut, UpdatedOut
from checkin.schemas.commons import OkOut
from checkin.services.alerts.emitter import AlertEmitter

router = APIRouter()


def _scope(db: Session, admin: User, owner_id: int | None) -> list[int]:
    if owner_id is not None:
        return [owned_subject(db, admin, owner_id).id]
    return owned_subject_ids(db, admin)


@router.get("")
@router.get("/")
def list_alerts(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=500),
    owner_id: int | None = Query(None, alias="ownerId"),
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> AlertList:
    ids = _scope(db, admin, owner_id)
    emitter = AlertEmitter(db)
    return AlertList(
        alerts=[AlertOut.of(a) for a in emitter.list(ids, unread_only=unread_only, limit=limit)],
        unread_count=emitter.unread_count(ids),
    )


# declared before /{alert_id}/read so "read-all" is never taken for an id
@router.put("/read-all")
def mark_all_read(
    owner_id: int | None = Query(None, alias="ownerId"),
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> UpdatedOut:
    updated = AlertEmitter(db).mark_all_read_for(_scope(db, admin, owner_id))
    db.commit()
    return UpdatedOut(updated=updated)


@router.put("/{alert_id}/read")
def mark_read(
    alert_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> OkOut:
    AlertEmitter(db).mark_read(alert_id, owner_ids=owned_subject_ids(db, admin))
    db.commit()
    return OkOut()
