from fastapi import APIRouter, Depends
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, defer

from checkin.api.deps import current_admin, owned_subject
from checkin.db import get_db
from checkin.models.alert import Alert
from checkin.models.capture import Capture
from checkin.models.geofence import Geofence
from checkin.models.subject import Subject
from checkin.models.token import AccessToken
from checkin.models.user import User
from checkin.schemas.commons import OkOut, SubjectKind, SubjectStatus
from checkin.schemas.schedule import ScheduleOut
from checkin.schemas.subject import (
    AlertPreview,
    CaptureSummary,
    SubjectCounts,
    SubjectDetail,
    SubjectIn,
    SubjectOut,
    SubjectSummary,
    SubjectUpdate,
    ZoneRef,
)
from checkin.schemas.token import TokenOut
from checkin.services.audit.log import record

router = APIRouter()


UNREAD_PREVIEW = 5


def _count_by_subject(db: Session, column, ids: list[int], *criteria) -> dict[int, int]:
    model = column.class_
    rows = (
        db.query(model.subject_id, func.count(column))
        .filter(model.subject_id.in_(ids), *criteria)
        .group_by(model.subject_id)
        .all()
    )
    return dict(rows)


def _summaries(db: Session, subjects: list[Subject]) -> list[SubjectSummary]:
    ids = [s.id for s in subjects]
    if not ids:
        return []
    counts = {
        "captures": _count_by_subject(db, Capture.id, ids),
        "tokens": _count_by_subject(db, AccessToken.id, ids),
        "alerts": _count_by_subject(db, Alert.id, ids),
        "geofences": _count_by_subject(db, Geofence.id, ids),
    }
    unread = _count_by_subject(db, Alert.id, ids, Alert.read.is_(False))

    out = []
    for s in subjects:
        last_capture = (
            db.query(Capture)
            .options(defer(Capture.photo))
            .filter(Capture.subject_id == s.id)
            .order_by(Capture.created_at.desc(), Capture.id.desc())
            .first()
        )
        last_token = (
            db.query(AccessToken)
            .filter(AccessToken.subject_id == s.id)
            .order_by(AccessToken.created_at.desc(), AccessToken.id.desc())
            .first()
        )
        unread_alerts = (
            db.query(Alert)
            .filter(Alert.subject_id == s.id, Alert.read.is_(False))
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .limit(UNREAD_PREVIEW)
            .all()
        )
        out.append(SubjectSummary(
            **SubjectOut.model_validate(s).model_dump(),
            last_capture=CaptureSummary.model_validate(last_capture) if last_capture else None,
            last_token=TokenOut.model_validate(last_token) if last_token else None,
            active_geofences=[ZoneRef(id=g.id, name=g.name) for g in s.geofences if g.active],
            schedules=[ScheduleOut.of(x) for x in sorted(s.schedules, key=lambda x: x.sort_key) if x.active],
            counts=SubjectCounts(**{k: v.get(s.id, 0) for k, v in counts.items()}),
            unread_alert_count=unread.get(s.id, 0),
            unread_alerts=[AlertPreview.model_validate(a) for a in unread_alerts],
        ))
    return out


@router.get("")
@router.get("/")
def list_subjects(
    kind: SubjectKind | None = None,
    status: SubjectStatus | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> list[SubjectSummary]:
    q = db.query(Subject).filter(Subject.admin_id == admin.id)
    if kind:
        q = q.filter(Subject.kind == kind)
    if status:
        q = q.filter(Subject.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(Subject.name.ilike(pattern), Subject.phone.ilike(pattern)))
    subjects = q.order_by(Subject.created_at.desc(), Subject.id.desc()).all()
    return _summaries(db, subjects)


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_subject(
    payload: SubjectIn,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> SubjectOut:
    obj = Subject(
        admin_id=admin.id,
        kind=payload.kind,
        name=payload.name,
        phone=payload.phone,
        email=payload.email,
        notes=payload.notes or "",
    )
    db.add(obj)
    record(db, "CREATE_SUBJECT", f"{payload.kind} {payload.name} created", user_id=admin.id)
    db.commit()
    db.refresh(obj)
    return SubjectOut.model_validate(obj)


@router.get("/{subject_id}")
def get_subject(
    subject_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> SubjectDetail:
    return SubjectDetail.model_validate(owned_subject(db, admin, subject_id))


@router.patch("/{subject_id}")
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> SubjectOut:
    s = owned_subject(db, admin, subject_id)
    if payload.name is not None:
        s.name = payload.name
    if payload.phone is not None:
        s.phone = payload.phone
    if payload.email is not None:
        s.email = payload.email
    if payload.notes is not None:
        s.notes = payload.notes
    db.add(s)
    db.commit()
    db.refresh(s)
    return SubjectOut.model_validate(s)


@router.delete("/{subject_id}")
def delete_subject(
    subject_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> OkOut:
    s = owned_subject(db, admin, subject_id)
    record(db, "DELETE_SUBJECT", f"{s.kind} {s.name} deleted", user_id=admin.id)
    db.delete(s)
    db.commit()
    return OkOut()
