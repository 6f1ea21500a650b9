from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from checkin.api.deps import current_admin, owned_subject
from checkin.db import get_db
from checkin.errors import NotFound, ValidationError
from checkin.models.schedule import Schedule
from checkin.models.subject import Subject
from checkin.models.user import User
from checkin.schemas.commons import OkOut
from checkin.schemas.schedule import ScheduleIn, ScheduleList, ScheduleOut, ScheduleUpdate
from checkin.services.audit.log import record

router = APIRouter()

DUPLICATE_SLOT = "a schedule already exists for this day and time"


def _owned_child(db: Session, admin: User, subject_id: int | None) -> Subject:
    if subject_id is None:
        raise ValidationError("ownerId is required")
    try:
        subject = owned_subject(db, admin, subject_id)
    except NotFound:
        raise NotFound("child not found")
    if subject.kind != "child":
        raise NotFound("child not found")
    return subject


def _owned_schedule(db: Session, admin: User, schedule_id: int) -> Schedule:
    s = db.get(Schedule, schedule_id)
    if not s or s.subject.admin_id != admin.id:
        raise NotFound("schedule not found")
    return s


@router.get("")
@router.get("/")
def list_schedules(
    owner_id: int | None = Query(None, alias="ownerId"),
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> ScheduleList:
    child = _owned_child(db, admin, owner_id)
    rows = sorted(child.schedules, key=lambda s: s.sort_key)
    return ScheduleList(schedules=[ScheduleOut.of(s) for s in rows])


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_schedule(
    payload: ScheduleIn,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> ScheduleOut:
    if payload.owner_id is None or payload.weekday is None or payload.time is None:
        raise ValidationError("ownerId, weekday and time are required")
    child = _owned_child(db, admin, payload.owner_id)

    exists = (
        db.query(Schedule.id)
        .filter_by(subject_id=child.id, weekday=payload.weekday, time=payload.time)
        .first()
    )
    if exists:
        raise ValidationError(DUPLICATE_SLOT)

    s = Schedule(subject_id=child.id, weekday=payload.weekday, time=payload.time, active=True)
    db.add(s)
    record(db, "CREATE_SCHEDULE", f"{payload.weekday} {payload.time} scheduled for {child.name}", user_id=admin.id)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with an identical insert
        db.rollback()
        raise ValidationError(DUPLICATE_SLOT)
    db.refresh(s)
    return ScheduleOut.of(s)


@router.patch("/{schedule_id}")
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> ScheduleOut:
    s = _owned_schedule(db, admin, schedule_id)
    if payload.active is not None:
        s.active = payload.active
    db.add(s)
    db.commit()
    db.refresh(s)
    return ScheduleOut.of(s)


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> OkOut:
    s = _owned_schedule(db, admin, schedule_id)
    record(db, "DELETE_SCHEDULE", f"{s.weekday} {s.time} removed for {s.subject.name}", user_id=admin.id)
    db.delete(s)
    db.commit()
    return OkOut()
