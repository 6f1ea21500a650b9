from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from checkin.api.deps import current_admin, owned_subject
from checkin.db import get_db
from checkin.errors import NotFound
from checkin.models.geofence import Geofence
from checkin.models.user import User
from checkin.schemas.commons import OkOut
from checkin.schemas.geofence import GeofenceIn, GeofenceList, GeofenceOut, GeofenceUpdate
from checkin.services.audit.log import record

router = APIRouter()


def _owned_geofence(db: Session, admin: User, geofence_id: int) -> Geofence:
    g = db.get(Geofence, geofence_id)
    if not g or g.subject.admin_id != admin.id:
        raise NotFound("geofence not found")
    return g


@router.get("")
@router.get("/")
def list_geofences(
    owner_id: int | None = Query(None, alias="ownerId"),
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> GeofenceList:
    subject = owned_subject(db, admin, owner_id)
    rows = (
        db.query(Geofence)
        .filter(Geofence.subject_id == subject.id)
        .order_by(Geofence.created_at.desc(), Geofence.id.desc())
        .all()
    )
    return GeofenceList(geofences=[GeofenceOut.of(g) for g in rows])


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_geofence(
    payload: GeofenceIn,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> GeofenceOut:
    subject = owned_subject(db, admin, payload.owner_id)
    g = Geofence(
        subject_id=subject.id,
        name=payload.name,
        center_lat=payload.lat,
        center_lng=payload.lng,
        radius_m=payload.radius_meters,
        active=True,
    )
    db.add(g)
    record(db, "CREATE_GEOFENCE", f'zone "{payload.name}" created for {subject.name}', user_id=admin.id)
    db.commit()
    db.refresh(g)
    return GeofenceOut.of(g)


@router.patch("/{geofence_id}")
def update_geofence(
    geofence_id: int,
    payload: GeofenceUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> GeofenceOut:
    g = _owned_geofence(db, admin, geofence_id)
    if payload.name is not None:
        g.name = payload.name
    if payload.lat is not None:
        g.center_lat = payload.lat
    if payload.lng is not None:
        g.center_lng = payload.lng
    if payload.radius_meters is not None:
        g.radius_m = payload.radius_meters
    if payload.active is not None:
        g.active = payload.active
    db.add(g)
    db.commit()
    db.refresh(g)
    return GeofenceOut.of(g)


@router.delete("/{geofence_id}")
def delete_geofence(
    geofence_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> OkOut:
    g = _owned_geofence(db, admin, geofence_id)
    record(db, "DELETE_GEOFENCE", f'zone "{g.name}" deleted', user_id=admin.id)
    db.delete(g)
    db.commit()
    return OkOut()
