from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from checkin.api.deps import current_admin
from checkin.db import get_db
from checkin.models.user import User
from checkin.schemas.alert import AccessLogList, AccessLogOut
from checkin.services.audit.log import recent

router = APIRouter()


@router.get("")
@router.get("/")
def list_logs(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(current_admin),
) -> AccessLogList:
    return AccessLogList(logs=[AccessLogOut.model_validate(e) for e in recent(db, admin.id, limit)])
