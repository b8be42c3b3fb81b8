"""
deps.py - Request dependencies.

The calling staff member is identified by the X-Staff-Id header and turned
into an Actor once, here. Endpoints and services only ever see the Actor.
"""

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session as DBSession

from fleetcaf.database import get_db
from fleetcaf.models import Staff
from fleetcaf.workflow import Actor


def get_current_actor(
    x_staff_id: str | None = Header(None, alias="X-Staff-Id"),
    db: DBSession = Depends(get_db),
) -> Actor:
    if not x_staff_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "status": "rejected",
                "code": "AUTHENTICATION_REQUIRED",
                "message": "X-Staff-Id header is required",
            },
        )

    staff = db.get(Staff, x_staff_id)
    if staff is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "status": "rejected",
                "code": "UNKNOWN_STAFF",
                "message": "Staff member not found",
            },
        )
    if not staff.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "status": "rejected",
                "code": "STAFF_INACTIVE",
                "message": "Staff member is inactive",
            },
        )

    return Actor.from_staff(staff)
