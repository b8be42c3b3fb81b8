"""
errors.py - Mapping of workflow errors onto HTTP responses.

RESPONSE CODES:
- 400 Bad Request: missing notes, empty signature, unknown format or status
- 403 Forbidden: actor lacks the capability or organization scope
- 404 Not Found: CAF, incident, staff or work order missing
- 409 Conflict: unreachable transition, duplicate signature, already linked
- 500 Internal Server Error: anything unexpected (logged, never leaked)
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session as DBSession

from fleetcaf.workflow import WorkflowError

logger = logging.getLogger(__name__)


def rejection(db: DBSession, error: WorkflowError, operation: str) -> HTTPException:
    """Roll back and build the HTTPException for a rejected operation."""
    db.rollback()
    logger.warning("%s rejected: %s - %s", operation, error.code, error.message)
    return HTTPException(status_code=error.status_code, detail=error.to_dict())


def internal_error(db: DBSession, error: Exception, operation: str) -> HTTPException:
    db.rollback()
    logger.exception("%s internal error: %s", operation, str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "status": "error",
            "code": "INTERNAL_ERROR",
            "message": f"Internal server error during {operation}",
        },
    )
