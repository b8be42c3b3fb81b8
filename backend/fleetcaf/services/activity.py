import json
from typing import Any

from sqlalchemy.orm import Session as DBSession

from fleetcaf.models import ActivityLog
from fleetcaf.workflow.transitions import utcnow


def record_activity(
    db: DBSession,
    caf_id: str | None,
    title: str,
    content: dict[str, Any],
    tags: list[str],
    created_by: str | None,
    activity_type: str = "caf",
) -> ActivityLog:
    """Append an audit entry in the caller's transaction."""
    entry = ActivityLog(
        caf_id=caf_id,
        activity_type=activity_type,
        title=title,
        content=json.dumps(content, sort_keys=True, default=str),
        tags=tags,
        created_by=created_by,
        created_at=utcnow(),
    )
    db.add(entry)
    return entry
