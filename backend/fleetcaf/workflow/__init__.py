"""CAF workflow core: pure transition, signature and permission rules."""

from .errors import (
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
    WorkflowError,
)
from .permissions import Actor, PermissionFlags, evaluate
from .signatures import SignatureDraft, plan_signature
from .transitions import StatusChange, is_reachable, plan_status_change, to_naive_utc, utcnow

__all__ = [
    "Actor",
    "BadRequestError",
    "NotFoundError",
    "PermissionDeniedError",
    "PermissionFlags",
    "SignatureDraft",
    "StateConflictError",
    "StatusChange",
    "WorkflowError",
    "evaluate",
    "is_reachable",
    "plan_signature",
    "plan_status_change",
    "to_naive_utc",
    "utcnow",
]
