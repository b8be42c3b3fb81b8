"""
errors.py - CAF workflow error taxonomy.

Errors are contracts, not strings. Each carries a stable code, a human
message and optional details, and maps to exactly one HTTP status:

- BadRequestError       -> 400 (malformed or incomplete input)
- PermissionDeniedError -> 403 (actor lacks capability or scope)
- NotFoundError         -> 404
- StateConflictError    -> 409 (operation not legal in the current state)

A raised WorkflowError always means nothing was mutated.
"""

from typing import Any


class WorkflowError(Exception):
    """Base exception for rejected workflow operations."""

    status_code = 400

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "rejected",
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class BadRequestError(WorkflowError):
    """400 Bad Request - missing notes, empty signature, unsupported format."""

    status_code = 400


class PermissionDeniedError(WorkflowError):
    """403 Forbidden - actor lacks the capability for this action."""

    status_code = 403


class NotFoundError(WorkflowError):
    """404 Not Found - CAF, staff, incident or work order does not exist."""

    status_code = 404


class StateConflictError(WorkflowError):
    """409 Conflict - unreachable transition, duplicate signature, already linked."""

    status_code = 409
