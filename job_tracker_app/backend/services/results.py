"""
Outcomes of mutation actions.

A whole-page mutation ends in a Redirect, an inline mutation in an
ActionSuccess payload, and any failure in an ActionError envelope.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from sqlalchemy.exc import IntegrityError

FIX_ERRORS_MESSAGE = "Please fix the errors below."

# Error kinds, used by the HTTP layer to pick a status code
VALIDATION = "validation"
UNAUTHORIZED = "unauthorized"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
PERSISTENCE = "persistence"

UNIQUE_VIOLATION_CODE = "23505"


@dataclass(frozen=True)
class ActionError:
    error: str
    field_errors: Optional[Dict[str, str]] = None
    kind: str = PERSISTENCE

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.field_errors:
            body["fieldErrors"] = dict(self.field_errors)
        return body


@dataclass(frozen=True)
class Redirect:
    url: str
    record_id: Optional[str] = None


@dataclass(frozen=True)
class ActionSuccess:
    payload: Dict[str, Any] = field(default_factory=lambda: {"success": True})


ActionResult = Union[ActionError, Redirect, ActionSuccess]


def validation_error(field_errors: Dict[str, str]) -> ActionError:
    return ActionError(error=FIX_ERRORS_MESSAGE, field_errors=field_errors, kind=VALIDATION)


def unauthorized(action: str) -> ActionError:
    return ActionError(error=f"You must be logged in to {action}.", kind=UNAUTHORIZED)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the database rejected a row because of a unique constraint."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == UNIQUE_VIOLATION_CODE:
        return True
    return "UNIQUE constraint failed" in str(orig)
