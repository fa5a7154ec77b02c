"""
Optimistic values with rollback.

The displayed value changes as soon as a change is submitted. When the
persistence call succeeds the new value becomes the confirmed snapshot; when
it fails the last confirmed snapshot is displayed again.
"""
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from ..services.results import ActionError, ActionResult
from ..validators import ValidationFailure, validate_section_name

T = TypeVar("T")


class Phase(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    ROLLED_BACK = "rolled_back"


class OptimisticValue(Generic[T]):
    def __init__(self, value: T):
        self._confirmed = value
        self._pending: Optional[T] = None
        self.phase = Phase.CONFIRMED
        self.error: Optional[ActionError] = None

    @property
    def confirmed(self) -> T:
        return self._confirmed

    @property
    def displayed(self) -> T:
        if self.phase is Phase.PENDING:
            return self._pending
        return self._confirmed

    def submit(self, value: T) -> None:
        if self.phase is Phase.PENDING:
            raise RuntimeError("A change is already in flight")
        self._pending = value
        self.error = None
        self.phase = Phase.PENDING

    def confirm(self) -> None:
        if self.phase is not Phase.PENDING:
            raise RuntimeError("No pending change to confirm")
        self._confirmed = self._pending
        self._pending = None
        self.phase = Phase.CONFIRMED

    def rollback(self, error: Optional[ActionError] = None) -> None:
        if self.phase is not Phase.PENDING:
            raise RuntimeError("No pending change to roll back")
        self._pending = None
        self.error = error
        self.phase = Phase.ROLLED_BACK

    def resolve(self, result: ActionResult) -> bool:
        """Confirm or roll back according to an action result. Returns True on success."""
        if isinstance(result, ActionError):
            self.rollback(result)
            return False
        self.confirm()
        return True

    def apply(self, value: T, commit: Callable[[T], ActionResult]) -> bool:
        self.submit(value)
        return self.resolve(commit(self.displayed))


class InlineRename(OptimisticValue[str]):
    """
    Inline rename of a section.

    After a failed save the input re-opens with the server's message attached
    to the name field, or shown as a banner when the error is not field-scoped.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self.editing = False
        self.field_error: Optional[str] = None
        self.banner_error: Optional[str] = None

    def start(self) -> None:
        self.editing = True
        self.field_error = None
        self.banner_error = None

    def cancel(self) -> None:
        self.editing = False
        self.field_error = None
        self.banner_error = None

    def submit(self, value: Any) -> None:
        # Checked locally first so an invalid name never flashes on screen
        parsed = validate_section_name({"name": value})
        if isinstance(parsed, ValidationFailure):
            self.editing = True
            self.field_error = parsed.field_errors["name"]
            raise ValueError(self.field_error)
        self.field_error = None
        self.banner_error = None
        self.editing = False
        super().submit(parsed.data["name"])

    def rollback(self, error: Optional[ActionError] = None) -> None:
        super().rollback(error)
        self.editing = True
        if error is not None and error.field_errors and "name" in error.field_errors:
            self.field_error = error.field_errors["name"]
        elif error is not None:
            self.banner_error = error.error
