"""
State of the application list surface: an edit drawer, a detail popup and an
inline delete confirmation layered over the list.

States are IDLE, DRAWER_OPEN (create or edit) and DETAIL_OPEN. Closing a
drawer hands keyboard focus back to the control that opened it. Closing the
detail popup is immediate, but the record it showed stays available for a
short delay so the closing transition does not render an empty popup.
"""
import time
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ..services.results import ActionError, ActionResult

ADD_BUTTON_ID = "add-application"
DEFAULT_CLOSE_DELAY = 0.3


def edit_control_id(application_id: str) -> str:
    return f"edit-{application_id}"


class SurfaceState(str, Enum):
    IDLE = "idle"
    DRAWER_OPEN = "drawer-open"
    DETAIL_OPEN = "detail-open"


class DrawerMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class InvalidTransition(Exception):
    pass


class ListSurface:
    def __init__(self, close_delay: float = DEFAULT_CLOSE_DELAY, clock: Callable[[], float] = time.monotonic):
        self.close_delay = close_delay
        self._clock = clock

        self.state = SurfaceState.IDLE
        self.drawer_mode: Optional[DrawerMode] = None
        self.drawer_record_id: Optional[str] = None
        self.focus_target: Optional[str] = None

        self._detail_record: Any = None
        self._clear_at: Optional[float] = None

        self.pending_delete_id: Optional[str] = None
        self.delete_error: Optional[str] = None
        self.deleting = False
        self._state_before_delete: Optional[SurfaceState] = None

    # ------------------------------------------------------------------
    # Drawer
    # ------------------------------------------------------------------
    def open_create(self) -> None:
        self._require(SurfaceState.IDLE, "open the add drawer")
        self.state = SurfaceState.DRAWER_OPEN
        self.drawer_mode = DrawerMode.CREATE
        self.drawer_record_id = None

    def open_edit(self, application_id: str) -> None:
        self._require(SurfaceState.IDLE, "open the edit drawer")
        self.state = SurfaceState.DRAWER_OPEN
        self.drawer_mode = DrawerMode.EDIT
        self.drawer_record_id = application_id

    @property
    def drawer_opener(self) -> Optional[str]:
        """Id of the control that opened the drawer."""
        if self.drawer_mode is DrawerMode.EDIT:
            return edit_control_id(self.drawer_record_id)
        if self.drawer_mode is DrawerMode.CREATE:
            return ADD_BUTTON_ID
        return None

    def close_drawer(self) -> str:
        """Return to IDLE and report which control should get focus back."""
        self._require(SurfaceState.DRAWER_OPEN, "close the drawer")
        self.focus_target = self.drawer_opener
        self.state = SurfaceState.IDLE
        self.drawer_mode = None
        self.drawer_record_id = None
        return self.focus_target

    # ------------------------------------------------------------------
    # Detail popup
    # ------------------------------------------------------------------
    def open_detail(self, record: Any) -> None:
        self._require(SurfaceState.IDLE, "open a record")
        self.state = SurfaceState.DETAIL_OPEN
        self._detail_record = record
        self._clear_at = None

    def close_detail(self) -> None:
        self._require(SurfaceState.DETAIL_OPEN, "close the detail view")
        self.state = SurfaceState.IDLE
        self._clear_at = self._clock() + self.close_delay

    @property
    def displayed_record(self) -> Any:
        if self._clear_at is not None and self._clock() >= self._clear_at:
            self._detail_record = None
            self._clear_at = None
        return self._detail_record

    # ------------------------------------------------------------------
    # Delete confirmation
    # ------------------------------------------------------------------
    def request_delete(self, application_id: str) -> None:
        """First click: reveal the confirmation, nothing is deleted yet."""
        if self.pending_delete_id is not None:
            raise InvalidTransition("A delete confirmation is already open")
        if self.state is SurfaceState.DETAIL_OPEN:
            raise InvalidTransition("Cannot delete from the detail view")
        if self.state is SurfaceState.DRAWER_OPEN and self.drawer_mode is not DrawerMode.EDIT:
            raise InvalidTransition("Cannot delete from the add drawer")
        self._state_before_delete = self.state
        self.pending_delete_id = application_id
        self.delete_error = None

    def cancel_delete(self) -> None:
        if self.pending_delete_id is None:
            raise InvalidTransition("No delete confirmation is open")
        self.state = self._state_before_delete or SurfaceState.IDLE
        self.pending_delete_id = None
        self.delete_error = None
        self._state_before_delete = None

    def confirm_delete(self, delete: Callable[[str], ActionResult]) -> ActionResult:
        """Second, explicit click: run the destructive action."""
        if self.pending_delete_id is None:
            raise InvalidTransition("No delete confirmation is open")
        if self.deleting:
            raise InvalidTransition("Delete already in progress")
        self.deleting = True
        try:
            result = delete(self.pending_delete_id)
        finally:
            self.deleting = False
        if isinstance(result, ActionError):
            # The confirmation stays open so the user can retry or cancel
            self.delete_error = result.error
            return result
        if self.drawer_record_id == self.pending_delete_id:
            self.drawer_mode = None
            self.drawer_record_id = None
        self.state = SurfaceState.IDLE
        self.pending_delete_id = None
        self._state_before_delete = None
        return result

    # ------------------------------------------------------------------
    def _require(self, state: SurfaceState, action: str) -> None:
        if self.state is not state or self.pending_delete_id is not None:
            raise InvalidTransition(f"Cannot {action} while {self.state.value}")

    @classmethod
    def from_query(
        cls,
        params: Mapping[str, str],
        find: Callable[[str], Any],
        close_delay: float = DEFAULT_CLOSE_DELAY,
        clock: Callable[[], float] = time.monotonic,
    ) -> "ListSurface":
        """
        Rebuild the surface from page query parameters.

        Recognized keys: drawer=create, edit=<id>, detail=<id>, closed=<id>,
        delete=<id>. `closed` is the page right after the popup was closed: the
        surface is idle but the record is still displayed until the close delay
        runs out. Ids that do not resolve through `find` are ignored.
        """
        surface = cls(close_delay=close_delay, clock=clock)
        edit_id = params.get("edit")
        detail_id = params.get("detail")
        delete_id = params.get("delete")

        if params.get("drawer") == DrawerMode.CREATE.value:
            surface.open_create()
        elif edit_id and find(edit_id) is not None:
            surface.open_edit(edit_id)
        elif detail_id:
            record = find(detail_id)
            if record is not None:
                surface.open_detail(record)
        elif params.get("closed"):
            record = find(params["closed"])
            if record is not None:
                surface.open_detail(record)
                surface.close_detail()

        can_delete = surface.state is SurfaceState.IDLE or surface.drawer_mode is DrawerMode.EDIT
        if delete_id and can_delete and find(delete_id) is not None:
            surface.request_delete(delete_id)
        return surface
