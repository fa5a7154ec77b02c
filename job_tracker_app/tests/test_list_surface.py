"""
Test the list surface state machine: drawer, detail popup and delete confirmation.
"""
import pytest

from backend.services.results import ActionError, Redirect
from backend.views.list_surface import (
    ADD_BUTTON_ID,
    DrawerMode,
    InvalidTransition,
    ListSurface,
    SurfaceState,
    edit_control_id,
)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def surface(clock):
    return ListSurface(close_delay=0.3, clock=clock)


class TestDrawer:
    def test_starts_idle(self, surface):
        assert surface.state is SurfaceState.IDLE
        assert surface.drawer_mode is None
        assert surface.displayed_record is None

    def test_create_drawer_returns_focus_to_add_button(self, surface):
        surface.open_create()
        assert surface.state is SurfaceState.DRAWER_OPEN
        assert surface.drawer_mode is DrawerMode.CREATE

        focus = surface.close_drawer()

        assert focus == ADD_BUTTON_ID
        assert surface.state is SurfaceState.IDLE

    def test_edit_drawer_returns_focus_to_row_control(self, surface):
        surface.open_edit("app-7")
        assert surface.drawer_record_id == "app-7"
        assert surface.drawer_opener == "edit-app-7"

        focus = surface.close_drawer()

        assert focus == edit_control_id("app-7")
        assert surface.focus_target == "edit-app-7"
        assert surface.drawer_record_id is None

    def test_cannot_open_two_overlays(self, surface):
        surface.open_create()

        with pytest.raises(InvalidTransition):
            surface.open_edit("app-1")
        with pytest.raises(InvalidTransition):
            surface.open_detail({"id": "app-1"})

    def test_close_drawer_when_idle(self, surface):
        with pytest.raises(InvalidTransition):
            surface.close_drawer()


class TestDetailPopup:
    def test_record_cleared_after_delay(self, surface, clock):
        record = {"id": "app-1"}
        surface.open_detail(record)
        assert surface.state is SurfaceState.DETAIL_OPEN

        surface.close_detail()
        # Closed for interaction right away...
        assert surface.state is SurfaceState.IDLE
        # ...but the record stays on screen during the closing transition
        clock.advance(0.29)
        assert surface.displayed_record is record

        clock.advance(0.02)
        assert surface.displayed_record is None

    def test_reopen_during_delay_keeps_new_record(self, surface, clock):
        surface.open_detail({"id": "first"})
        surface.close_detail()
        clock.advance(0.1)

        second = {"id": "second"}
        surface.open_detail(second)
        clock.advance(1.0)

        assert surface.displayed_record is second

    def test_drawer_can_open_while_record_fades(self, surface):
        surface.open_detail({"id": "app-1"})
        surface.close_detail()

        surface.open_create()

        assert surface.state is SurfaceState.DRAWER_OPEN


class TestDeleteConfirmation:
    def test_first_request_deletes_nothing(self, surface):
        surface.request_delete("app-1")

        assert surface.pending_delete_id == "app-1"
        assert surface.delete_error is None
        assert not surface.deleting

    def test_cancel_returns_to_prior_state(self, surface):
        surface.request_delete("app-1")

        surface.cancel_delete()

        assert surface.state is SurfaceState.IDLE
        assert surface.pending_delete_id is None

    def test_confirm_runs_delete(self, surface):
        calls = []

        def delete(application_id):
            calls.append(application_id)
            return Redirect("/applications")

        surface.request_delete("app-1")
        result = surface.confirm_delete(delete)

        assert calls == ["app-1"]
        assert isinstance(result, Redirect)
        assert surface.pending_delete_id is None
        assert surface.state is SurfaceState.IDLE

    def test_failed_delete_keeps_confirmation_open(self, surface):
        surface.request_delete("app-1")

        result = surface.confirm_delete(lambda application_id: ActionError(error="Could not delete."))

        assert isinstance(result, ActionError)
        assert surface.pending_delete_id == "app-1"
        assert surface.delete_error == "Could not delete."
        assert not surface.deleting

    def test_delete_from_edit_drawer_closes_it(self, surface):
        surface.open_edit("app-1")
        surface.request_delete("app-1")

        surface.confirm_delete(lambda application_id: Redirect("/applications"))

        assert surface.state is SurfaceState.IDLE
        assert surface.drawer_mode is None

    def test_cancel_in_edit_drawer_keeps_drawer(self, surface):
        surface.open_edit("app-1")
        surface.request_delete("app-1")

        surface.cancel_delete()

        assert surface.state is SurfaceState.DRAWER_OPEN
        assert surface.drawer_mode is DrawerMode.EDIT

    def test_not_from_create_drawer_or_detail(self, surface):
        surface.open_create()
        with pytest.raises(InvalidTransition):
            surface.request_delete("app-1")
        surface.close_drawer()

        surface.open_detail({"id": "app-1"})
        with pytest.raises(InvalidTransition):
            surface.request_delete("app-1")

    def test_confirm_without_request(self, surface):
        with pytest.raises(InvalidTransition):
            surface.confirm_delete(lambda application_id: Redirect("/applications"))

    def test_overlays_blocked_while_confirming(self, surface):
        surface.request_delete("app-1")

        with pytest.raises(InvalidTransition):
            surface.open_create()


class TestFromQuery:
    RECORDS = {"a1": {"id": "a1"}, "a2": {"id": "a2"}}

    def _build(self, params):
        return ListSurface.from_query(params, self.RECORDS.get)

    def test_empty_query_is_idle(self):
        assert self._build({}).state is SurfaceState.IDLE

    def test_create_drawer(self):
        surface = self._build({"drawer": "create"})

        assert surface.drawer_mode is DrawerMode.CREATE

    def test_edit_drawer(self):
        surface = self._build({"edit": "a1"})

        assert surface.drawer_mode is DrawerMode.EDIT
        assert surface.drawer_record_id == "a1"

    def test_detail(self):
        surface = self._build({"detail": "a2"})

        assert surface.state is SurfaceState.DETAIL_OPEN
        assert surface.displayed_record == {"id": "a2"}

    def test_closed_keeps_record_until_delay(self):
        clock = FakeClock()
        surface = ListSurface.from_query({"closed": "a2"}, self.RECORDS.get, close_delay=0.3, clock=clock)

        assert surface.state is SurfaceState.IDLE
        assert surface.displayed_record == {"id": "a2"}
        clock.advance(0.3)
        assert surface.displayed_record is None

    def test_closed_unknown_id_shows_nothing(self):
        surface = self._build({"closed": "missing"})

        assert surface.state is SurfaceState.IDLE
        assert surface.displayed_record is None

    def test_unknown_ids_ignored(self):
        surface = self._build({"edit": "missing", "delete": "missing"})

        assert surface.state is SurfaceState.IDLE
        assert surface.pending_delete_id is None

    def test_delete_confirmation(self):
        surface = self._build({"delete": "a1"})

        assert surface.pending_delete_id == "a1"

    def test_delete_ignored_over_detail(self):
        surface = self._build({"detail": "a1", "delete": "a1"})

        assert surface.state is SurfaceState.DETAIL_OPEN
        assert surface.pending_delete_id is None
