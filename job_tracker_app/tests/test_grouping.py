"""
Test the flat and by-section projections of the application list.
"""
import pytest

from backend.views.grouping import (
    UNSECTIONED_LABEL,
    ViewMode,
    collation_key,
    group_by_section,
    project,
)


def _app(app_id, section=None):
    return {"id": app_id, "section_name": section}


class TestGroupBySection:
    """Partitioning rules for the by-section view."""

    def test_headings_sorted_with_unsectioned_last(self):
        applications = [_app("1", "Zebra"), _app("2", "Aardvark"), _app("3")]

        groups = group_by_section(applications)

        assert [group.name for group in groups] == ["Aardvark", "Zebra", UNSECTIONED_LABEL]
        assert groups[-1].is_unsectioned

    def test_no_unsectioned_group_when_all_filed(self):
        applications = [_app("1", "Backend"), _app("2", "Frontend")]

        groups = group_by_section(applications)

        assert UNSECTIONED_LABEL not in [group.name for group in groups]

    def test_only_unsectioned(self):
        groups = group_by_section([_app("1"), _app("2")])

        assert len(groups) == 1
        assert groups[0].name == UNSECTIONED_LABEL
        assert groups[0].count == 2

    def test_empty_list_has_no_groups(self):
        assert group_by_section([]) == []

    def test_input_order_kept_within_group(self):
        applications = [
            _app("newest", "Backend"),
            _app("middle", "Frontend"),
            _app("older", "Backend"),
            _app("oldest", "Backend"),
        ]

        groups = group_by_section(applications)
        backend = next(group for group in groups if group.name == "Backend")

        assert [app["id"] for app in backend.applications] == ["newest", "older", "oldest"]
        assert backend.count == 3

    def test_ordering_ignores_case_and_accents(self):
        applications = [_app("1", "zeta"), _app("2", "Éclair"), _app("3", "alpha"), _app("4", "Beta")]

        groups = group_by_section(applications)

        assert [group.name for group in groups] == ["alpha", "Beta", "Éclair", "zeta"]

    def test_counts_sum_to_total(self):
        applications = [_app(str(i), ["A", "B", None][i % 3]) for i in range(10)]

        groups = group_by_section(applications)

        assert sum(group.count for group in groups) == len(applications)

    def test_orm_like_objects(self):
        class Row:
            def __init__(self, section_name):
                self.section_name = section_name

        groups = group_by_section([Row("Later"), Row(None), Row("Early")])

        assert [group.name for group in groups] == ["Early", "Later", UNSECTIONED_LABEL]

    def test_collation_key_tie_breaks_on_raw_name(self):
        assert collation_key("abc") != collation_key("ABC")
        assert collation_key("abc")[0] == collation_key("ABC")[0]


class TestViewToggle:
    """The view toggle is a pure projection of the same list."""

    @pytest.mark.parametrize("raw, expected", [
        ("all", ViewMode.ALL),
        ("by-section", ViewMode.BY_SECTION),
        (None, ViewMode.ALL),
        ("bogus", ViewMode.ALL),
    ])
    def test_parse(self, raw, expected):
        assert ViewMode.parse(raw) is expected

    def test_toggled(self):
        assert ViewMode.ALL.toggled() is ViewMode.BY_SECTION
        assert ViewMode.BY_SECTION.toggled() is ViewMode.ALL

    def test_flat_projection_has_no_groups(self):
        applications = [_app("1", "A"), _app("2")]

        view = project(applications, ViewMode.ALL)

        assert view.groups is None
        assert view.applications == applications

    def test_round_trip_returns_original_list(self):
        applications = [_app("3", "Zebra"), _app("1"), _app("2", "Aardvark")]

        mode = ViewMode.ALL
        first = project(applications, mode)
        mode = mode.toggled()
        grouped = project(first.applications, mode)
        mode = mode.toggled()
        back = project(grouped.applications, mode)

        assert grouped.groups is not None
        assert back.mode is ViewMode.ALL
        assert back.applications == applications
        assert [app["id"] for app in back.applications] == ["3", "1", "2"]
