# SPDX-License-Identifier: MIT

"""Tests for filter projection and board grouping."""

import pendulum
import pytest

from eventline.model.task import STATUS_ORDER, TaskStatus
from eventline.query.projection import (
    active_filter_count,
    group_by_status,
    is_overdue,
    project,
)
from eventline.template.filter import get_filter_state_template


def day(value: str) -> pendulum.DateTime:
    return pendulum.parse(value, tz="local")  # type: ignore[return-value]


NOW = day("2024-03-10").add(hours=12)


@pytest.fixture
def tasks(make_task):
    return [
        make_task(
            id="a",
            title="Stage lighting",
            status=TaskStatus.TODO,
            priority=1,
            due_at=day("2024-03-05"),
            assignee_id="u1",
        ),
        make_task(
            id="b",
            title="Catering order",
            description="Confirm vegan LIGHT menu",
            status=TaskStatus.IN_PROGRESS,
            priority=2,
            due_at=day("2024-03-12").add(hours=22),
            assignee_id="u2",
            zone_id="z1",
            zonal_dept_row_id="r1",
        ),
        make_task(
            id="c",
            title="Badges",
            status=TaskStatus.DONE,
            priority=1,
            due_at=day("2024-03-01"),
            department_id="d2",
            zone_id="z2",
        ),
        make_task(
            id="d",
            title="Security briefing",
            status=TaskStatus.BLOCKED,
            priority=3,
        ),
        make_task(
            id="e",
            title="Signage",
            status=TaskStatus.CANCELED,
            priority=1,
            due_at=day("2024-03-02"),
            zone_id="z1",
            zonal_dept_row_id="r2",
        ),
    ]


def ids(tasks):
    return [task["id"] for task in tasks]


class TestProject:
    def test_no_filters_returns_everything_in_order(self, tasks):
        assert ids(project(tasks, get_filter_state_template(), NOW)) == [
            "a",
            "b",
            "c",
            "d",
            "e",
        ]

    def test_status_selection(self, tasks):
        filters = get_filter_state_template()
        filters["statuses"] = [TaskStatus.TODO, TaskStatus.BLOCKED]
        assert ids(project(tasks, filters, NOW)) == ["a", "d"]

    def test_department_selection(self, tasks):
        filters = get_filter_state_template()
        filters["department_ids"] = ["d2"]
        assert ids(project(tasks, filters, NOW)) == ["c"]

    def test_priority_and_assignee(self, tasks):
        filters = get_filter_state_template()
        filters["priority"] = 1
        assert ids(project(tasks, filters, NOW)) == ["a", "c", "e"]
        filters["assignee_id"] = "u1"
        assert ids(project(tasks, filters, NOW)) == ["a"]

    def test_text_query_matches_title_or_description(self, tasks):
        filters = get_filter_state_template()
        filters["query"] = "  light "
        assert ids(project(tasks, filters, NOW)) == ["a", "b"]

    def test_due_range_includes_whole_last_day(self, tasks):
        filters = get_filter_state_template()
        filters["due_from"] = day("2024-03-05").add(hours=9)
        filters["due_to"] = day("2024-03-12")
        # "b" is due at 22:00 on the last day, "d" has no due date
        assert ids(project(tasks, filters, NOW)) == ["a", "b"]

    def test_due_range_open_lower_bound(self, tasks):
        filters = get_filter_state_template()
        filters["due_to"] = day("2024-03-02")
        assert ids(project(tasks, filters, NOW)) == ["c", "e"]

    def test_overdue_excludes_closed_tasks(self, tasks):
        filters = get_filter_state_template()
        filters["overdue_only"] = True
        assert ids(project(tasks, filters, NOW)) == ["a"]

    def test_zone_scopes(self, tasks):
        filters = get_filter_state_template()
        filters["zone_scope"] = "central"
        assert ids(project(tasks, filters, NOW)) == ["a", "d"]

        filters["zone_scope"] = "zonal"
        assert ids(project(tasks, filters, NOW)) == ["b", "c", "e"]

        filters["zone_id"] = "z1"
        assert ids(project(tasks, filters, NOW)) == ["b", "e"]

        filters["zonal_dept_row_id"] = "r2"
        assert ids(project(tasks, filters, NOW)) == ["e"]

    def test_filters_are_conjunctive(self, tasks):
        filters = get_filter_state_template()
        filters["priority"] = 1
        filters["statuses"] = [TaskStatus.TODO, TaskStatus.DONE]
        filters["zone_scope"] = "zonal"
        assert ids(project(tasks, filters, NOW)) == ["c"]

    def test_projection_is_idempotent(self, tasks):
        filters = get_filter_state_template()
        filters["statuses"] = [TaskStatus.TODO, TaskStatus.IN_PROGRESS]
        filters["query"] = "a"
        once = project(tasks, filters, NOW)
        assert project(once, filters, NOW) == once

    def test_clearing_filters_restores_original_set(self, tasks):
        filters = get_filter_state_template()
        filters["statuses"] = [TaskStatus.TODO]
        filters["priority"] = 1
        filters["due_from"] = day("2024-03-01")
        filters["due_to"] = day("2024-03-06")
        assert ids(project(tasks, filters, NOW)) == ["a"]

        assert project(tasks, get_filter_state_template(), NOW) == tasks

    def test_projection_does_not_mutate_input(self, tasks):
        original = [dict(task) for task in tasks]
        filters = get_filter_state_template()
        filters["overdue_only"] = True
        project(tasks, filters, NOW)
        assert tasks == original


class TestOverdue:
    def test_open_task_past_due(self, make_task):
        assert is_overdue(make_task(due_at=day("2024-03-09")), NOW)

    def test_future_or_missing_due(self, make_task):
        assert not is_overdue(make_task(due_at=day("2024-03-11")), NOW)
        assert not is_overdue(make_task(), NOW)

    @pytest.mark.parametrize("status", [TaskStatus.DONE, TaskStatus.CANCELED])
    def test_closed_tasks_are_never_overdue(self, make_task, status):
        assert not is_overdue(make_task(due_at=day("2024-03-01"), status=status), NOW)


class TestBoard:
    def test_group_by_status_has_all_columns_in_order(self, tasks):
        columns = group_by_status(tasks)
        assert list(columns) == STATUS_ORDER
        assert {status: ids(column) for status, column in columns.items()} == {
            TaskStatus.TODO: ["a"],
            TaskStatus.IN_PROGRESS: ["b"],
            TaskStatus.BLOCKED: ["d"],
            TaskStatus.DONE: ["c"],
            TaskStatus.CANCELED: ["e"],
        }

    def test_empty_board(self):
        assert group_by_status([]) == {status: [] for status in STATUS_ORDER}

    def test_active_filter_count(self):
        filters = get_filter_state_template()
        assert active_filter_count(filters) == 0
        filters["statuses"] = [TaskStatus.TODO]
        filters["due_to"] = day("2024-03-01")
        filters["zone_scope"] = "central"
        filters["view_mode"] = "board"
        assert active_filter_count(filters) == 3
