# SPDX-License-Identifier: MIT

"""Tests for loading the page's tasks, optimistic status changes and the board."""

import pendulum
import pytest

from eventline.errors import NotFoundError, PermissionDeniedError, TransportError
from eventline.model.task import TaskStatus
from eventline.repository.task import TaskRepository
from eventline.service.tasks import TaskBoard, TaskLoader
from eventline.state import PageState

EVENT = "e1"
DEPT = "d1"


@pytest.fixture
def repository(api, bus):
    return TaskRepository(api, bus)  # type: ignore[arg-type]


@pytest.fixture
def page():
    return PageState(EVENT, DEPT)


@pytest.fixture
def loader(repository, bus, page):
    return TaskLoader(repository, bus, page)


@pytest.fixture
def seeded(api, make_task):
    api.add(make_task(id="a", title="Barriers", status=TaskStatus.TODO, progress_pct=0))
    api.add(make_task(id="b", title="Badges", status=TaskStatus.IN_PROGRESS))
    api.add(make_task(id="c", title="Radios", department_id="d2"))
    return api


def ids(tasks):
    return [task["id"] for task in tasks]


class TestLoad:
    def test_load_current_department(self, loader, seeded):
        assert loader.load() is True
        assert ids(loader.tasks) == ["a", "b"]
        assert loader.error is None

    def test_no_event_means_nothing_to_load(self, repository, bus, seeded):
        loader = TaskLoader(repository, bus, PageState())
        assert loader.current_request() is None
        assert loader.load() is False
        assert loader.tasks == []
        assert seeded.calls == []

    def test_stale_result_is_discarded(self, loader, page, seeded):
        request = loader.current_request()
        tasks = loader.fetch(request)

        page.set_department("d2")
        assert loader.apply(request, tasks) is False
        assert loader.tasks == []

        assert loader.load() is True
        assert ids(loader.tasks) == ["c"]

    def test_stale_result_after_filter_change_is_discarded(self, loader, page, seeded):
        request = loader.current_request()
        tasks = loader.fetch(request)

        page.set_filters(assignee_id="u1")
        assert loader.apply(request, tasks) is False

    def test_multiple_departments_are_merged_without_duplicates(
        self, loader, page, api, make_task, seeded
    ):
        # The same task reported by two departments appears once
        api.add(make_task(id="shared", department_id="d2"))
        page.set_department(None)
        page.set_filters(department_ids=["d1", "d2", "d1"])

        loader.load()

        assert ids(loader.tasks) == ["a", "b", "c", "shared"]
        assert api.call_count("list_tasks") == 2

    def test_load_error_is_kept(self, loader, seeded):
        seeded.failures["list_tasks"] = TransportError("connection refused")

        assert loader.load() is False
        assert loader.error == "connection refused"
        assert loader.tasks == []

    def test_visible_applies_filters(self, loader, page, seeded):
        loader.load()
        page.set_filters(statuses=[TaskStatus.IN_PROGRESS])
        assert ids(loader.visible(pendulum.now())) == ["b"]


class TestSubscribe:
    def test_reloads_on_change_in_current_scope(self, loader, repository, seeded):
        loader.load()
        loader.subscribe()

        repository.create_task(EVENT, DEPT, {"title": "Fences", "priority": 2})

        assert "t101" in ids(loader.tasks)

    def test_ignores_changes_in_other_scopes(self, loader, bus, seeded):
        loader.load()
        loader.subscribe()
        calls = seeded.call_count("list_tasks")

        bus.emit_tasks_changed(EVENT, "d2")
        bus.emit_tasks_changed("e2", DEPT)

        assert seeded.call_count("list_tasks") == calls

    def test_follows_department_selection(self, loader, page, bus, seeded):
        loader.subscribe()
        page.set_department("d2")

        bus.emit_tasks_changed(EVENT, "d2")

        assert ids(loader.tasks) == ["c"]

    def test_unsubscribe(self, loader, bus, seeded):
        unsubscribe = loader.subscribe()
        assert loader.subscribe() is unsubscribe
        unsubscribe()

        bus.emit_tasks_changed(EVENT, DEPT)
        assert seeded.call_count("list_tasks") == 0
        assert bus.handler_count("tasks:changed") == 0


class TestChangeStatus:
    def test_applies_server_result(self, loader, seeded):
        loader.load()
        result = loader.change_status("a", TaskStatus.DONE, 100)

        assert result == {"status": TaskStatus.DONE, "progress_pct": 100}
        assert loader.get("a")["status"] == TaskStatus.DONE
        assert loader.get("a")["progress_pct"] == 100

    def test_rolls_back_when_refused(self, loader, seeded):
        loader.load()
        seeded.failures["change_status"] = PermissionDeniedError(403, "not your task")

        with pytest.raises(PermissionDeniedError):
            loader.change_status("a", TaskStatus.DONE, 100)

        task = loader.get("a")
        assert task["status"] == TaskStatus.TODO
        assert task["progress_pct"] == 0

    def test_drops_task_that_no_longer_exists(self, loader, seeded):
        loader.load()
        del seeded.tasks["a"]

        with pytest.raises(NotFoundError):
            loader.change_status("a", TaskStatus.DONE)

        assert loader.get("a") is None
        assert ids(loader.tasks) == ["b"]

    def test_unknown_task(self, loader, seeded):
        with pytest.raises(NotFoundError):
            loader.change_status("zzz", TaskStatus.DONE)
        assert seeded.call_count("change_status") == 0


class TestTaskBoard:
    def test_columns(self, loader, seeded):
        loader.load()
        columns = TaskBoard(loader).columns()

        assert ids(columns[TaskStatus.TODO]) == ["a"]
        assert ids(columns[TaskStatus.IN_PROGRESS]) == ["b"]
        assert columns[TaskStatus.CANCELED] == []

    def test_move_card(self, loader, seeded):
        loader.load()
        board = TaskBoard(loader)

        assert board.move_card("a", TaskStatus.BLOCKED) is True
        assert ids(board.columns()[TaskStatus.BLOCKED]) == ["a"]
        assert seeded.tasks["a"]["status"] == TaskStatus.BLOCKED

    def test_drop_on_same_column_is_a_no_op(self, loader, seeded):
        loader.load()

        assert TaskBoard(loader).move_card("a", TaskStatus.TODO) is False
        assert seeded.call_count("change_status") == 0

    def test_move_unknown_card(self, loader, seeded):
        with pytest.raises(NotFoundError):
            TaskBoard(loader).move_card("zzz", TaskStatus.DONE)


class TestPageState:
    def test_filters_are_copies(self, page):
        filters = page.filters
        filters["query"] = "changed"
        assert page.filters["query"] == ""

    def test_unknown_filter_field(self, page):
        with pytest.raises(KeyError):
            page.set_filters(colour="red")

    def test_reset_keeps_view_mode(self, page):
        page.set_filters(view_mode="board", priority=1, query="stage")
        page.reset_filters()

        assert page.filters["view_mode"] == "board"
        assert page.filters["priority"] is None
        assert page.filters["query"] == ""

    def test_department_selection_updates_gantt_state(self, page):
        page.set_department("d2")
        assert page.gantt["department_id"] == "d2"
        with pytest.raises(KeyError):
            page.set_gantt(zoom=2)
