# SPDX-License-Identifier: MIT

"""Tests for searching tasks to link, create-and-link and search debouncing."""

import pytest

from eventline.errors import LinkError
from eventline.repository.task import TaskRepository
from eventline.service.dependency import DependencyGraphStore
from eventline.service.link import LinkResolver, SearchDebouncer, SearchSession

EVENT = "e1"
DEPT = "d1"


@pytest.fixture
def resolver(api, bus):
    return LinkResolver(
        TaskRepository(api, bus),  # type: ignore[arg-type]
        DependencyGraphStore(api),  # type: ignore[arg-type]
    )


@pytest.fixture
def catalog(api, make_task):
    api.add(make_task(id="T", title="Load-in stage"))
    api.add(make_task(id="B1", title="Stage permits"))
    api.add(make_task(id="D1", title="Stage rigging"))
    api.add(make_task(id="S1", title="Stage lights"))
    api.add(make_task(id="S2", title="Stage power", department_id="d2"))
    api.add(make_task(id="S3", title="Catering", department_id="d2"))
    return api


def search_session(resolver, **kwargs):
    defaults = {
        "event_id": EVENT,
        "department_id": DEPT,
        "task_id": "T",
        "blocker_ids": ["B1"],
        "dependent_ids": ["D1"],
    }
    defaults.update(kwargs)
    return SearchSession(resolver, **defaults)


class TestLinkResolver:
    def test_search_excludes_given_ids(self, resolver, catalog):
        results = resolver.search(EVENT, DEPT, "stage", DEPT, exclude_ids={"T", "B1"})
        assert [task["id"] for task in results] == ["D1", "S1"]

    def test_search_is_scoped_to_target_department(self, resolver, catalog):
        results = resolver.search(EVENT, DEPT, "stage", "d2")
        assert [task["id"] for task in results] == ["S2"]
        assert catalog.calls[-1] == ("search_tasks", EVENT, DEPT, "stage", "d2")

    def test_create_and_link(self, resolver, catalog):
        new_task = resolver.create_and_link(EVENT, DEPT, "T", "  Order barriers ", "d2")

        assert new_task["department_id"] == "d2"
        assert new_task["title"] == "Order barriers"
        assert (new_task["id"], "T") in catalog.edges
        methods = [call[0] for call in catalog.calls]
        assert methods.index("create_task") < methods.index("add_dependency")

    def test_create_and_link_keeps_orphan_when_link_fails(self, resolver, catalog, bus):
        catalog.failing_blockers = {"t101"}

        with pytest.raises(LinkError) as excinfo:
            resolver.create_and_link(EVENT, DEPT, "T", "Order barriers", DEPT)

        assert excinfo.value.orphan_task_id == "t101"
        assert "t101" in catalog.tasks
        assert not any(blocked == "T" and blocker == "t101" for blocker, blocked in catalog.edges)

    def test_create_and_link_requires_title(self, resolver, catalog):
        with pytest.raises(ValueError):
            resolver.create_and_link(EVENT, DEPT, "T", "   ", DEPT)
        assert catalog.call_count("create_task") == 0


class TestSearchSession:
    def test_results_exclude_self_blockers_and_dependents(self, resolver, catalog):
        session = search_session(resolver)
        session.set_query("stage")

        assert [task["id"] for task in session.search()] == ["S1"]

    def test_switching_department_clears_and_searches_again(self, resolver, catalog):
        session = search_session(resolver)
        session.set_query("stage")
        session.search()
        session.select(session.results[0])

        results = session.set_target_department("d2")

        assert [task["id"] for task in results] == ["S2"]
        assert catalog.calls[-1][-1] == "d2"
        # Already selected tasks are not revalidated
        assert [task["id"] for task in session.selected] == ["S1"]

    def test_stale_results_are_dropped(self, resolver, catalog, make_task):
        session = search_session(resolver)
        session.set_query("stage")
        stale = session.begin_search()

        session.set_query("stage l")
        fresh = session.begin_search()

        assert session.complete_search(fresh, [make_task(id="S1")]) is True
        assert session.complete_search(stale, [make_task(id="X")]) is False
        assert [task["id"] for task in session.results] == ["S1"]

    def test_results_for_other_department_are_dropped(self, resolver, catalog, make_task):
        session = search_session(resolver)
        session.set_query("stage")
        request = session.begin_search()
        session.target_department_id = "d2"

        assert session.complete_search(request, [make_task(id="S1")]) is False
        assert session.results == []

    def test_selected_tasks_are_excluded(self, resolver, catalog, make_task):
        session = search_session(resolver, blocker_ids=[], dependent_ids=[])
        session.set_query("stage")
        session.search()
        session.select(make_task(id="S1"))

        assert "S1" in session.excluded_ids
        assert [task["id"] for task in session.search()] == ["B1", "D1"]

    def test_link_adds_blocker_and_resets_query(self, resolver, catalog):
        session = search_session(resolver)
        session.set_query("lights")
        session.search()

        session.link("S1")

        assert ("S1", "T") in catalog.edges
        assert "S1" in session.blocker_ids
        assert session.results == []
        assert session.query == ""

    def test_create_and_link_in_target_department(self, resolver, catalog):
        session = search_session(resolver, target_department_id="d2")
        new_task = session.create_and_link("Generator")

        assert new_task["department_id"] == "d2"
        assert new_task["id"] in session.blocker_ids


class TestSearchDebouncer:
    def test_releases_query_after_quiet_period(self, clock):
        debouncer = SearchDebouncer(delay_ms=250, clock=clock)
        debouncer.submit("st")
        clock.advance(0.1)
        debouncer.submit("sta")
        clock.advance(0.2)
        assert debouncer.due() is None

        clock.advance(0.1)
        assert debouncer.due() == "sta"
        assert debouncer.due() is None

    def test_cancel(self, clock):
        debouncer = SearchDebouncer(clock=clock)
        debouncer.submit("stage")
        debouncer.cancel()
        clock.advance(1)
        assert debouncer.due() is None

    def test_session_searches_once_typing_pauses(self, resolver, catalog, clock):
        session = search_session(
            resolver, debouncer=SearchDebouncer(delay_ms=250, clock=clock)
        )
        session.type_query("st")
        clock.advance(0.1)
        session.type_query("stage l")
        assert session.poll() is None
        assert catalog.call_count("search_tasks") == 0

        clock.advance(0.3)
        assert [task["id"] for task in session.poll()] == ["S1"]
        assert session.query == "stage l"
        assert session.poll() is None
        assert catalog.call_count("search_tasks") == 1

    def test_session_without_debouncer_applies_query_at_once(self, resolver, catalog):
        session = search_session(resolver)
        session.type_query("stage")
        assert session.query == "stage"
        assert session.poll() is None
