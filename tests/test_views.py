# SPDX-License-Identifier: MIT

"""Rendering checks for the task views."""

from eventline.view.board import board_view
from eventline.view.task import single_task_view, tasks_view
from eventline.view.util import assignee_name


class TestAssigneeNames:
    def test_without_names_shows_user_id(self, make_task):
        assert assignee_name(make_task(assignee_id="u7"), None) == "u7"
        assert assignee_name(make_task(), None) == "Unassigned"

    def test_known_name(self, make_task):
        assert assignee_name(make_task(assignee_id="u7"), {"u7": "Ada"}) == "Ada"

    def test_views_render_without_names(self, make_task, capsys):
        task = make_task(title="Barriers", assignee_id="u7")

        tasks_view("event e1", "tasks", [task])
        assert "u7" in capsys.readouterr().out

        single_task_view("event e1", task)
        assert "u7" in capsys.readouterr().out

        board_view("event e1", {task["status"]: [task]})
        assert "u7" in capsys.readouterr().out
