# SPDX-License-Identifier: MIT

from eventline.model.task import TaskDraft


def get_task_draft_template(title: str, priority: int = 3) -> TaskDraft:
    return {
        "title": title,
        "priority": priority,
        "description": None,
        "start_at": None,
        "due_at": None,
        "assignee_id": None,
        "venue_id": None,
    }
