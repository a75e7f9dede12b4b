# SPDX-License-Identifier: MIT

from eventline.model.filter import FilterState


def get_filter_state_template() -> FilterState:
    return {
        "department_ids": [],
        "statuses": [],
        "priority": None,
        "assignee_id": None,
        "query": "",
        "due_from": None,
        "due_to": None,
        "overdue_only": False,
        "zone_scope": "all",
        "zone_id": None,
        "zonal_dept_row_id": None,
        "view_mode": "list",
    }
