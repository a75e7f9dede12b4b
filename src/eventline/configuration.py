# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import platformdirs

from eventline.model.timeline import ScaleType, ThemeType

APP_NAME = "eventline"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"


class Configuration(TypedDict):
    api_base_url: str
    api_token: Optional[str]
    request_timeout_seconds: float
    event_id: Optional[str]
    department_id: Optional[str]
    scale: ScaleType
    theme: ThemeType
    lead_days: int
    trail_days: int
    empty_window_days: int
    search_debounce_ms: int
    task_cache_ttl_seconds: int
    log_level: str
    show_header: bool


def get_default_configuration() -> Configuration:
    return {
        "api_base_url": "http://localhost:3000/api",
        "api_token": None,
        "request_timeout_seconds": 10.0,
        "event_id": None,
        "department_id": None,
        "scale": "day",
        "theme": "default",
        "lead_days": 3,
        "trail_days": 7,
        "empty_window_days": 21,
        "search_debounce_ms": 250,
        "task_cache_ttl_seconds": 120,
        "log_level": "WARNING",
        "show_header": True,
    }
