# SPDX-License-Identifier: MIT

from eventline import configuration
from eventline.log import configure_logging
from eventline.repository.configuration import CONFIGURATION_REPO
from eventline.view import state as view_state


def initialize() -> None:
    configuration.CONFIG_PATH.mkdir(parents=True, exist_ok=True)

    __ensure_config_file()

    config = CONFIGURATION_REPO.get_config()
    configure_logging(config["log_level"])
    view_state.set_show_header(config["show_header"])


def __ensure_config_file() -> None:
    if not configuration.APP_CONFIG_PATH.is_file():
        # Written with every default on the next flush
        CONFIGURATION_REPO.is_dirty = True
