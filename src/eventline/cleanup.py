# SPDX-License-Identifier: MIT

import atexit

from eventline.repository.configuration import CONFIGURATION_REPO


def flush_and_sync() -> None:
    CONFIGURATION_REPO.flush()


def register_cleanup() -> None:
    atexit.register(flush_and_sync)
