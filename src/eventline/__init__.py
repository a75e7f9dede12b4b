# SPDX-License-Identifier: MIT

from eventline.cleanup import register_cleanup
from eventline.initialize import initialize
from eventline.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
