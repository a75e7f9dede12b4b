# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Any, Optional, cast

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from eventline import configuration


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        defaults = configuration.get_default_configuration()
        if not configuration.APP_CONFIG_PATH.is_file():
            self._config = defaults
            return

        raw_config = load(configuration.APP_CONFIG_PATH.read_text(), Loader=Loader)
        if raw_config is None:
            raw_config = {}

        # Migration: add any key introduced after the file was written
        for key, value in defaults.items():
            if key not in raw_config:
                self.is_dirty = True
                raw_config[key] = value

        self._config = cast(configuration.Configuration, raw_config)

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.CONFIG_PATH.mkdir(parents=True, exist_ok=True)
        configuration.APP_CONFIG_PATH.write_text(dump(dict(config), Dumper=Dumper))

    def flush(self) -> bool:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False
            return True
        return False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(self, **values: Any) -> None:
        unknown = [key for key in values if key not in self.config]
        if unknown:
            raise KeyError(f"unknown configuration keys: {', '.join(unknown)}")

        for key, value in values.items():
            if value is None:
                continue
            self.is_dirty = True
            self.config[key] = value  # type: ignore[literal-required]

    def unset(self, key: str) -> None:
        """Reset a key back to its default value."""
        defaults = configuration.get_default_configuration()
        if key not in defaults:
            raise KeyError(f"unknown configuration key: {key}")
        self.is_dirty = True
        self.config[key] = defaults[key]  # type: ignore[literal-required]


CONFIGURATION_REPO = ConfigurationRepository()
