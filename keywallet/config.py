"""YAML configuration loader for keywallet.

The config file is optional. Its location comes from the KEYWALLET_CONFIG
environment variable (see cli._get_config); without it every setting takes
its default:

    unescape_values: true       # resolve backslash escapes in loaded values
    create_missing: false       # treat a missing database file as empty
    default_database: null      # used when -d/--database is not given
"""

from __future__ import annotations

from pathlib import Path

import yaml

DEFAULTS: dict = {
    "unescape_values": True,
    "create_missing": False,
    "default_database": None,
}


class Config:
    """Loads and provides access to the keywallet settings file."""

    def __init__(self, config_path: Path | str | None = None):
        self.config_path = Path(config_path) if config_path is not None else None
        if self.config_path is not None and not self.config_path.is_file():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        self._settings: dict | None = None

    def _load(self) -> dict:
        if self.config_path is None:
            return {}
        with open(self.config_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {self.config_path}")
        unknown = set(data) - set(DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown config keys in {self.config_path}: {sorted(unknown)}")
        return data

    @property
    def settings(self) -> dict:
        if self._settings is None:
            self._settings = {**DEFAULTS, **self._load()}
        return self._settings

    @property
    def unescape_values(self) -> bool:
        return bool(self.settings["unescape_values"])

    @property
    def create_missing(self) -> bool:
        return bool(self.settings["create_missing"])

    @property
    def default_database(self) -> str | None:
        """Database path to use when none is given on the command line."""
        value = self.settings["default_database"]
        return str(value) if value else None
