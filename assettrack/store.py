"""
Flat-file JSON store.

All data lives in three JSON files under ``DATA_DIR``:

  - ``Assets.json``    — list of asset records
  - ``SubAssets.json`` — list of component records
  - ``config.json``    — settings object

Files are read whole on every request and rewritten whole on every
mutation; the last write wins.  The data directory is resolved from
``current_app.config`` on each call so tests can point the store at a
temporary directory after the app is created.
"""

import json
import logging
from pathlib import Path
from typing import Any

from flask import Flask, current_app

logger = logging.getLogger(__name__)

ASSETS_FILE = "Assets.json"
SUB_ASSETS_FILE = "SubAssets.json"
CONFIG_FILE = "config.json"


class JsonStore:
    """Read and overwrite the application's JSON data files."""

    def init_app(self, app: Flask) -> None:
        """Register the store and create the data files if missing."""
        app.extensions["json_store"] = self
        data_dir = Path(app.config["DATA_DIR"])
        data_dir.mkdir(parents=True, exist_ok=True)
        for filename in (ASSETS_FILE, SUB_ASSETS_FILE):
            path = data_dir / filename
            if not path.exists():
                self._write_path(path, [])
                logger.info("Initialized empty data file %s", path)

    @property
    def data_dir(self) -> Path:
        return Path(current_app.config["DATA_DIR"])

    def path_for(self, filename: str) -> Path:
        return self.data_dir / filename

    # -- Collections -------------------------------------------------------

    def read_assets(self) -> list[dict]:
        return self._read_list(ASSETS_FILE)

    def write_assets(self, assets: list[dict]) -> None:
        self.write(ASSETS_FILE, assets)

    def read_sub_assets(self) -> list[dict]:
        return self._read_list(SUB_ASSETS_FILE)

    def write_sub_assets(self, sub_assets: list[dict]) -> None:
        self.write(SUB_ASSETS_FILE, sub_assets)

    def read_config(self) -> dict | None:
        """Return the settings object, or None if none has been saved."""
        data = self.read(CONFIG_FILE, None)
        return data if isinstance(data, dict) else None

    def write_config(self, config: dict) -> None:
        self.write(CONFIG_FILE, config)

    # -- Raw file access ---------------------------------------------------

    def read(self, filename: str, default: Any) -> Any:
        """
        Load a JSON file.

        A missing file returns ``default``; an unreadable or corrupt file
        is logged and also returns ``default`` so one bad file does not
        take the dashboard down.
        """
        path = self.path_for(filename)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Error reading %s: %s", path, exc)
            return default

    def write(self, filename: str, data: Any) -> None:
        """
        Overwrite a JSON file.

        Raises:
            OSError: If the file cannot be written.
        """
        self._write_path(self.path_for(filename), data)

    # -- Internal helpers --------------------------------------------------

    def _read_list(self, filename: str) -> list[dict]:
        data = self.read(filename, [])
        if not isinstance(data, list):
            logger.error("Expected a list in %s, found %s", filename, type(data).__name__)
            return []
        return data

    @staticmethod
    def _write_path(path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with path.open("w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
        except OSError:
            logger.exception("Error writing %s", path)
            raise
