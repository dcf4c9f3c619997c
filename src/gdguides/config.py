from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from gdguides.errors import SaveFileError

WINDOWS_PATH = "AppData/Local/GeometryDash/CCLocalLevels.dat"
LINUX_PATH = ".steam/steam/steamapps/compatdata/322170/pfx/drive_c/users/steamuser/" + WINDOWS_PATH


@dataclass
class Settings:
    save_file: Path | None = None
    labels_file: Path | None = None
    level_name: str | None = None
    dry_run: bool = False

    @staticmethod
    def from_mapping(payload: dict[str, Any]) -> Settings:
        return Settings(
            save_file=Path(payload["save_file"]).expanduser() if payload.get("save_file") else None,
            labels_file=(
                Path(payload["labels_file"]).expanduser() if payload.get("labels_file") else None
            ),
            level_name=str(payload["level_name"]) if payload.get("level_name") else None,
            dry_run=bool(payload.get("dry_run", False)),
        )


def load_settings(path: Path) -> Settings:
    """Load settings from a YAML (``.yml``/``.yaml``) or JSON file."""
    try:
        raw = path.read_text()
    except OSError as exc:
        raise SaveFileError(f"Could not read config {path}: {exc}") from exc
    if path.suffix.lower() in {".yml", ".yaml"}:
        payload = yaml.safe_load(raw)
    else:
        payload = json.loads(raw)
    return Settings.from_mapping(payload or {})


def default_save_path(home: Path | None = None, platform: str | None = None) -> Path | None:
    """Where the game keeps its level save, or None on unsupported platforms."""
    home = home or Path.home()
    platform = platform or sys.platform
    if platform.startswith("win"):
        return home / WINDOWS_PATH
    if platform.startswith("linux"):
        return home / LINUX_PATH
    return None
