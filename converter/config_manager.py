from __future__ import annotations

import copy
import json
import os
import sys
from pathlib import Path
from typing import Any

from .logs import append_log


DEFAULT_CONFIG: dict[str, Any] = {
    "parsing": {
        "strip_metadata": True,
        "max_passes": 5,
        "strict_single_answer": False,
    },
    "output": {
        "directory": "output",
        "batch_limit": 250,
        "tab_filename": "blackboard_questions.txt",
        "archive_filename": "blackboard_qti_2_1_export.zip",
        "test_title": "Question Bank",
    },
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def user_data_root(app_dirname: str) -> Path:
    """Writable per-user folder used when running from a frozen bundle."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA", "").strip()
        return Path(base) / app_dirname if base else Path.home() / "AppData" / "Local" / app_dirname
    base = os.environ.get("XDG_CONFIG_HOME", "").strip()
    return (Path(base) if base else Path.home() / ".config") / app_dirname


class ConfigManager:
    """Layered settings: built-in defaults, then the default file, then the user file.

    Only the user file is ever written back.
    """

    APP_DATA_DIRNAME = "QuestionConverter"

    def __init__(
        self,
        default_path: str = "config/default_config.json",
        user_path: str = "config/user_config.json",
    ) -> None:
        if getattr(sys, "frozen", False):
            self.root = user_data_root(self.APP_DATA_DIRNAME)
        else:
            self.root = Path(__file__).resolve().parents[1]
        self.default_path = self._resolve(default_path)
        self.user_path = self._resolve(user_path)
        self._config = self._load()

    def _resolve(self, raw_path: str | Path) -> Path:
        path = Path(raw_path).expanduser()
        return path if path.is_absolute() else self.root / path

    def _read(self, path: Path) -> dict[str, Any]:
        if not path.is_file():
            return {}
        try:
            with path.open("r", encoding="utf-8") as file:
                payload = json.load(file)
        except (OSError, ValueError) as exc:
            append_log(f"config ignored | {path} | {type(exc).__name__}: {exc}")
            return {}
        if not isinstance(payload, dict):
            append_log(f"config ignored | {path} | root value is not an object")
            return {}
        return payload

    def _finalize(self, config: dict[str, Any]) -> dict[str, Any]:
        output = config.setdefault("output", {})
        directory = str(output.get("directory") or "").strip() or "output"
        output["directory"] = str(self._resolve(directory))
        try:
            output["batch_limit"] = max(1, int(output.get("batch_limit", 250)))
        except (TypeError, ValueError):
            output["batch_limit"] = DEFAULT_CONFIG["output"]["batch_limit"]
        return config

    def _load(self) -> dict[str, Any]:
        layered = deep_merge(copy.deepcopy(DEFAULT_CONFIG), self._read(self.default_path))
        return self._finalize(deep_merge(layered, self._read(self.user_path)))

    def reload(self) -> dict[str, Any]:
        self._config = self._load()
        return self._config

    def all(self) -> dict[str, Any]:
        return self._config

    def get(self, path: str, default: Any = None) -> Any:
        node: Any = self._config
        for token in path.split("."):
            if not isinstance(node, dict) or token not in node:
                return default
            node = node[token]
        return node

    def update(self, partial: dict[str, Any]) -> dict[str, Any]:
        stored = deep_merge(self._read(self.user_path), partial)
        self.user_path.parent.mkdir(parents=True, exist_ok=True)
        with self.user_path.open("w", encoding="utf-8") as file:
            json.dump(stored, file, ensure_ascii=False, indent=2)
        self._config = self._finalize(deep_merge(self._config, partial))
        return self._config
