from __future__ import annotations

from pathlib import Path
import time
from typing import Optional


LOG_FILENAME = "conversion_debug.log"


def append_log(message: str, log_dir: Optional[str | Path] = None) -> None:
    try:
        directory = Path(log_dir) if log_dir else Path.cwd() / "output"
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        with (directory / LOG_FILENAME).open("a", encoding="utf-8") as file:
            file.write(f"[{timestamp}] {message}\n")
    except OSError:
        pass


def log_exception(context: str, exc: BaseException, log_dir: Optional[str | Path] = None) -> None:
    append_log(f"{context} | {type(exc).__name__}: {exc}", log_dir)
