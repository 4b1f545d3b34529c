"""JSON file helpers for draft storage."""

from __future__ import annotations

import json
import os
from pathlib import Path
import re
from typing import Any


def write_json(path: Path, payload: dict) -> None:
    """Write ``payload`` atomically: a temp file next to ``path`` is renamed over it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(f"{data}\n", encoding="utf-8")
    os.replace(tmp_path, path)


def read_json(path: Path) -> dict[str, Any] | None:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(raw, dict):
        return None
    return raw


def remove_file(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


_SAFE_NAME = re.compile(r"[A-Za-z0-9_-]+")


def is_safe_name(value: str) -> bool:
    """True when ``value`` can be used as a file stem unchanged."""
    return bool(_SAFE_NAME.fullmatch(value))
