"""IO helpers for schema and resource documents."""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any

import yaml

from ..errors import load_error

__all__ = ["safe_read_file", "read_document", "write_record"]

MAX_DOCUMENT_SIZE = 16 * 1024 * 1024


def safe_read_file(path: Path, max_size: int = MAX_DOCUMENT_SIZE) -> bytes:
    if not path.exists():
        raise load_error(f"File not found: {path}", {"path": str(path)})
    size = path.stat().st_size
    if size > max_size:
        raise load_error(
            f"File too large: {size}>{max_size}", {"path": str(path)}
        )
    return path.read_bytes()


def read_document(path: str | Path) -> dict[str, Any]:
    """Load a JSON or YAML document whose root must be an object."""
    p = Path(path)
    text = safe_read_file(p).decode("utf-8")
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise load_error(f"Malformed document: {e}", {"path": str(p)}) from e
    if not isinstance(data, dict):
        raise load_error(
            "Root of document must be an object", {"path": str(p)}
        )
    return data


def write_record(path: Path, data: bytes) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return len(data)
