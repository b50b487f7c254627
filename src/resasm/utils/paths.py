"""Path utilities (safe resolution)."""

from __future__ import annotations
from pathlib import Path

__all__ = ["safe_file_path", "normalize_reference"]


def safe_file_path(base_dir: Path, file_path: str) -> Path:
    base_dir = base_dir.resolve()
    resolved = (base_dir / file_path).resolve()
    resolved.relative_to(base_dir)  # raises ValueError if escapes
    return resolved


def normalize_reference(file_path: str) -> str:
    """Canonical key for a file reference literal (posix separators, no ./)."""
    parts = [p for p in file_path.replace("\\", "/").split("/") if p not in ("", ".")]
    return "/".join(parts)
