"""Resource document loading (JSON/YAML).

Stands in for the upstream parser: each resource lists its fields as
``(literal, type)`` pairs exactly as the tokenizer would have produced them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .errors import load_error
from .resource import Field, FieldValue, Resource, ValueType
from .utils.io import read_document
from .utils.paths import normalize_reference, safe_file_path

__all__ = [
    "FileReferenceMap",
    "ResourceDocument",
    "load_resources",
    "parse_resource_document",
    "parse_resource",
]


class FileReferenceMap:
    """Resolves file reference literals through a fixed path → id table."""

    def __init__(
        self, files: Mapping[str, int], base_dir: Path | None = None
    ) -> None:
        self.base_dir = base_dir
        self._ids = {normalize_reference(p): int(i) for p, i in files.items()}

    def __call__(self, literal: str) -> Optional[int]:
        if self.base_dir is not None:
            try:
                safe_file_path(self.base_dir, literal)
            except ValueError:
                return None  # escapes the document directory
        return self._ids.get(normalize_reference(literal))

    def __len__(self) -> int:
        return len(self._ids)


@dataclass(slots=True)
class ResourceDocument:
    resources: List[Resource] = field(default_factory=list)
    files: Dict[str, int] = field(default_factory=dict)
    base_dir: Optional[Path] = None

    def resolver(self) -> FileReferenceMap:
        return FileReferenceMap(self.files, self.base_dir)


def load_resources(path: str | Path) -> ResourceDocument:
    p = Path(path)
    doc = parse_resource_document(read_document(p))
    doc.base_dir = p.parent
    return doc


def parse_resource_document(data: Dict[str, Any]) -> ResourceDocument:
    entries = data.get("resources")
    if not isinstance(entries, list):
        raise load_error("'resources' must be a list")
    files = data.get("files", {}) or {}
    if not isinstance(files, dict):
        raise load_error("'files' must be a mapping of path to resource id")
    try:
        ids = {str(k): int(v) for k, v in files.items()}
    except (TypeError, ValueError) as e:
        raise load_error(
            f"'files' ids must be integers: {e}", {"path": "files"}
        ) from e
    return ResourceDocument(
        resources=[
            parse_resource(e, f"resources[{i}]") for i, e in enumerate(entries)
        ],
        files=ids,
    )


def parse_resource(entry: Any, path: str = "resource") -> Resource:
    if not isinstance(entry, dict):
        raise load_error("Resource must be an object", {"path": path})
    type_code = entry.get("type")
    if not isinstance(type_code, str) or not type_code:
        raise load_error("Resource is missing its 'type'", {"path": path})
    try:
        resource_id = int(entry["id"])
    except (KeyError, TypeError, ValueError) as e:
        raise load_error("Resource needs an integer 'id'", {"path": path}) from e
    resource = Resource(type_code, resource_id, str(entry.get("name", "")))
    for i, f in enumerate(entry.get("fields", []) or []):
        resource.add_field(_parse_field(f, f"{path}.fields[{i}]"))
    return resource


def _parse_field(entry: Any, path: str) -> Field:
    if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
        raise load_error("Field must be an object with a name", {"path": path})
    values = [
        _parse_value(v, f"{path}.values[{i}]")
        for i, v in enumerate(entry.get("values", []) or [])
    ]
    try:
        line = int(entry.get("line", 0) or 0)
    except (TypeError, ValueError) as e:
        raise load_error("Field 'line' must be an integer", {"path": path}) from e
    return Field(entry["name"], tuple(values), line)


def _parse_value(entry: Any, path: str) -> FieldValue:
    if isinstance(entry, bool):
        raise load_error("Boolean values are not supported", {"path": path})
    if isinstance(entry, int):
        return str(entry), ValueType.INTEGER
    if isinstance(entry, dict):
        literal, kind = entry.get("value"), entry.get("type", "integer")
    elif isinstance(entry, (list, tuple)) and len(entry) == 2:
        literal, kind = entry
    else:
        raise load_error(
            "Value must be [literal, type], {value, type} or an integer",
            {"path": path},
        )
    try:
        return str(literal), ValueType.parse(str(kind))
    except ValueError as e:
        raise load_error(str(e), {"path": path}) from e
