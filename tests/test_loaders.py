from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from resasm.errors import EncodingWidthError, LoaderError
from resasm.loader import FileReferenceMap, load_resources
from resasm.resource import ValueType
from resasm.schema import TypeMask, load_schemas
from resasm.blob import Blob

SCHEMA_DOC = {
    "tables": [
        {
            "type": "ALRT",
            "fields": [
                {
                    "name": "bounds",
                    "required": True,
                    "values": [
                        {"name": "top", "types": ["integer"], "offset": 0, "size": 2, "signed": True},
                        {"name": "left", "types": ["integer"], "offset": 2, "size": 2, "signed": True},
                    ],
                },
                {
                    "name": "sound",
                    "deprecated": True,
                    "values": [
                        {
                            "name": "kind",
                            "types": ["integer", "resource_reference"],
                            "offset": 4,
                            "size": 2,
                            "symbols": {"kBeep": 1, "kSilent": 0},
                            "default": 1,
                        }
                    ],
                },
                {
                    "name": "title",
                    "values": [
                        {
                            "name": "text",
                            "types": ["string", "fixed_cstring"],
                            "offset": 6,
                            "size": 8,
                            "default": "Alert",
                        }
                    ],
                },
            ],
        }
    ]
}


def test_load_yaml_schema(tmp_path: Path):
    path = tmp_path / "schemas.yaml"
    path.write_text(yaml.safe_dump(SCHEMA_DOC))
    registry = load_schemas(path)
    table = registry["ALRT"]
    assert [f.name for f in table] == ["bounds", "sound", "title"]
    bounds = table.field_named("bounds")
    assert bounds.required and bounds.values[0].signed
    sound = table.field_named("sound").values[0]
    assert table.field_named("sound").deprecated
    assert sound.type_mask == TypeMask.INTEGER | TypeMask.RESOURCE_REFERENCE
    assert dict(sound.symbols) == {"kBeep": 1, "kSilent": 0}
    blob = Blob()
    blob.pad_to_size(14)
    sound.write_default_value(blob)
    table.field_named("title").values[0].write_default_value(blob)
    assert blob.data()[4:] == b"\x00\x01Alert\x00\x00\x00"


def test_load_json_schema(tmp_path: Path):
    path = tmp_path / "schemas.json"
    path.write_text(json.dumps(SCHEMA_DOC))
    assert "ALRT" in load_schemas(path)


def test_schema_default_with_bad_width_is_fatal(tmp_path: Path):
    doc = {
        "tables": [
            {
                "type": "X",
                "fields": [
                    {
                        "name": "v",
                        "values": [
                            {"name": "v", "types": ["integer"], "offset": 0, "size": 3, "default": 1}
                        ],
                    }
                ],
            }
        ]
    }
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(doc))
    with pytest.raises(EncodingWidthError):
        load_schemas(path)


@pytest.mark.parametrize(
    "doc",
    [
        {"tables": {}},
        {"tables": [{"fields": []}]},
        {"tables": [{"type": "X", "fields": [{"name": "v", "values": [{"name": "v", "types": ["float"], "offset": 0, "size": 2}]}]}]},
        {"tables": [{"type": "X", "fields": [{"name": "v", "values": [{"name": "v", "types": ["integer"], "size": 2}]}]}]},
        {"tables": [{"type": "X"}, {"type": "X"}]},
    ],
)
def test_malformed_schema_documents(tmp_path: Path, doc):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(doc))
    with pytest.raises(LoaderError):
        load_schemas(path)


def test_missing_and_non_object_documents(tmp_path: Path):
    with pytest.raises(LoaderError):
        load_schemas(tmp_path / "absent.yaml")
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(LoaderError):
        load_schemas(path)


def test_load_resources(tmp_path: Path):
    doc = {
        "resources": [
            {
                "type": "ALRT",
                "id": 128,
                "name": "Quit",
                "fields": [
                    {"name": "bounds", "values": [["10", "integer"], 20], "line": 4},
                    {"name": "sound", "values": [{"value": "kBeep", "type": "identifier"}]},
                    {"name": "icon", "values": [["icons/quit.pict", "file_reference"]]},
                ],
            }
        ],
        "files": {"./icons/quit.pict": 130},
    }
    path = tmp_path / "resources.yaml"
    path.write_text(yaml.safe_dump(doc))
    document = load_resources(path)
    (res,) = document.resources
    assert res.describe() == "'ALRT' #128 (Quit)"
    bounds = res.field_named("bounds")
    assert bounds.values == (("10", ValueType.INTEGER), ("20", ValueType.INTEGER))
    assert bounds.line == 4
    assert res.field_named("sound").values[0][1] is ValueType.IDENTIFIER
    resolver = document.resolver()
    assert resolver("icons/quit.pict") == 130
    assert resolver("icons\\quit.pict") == 130
    assert resolver("../outside.pict") is None


def test_bad_resource_value_type(tmp_path: Path):
    path = tmp_path / "r.json"
    path.write_text(
        json.dumps(
            {"resources": [{"type": "X", "id": 1, "fields": [{"name": "v", "values": [["1", "float"]]}]}]}
        )
    )
    with pytest.raises(LoaderError):
        load_resources(path)


def test_file_reference_map_without_base_dir():
    refs = FileReferenceMap({"a/b.bin": 5})
    assert refs("./a//b.bin") == 5
    assert refs("a/c.bin") is None
    assert len(refs) == 1


@pytest.mark.parametrize(
    "doc",
    [
        {"resources": [{"type": "X", "id": 1, "fields": [{"name": "v", "values": [], "line": "four"}]}]},
        {"resources": [], "files": {"a.pict": "oops"}},
        {"resources": [], "files": {"a.pict": None}},
    ],
)
def test_non_integer_line_and_file_ids(tmp_path: Path, doc):
    path = tmp_path / "r.json"
    path.write_text(json.dumps(doc))
    with pytest.raises(LoaderError):
        load_resources(path)
