from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from resasm import AssembleOptions, BuildOptions, ErrorPolicy, build
from resasm.api import assemble_batch, assemble_resource, record_filename
from resasm.cli import main
from resasm.errors import AssemblyError, SchemaError
from resasm.resource import Field, Resource, ValueType
from resasm.schema import load_schemas

SCHEMAS = {
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
                    "name": "title",
                    "values": [
                        {"name": "text", "types": ["string", "fixed_cstring"], "offset": 4, "size": 8}
                    ],
                },
                {
                    "name": "sound",
                    "values": [
                        {"name": "id", "types": ["resource_reference"], "offset": 12, "size": 2, "default": 9}
                    ],
                },
            ],
        }
    ]
}

RESOURCES = {
    "resources": [
        {
            "type": "ALRT",
            "id": 128,
            "fields": [
                {"name": "bounds", "values": [10, 20]},
                {"name": "title", "values": [["Hi", "string"]]},
                {"name": "sound", "values": [["sounds/beep.snd", "file_reference"]]},
            ],
        },
        {
            "type": "ALRT",
            "id": 129,
            "fields": [{"name": "title", "values": [["x", "string"]], "line": 7}],
        },
        {"type": "XXXX", "id": 1, "fields": []},
    ],
    "files": {"sounds/beep.snd": 5},
}


@pytest.fixture()
def documents(tmp_path: Path):
    schemas = tmp_path / "schemas.yaml"
    schemas.write_text(yaml.safe_dump(SCHEMAS))
    resources = tmp_path / "resources.json"
    resources.write_text(json.dumps(RESOURCES))
    return resources, schemas


def test_build_writes_valid_records(tmp_path: Path, documents, reporter):
    resources, schemas = documents
    out = tmp_path / "out"
    batch = build(BuildOptions(resources, schemas, out))
    assert [p.name for p in batch.written] == ["ALRT_128.bin"]
    assert (out / "ALRT_128.bin").read_bytes() == (
        b"\x00\x0a\x00\x14" + b"Hi\x00\x00\x00\x00\x00\x00" + b"\x00\x05"
    )
    assert not batch.ok
    assert batch.error_count == 2
    assert {d.code for d in batch.diagnostics} == {"E_MISSING_FIELD", "E_NO_SCHEMA"}
    messages = [e["message"] for e in reporter.of_kind("status")]
    assert any(m.startswith("Schema summary: tables=1") for m in messages)
    assert any(
        m.startswith("Batch summary: resources=3 written=1 errors=2") for m in messages
    )


def test_build_keep_invalid(tmp_path: Path, documents):
    resources, schemas = documents
    out = tmp_path / "out"
    batch = build(BuildOptions(resources, schemas, out, keep_invalid=True))
    assert sorted(p.name for p in batch.written) == ["ALRT_128.bin", "ALRT_129.bin"]
    # Missing required field: full record, defaults for every slot.
    assert (out / "ALRT_129.bin").read_bytes() == (
        b"\x00\x00\x00\x00" + b"x" + b"\x00" * 7 + b"\x00\x09"
    )


def test_build_abort_policy(tmp_path: Path, documents):
    resources, schemas = documents
    with pytest.raises(AssemblyError) as exc:
        build(BuildOptions(resources, schemas, tmp_path / "out", policy=ErrorPolicy.ABORT))
    assert exc.value.code == "E_MISSING_FIELD"


def test_build_rejects_malformed_schema(tmp_path: Path, documents):
    resources, _ = documents
    schemas = tmp_path / "bad.json"
    schemas.write_text(
        json.dumps(
            {
                "tables": [
                    {
                        "type": "ALRT",
                        "fields": [
                            {"name": "v", "values": [{"name": "v", "types": ["color"], "offset": 0, "size": 2}]}
                        ],
                    }
                ]
            }
        )
    )
    with pytest.raises(SchemaError):
        build(BuildOptions(resources, schemas, tmp_path / "out"))


def test_assemble_batch_reports_progress(tmp_path: Path, documents, reporter):
    _, schemas = documents
    registry = load_schemas(schemas)
    res = Resource("ALRT", 200)
    res.add_field(Field.of("bounds", ("1", ValueType.INTEGER), ("2", ValueType.INTEGER)))
    batch = assemble_batch([res], registry)
    assert batch.ok and batch.bytes_assembled == 14
    (end,) = reporter.of_kind("task_end")
    assert end["id"] == "assemble" and end["status"] == "success"
    assert len(reporter.of_kind("task_progress")) == 1


def test_assemble_resource_without_table():
    with pytest.raises(AssemblyError):
        assemble_resource(Resource("NOPE", 1), {})


def test_file_reference_without_resolver(tmp_path: Path, documents):
    _, schemas = documents
    registry = load_schemas(schemas)
    res = Resource("ALRT", 1)
    res.extend(
        [
            Field.of("bounds", ("0", ValueType.INTEGER), ("0", ValueType.INTEGER)),
            Field.of("sound", ("a.snd", ValueType.FILE_REFERENCE)),
        ]
    )
    result = assemble_resource(res, registry, AssembleOptions())
    assert [d.code for d in result.errors] == ["E_UNSUPPORTED_VALUE"]
    assert result.data[12:] == b"\x00\x09"


def test_record_filename_sanitises_type_code():
    assert record_filename(Resource("ab/c", -3)) == "ab_c_-3.bin"
    assert record_filename(Resource("snd ", 1)) == "snd_1.bin"


def test_cli_build_exit_codes(tmp_path: Path, documents):
    resources, schemas = documents
    out = tmp_path / "cli"
    assert main(["-r", "silent", "build", str(resources), str(schemas), "-o", str(out)]) == 1
    assert (out / "ALRT_128.bin").exists()
    code = main(
        ["-r", "silent", "build", str(resources), str(schemas), "-o", str(out), "--policy", "abort"]
    )
    assert code == 2


def test_cli_build_json_events(tmp_path: Path, documents, capsys):
    resources, schemas = documents
    main(["-r", "json", "build", str(resources), str(schemas), "-o", str(tmp_path / "j")])
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    summaries = {e["summary_type"]: e for e in events if e["event"] == "summary"}
    assert summaries["batch"]["written"] == "1"
    assert summaries["batch"]["errors"] == "2"
    diagnostics = [e for e in events if e["event"] == "diagnostic"]
    assert {d["code"] for d in diagnostics} == {"E_MISSING_FIELD", "E_NO_SCHEMA"}


def test_cli_validate_and_layout(tmp_path: Path, documents, capsys):
    _, schemas = documents
    assert main(["-r", "silent", "validate", str(schemas)]) == 0
    capsys.readouterr()
    assert main(["-r", "silent", "layout", str(schemas), "--json"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert [(r["field"], r["value"], r["offset"]) for r in rows] == [
        ("bounds", "top", 0),
        ("bounds", "left", 2),
        ("title", "text", 4),
        ("sound", "id", 12),
    ]
    assert rows[2]["types"] == "string|fixed_cstring"


def test_cli_missing_file(tmp_path: Path):
    assert main(["-r", "silent", "validate", str(tmp_path / "nope.yaml")]) == 2


def test_cli_malformed_resource_document(tmp_path: Path, documents):
    _, schemas = documents
    bad = tmp_path / "bad.json"
    bad.write_text(
        json.dumps(
            {"resources": [{"type": "ALRT", "id": 1, "fields": [{"name": "bounds", "line": "four"}]}]}
        )
    )
    assert main(["-r", "silent", "build", str(bad), str(schemas), "-o", str(tmp_path / "o")]) == 2


def test_build_reports_sections_and_written_records(tmp_path: Path, documents, reporter):
    resources, schemas = documents
    build(BuildOptions(resources, schemas, tmp_path / "out"))
    assert [e["title"] for e in reporter.of_kind("section")] == ["Assemble", "Write records"]
    messages = [e["message"] for e in reporter.of_kind("status")]
    assert any(m.endswith("ALRT_128.bin (14 bytes)") for m in messages)
