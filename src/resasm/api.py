"""High-level API for resasm."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence

from .assembler import (
    AssembleOptions,
    AssemblyResult,
    Assembler,
    Diagnostic,
    DiagnosticLog,
    ErrorPolicy,
)
from .errors import E_NO_SCHEMA, AssemblyError, SchemaError
from .loader import ResourceDocument, load_resources
from .logging import get_logger, section, step
from .reporting import get_reporter, task
from .resource import Resource
from .schema import (
    SchemaRegistry,
    SchemaTable,
    ValidationErrorRecord,
    load_schemas,
    validate_tables,
)
from .utils.io import write_record

__all__ = [
    "BuildOptions",
    "BatchResult",
    "assemble_resource",
    "assemble_batch",
    "check_schemas",
    "validate_schemas",
    "build",
    "record_filename",
]


@dataclass(slots=True)
class BuildOptions:
    resources_path: Path
    schemas_path: Path
    output_dir: Path
    byte_order: str = "big"
    string_encoding: str = "mac_roman"
    policy: ErrorPolicy = ErrorPolicy.CONTINUE
    # Write records for resources that reported errors as well.
    keep_invalid: bool = False


@dataclass(slots=True)
class BatchResult:
    results: List[AssemblyResult] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [d for r in self.results for d in r.diagnostics]

    @property
    def error_count(self) -> int:
        return sum(len(r.errors) for r in self.results)

    @property
    def warning_count(self) -> int:
        return sum(len(r.warnings) for r in self.results)

    @property
    def ok(self) -> bool:
        return self.error_count == 0

    @property
    def bytes_assembled(self) -> int:
        return sum(len(r.data) for r in self.results)


def _table_for(resource: Resource, schemas: SchemaRegistry | SchemaTable):
    if isinstance(schemas, SchemaTable):
        return schemas
    table = schemas.get(resource.type_code)
    if table is None:
        raise AssemblyError(
            code=E_NO_SCHEMA,
            message=f"No schema table for resource type '{resource.type_code}'",
            context={"resource": resource.describe()},
        )
    return table


def assemble_resource(
    resource: Resource,
    schemas: SchemaRegistry | SchemaTable,
    options: AssembleOptions | None = None,
) -> AssemblyResult:
    """Assemble one resource against its schema table."""
    table = _table_for(resource, schemas)
    return Assembler(resource, options).assemble(table)


def check_schemas(tables: Iterable[SchemaTable]) -> None:
    """Raise SchemaError when any table is malformed."""
    errors = validate_tables(tables)
    if errors:
        raise SchemaError(
            code=errors[0].code,
            message="; ".join(f"{e.path}: {e.message}" for e in errors),
            context={"count": len(errors)},
        )


def validate_schemas(path: str | Path) -> List[ValidationErrorRecord]:
    return validate_tables(load_schemas(path).values())


def assemble_batch(
    resources: Sequence[Resource],
    schemas: SchemaRegistry,
    options: AssembleOptions | None = None,
) -> BatchResult:
    """Assemble every resource; diagnostics accumulate across the batch."""
    rep = get_reporter()
    options = options or AssembleOptions()
    batch = BatchResult()
    with task("assemble", "Assemble resources", total=len(resources)) as final:
        for resource in resources:
            log = DiagnosticLog(options.policy, rep)
            try:
                table = _table_for(resource, schemas)
            except AssemblyError as e:
                if options.policy is ErrorPolicy.ABORT:
                    raise
                log.error(resource.describe(), 0, e.message, code=e.code)
                result = AssemblyResult(resource, b"", log.records)
            else:
                result = Assembler(resource, options, log).assemble(table)
            batch.results.append(result)
            rep.advance("assemble", current_item=resource.describe())
        final.update(
            resources=len(batch.results),
            errors=batch.error_count,
            warnings=batch.warning_count,
            bytes=batch.bytes_assembled,
        )
    return batch


_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


def record_filename(resource: Resource) -> str:
    code = _UNSAFE.sub("_", resource.type_code.strip()) or "rsrc"
    return f"{code}_{resource.id}.bin"


def build(options: BuildOptions) -> BatchResult:
    """Load documents, assemble every resource and write one file per record."""
    logger = get_logger()
    rep = get_reporter()
    registry = load_schemas(options.schemas_path)
    check_schemas(registry.values())
    rep.status(
        f"Schema summary: tables={len(registry)} "
        f"fields={sum(len(t) for t in registry.values())}"
    )
    document: ResourceDocument = load_resources(options.resources_path)
    asm_options = AssembleOptions(
        byte_order=options.byte_order,
        string_encoding=options.string_encoding,
        policy=options.policy,
        resolver=document.resolver(),
    )
    with section("Assemble"):
        batch = assemble_batch(document.resources, registry, asm_options)
    with section("Write records"):
        for result in batch.results:
            if not result.data or (not result.ok and not options.keep_invalid):
                logger.info(
                    "Skipping %s (%d errors)",
                    result.resource.describe(),
                    len(result.errors),
                )
                continue
            out = options.output_dir / record_filename(result.resource)
            write_record(out, result.data)
            batch.written.append(out)
            step(f"{out.name} ({len(result.data)} bytes)")
    rep.status(
        f"Batch summary: resources={len(batch.results)} "
        f"written={len(batch.written)} errors={batch.error_count} "
        f"warnings={batch.warning_count} bytes={batch.bytes_assembled}"
    )
    return batch
