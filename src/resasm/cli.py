"""Command line interface for resasm."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .api import BuildOptions, build, validate_schemas
from .assembler import ErrorPolicy
from .errors import ResasmError
from .logging import configure_logging, get_logger
from .reporting import (
    JsonLinesReporter,
    PlainReporter,
    RichReporter,
    SilentReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)
from .schema import TypeMask, load_schemas


def _build_cmd(args: argparse.Namespace) -> int:
    batch = build(
        BuildOptions(
            resources_path=args.resources,
            schemas_path=args.schemas,
            output_dir=args.output,
            byte_order=args.byte_order,
            string_encoding=args.encoding,
            policy=ErrorPolicy(args.policy),
            keep_invalid=args.keep_invalid,
        )
    )
    return 0 if batch.ok else 1


def _validate_cmd(args: argparse.Namespace) -> int:
    rep = get_reporter()
    errors = validate_schemas(args.schemas)
    for e in errors:
        rep.error(e.message, context=e.path, code=e.code)
    rep.status(f"Schema summary: file={args.schemas.name} errors={len(errors)}")
    return 1 if errors else 0


def _mask_names(mask: TypeMask) -> str:
    return "|".join(
        m.name.lower() for m in TypeMask if m.name != "NONE" and m in mask
    )


def _layout_cmd(args: argparse.Namespace) -> int:
    registry = load_schemas(args.schemas)
    rows = []
    for table in registry.values():
        if args.type and table.type_code != args.type:
            continue
        for fs in table:
            for slot in fs.values:
                rows.append(
                    {
                        "type": table.type_code,
                        "field": fs.name,
                        "value": slot.name,
                        "offset": slot.offset,
                        "size": slot.size,
                        "types": _mask_names(slot.type_mask),
                        "required": fs.required,
                        "deprecated": fs.deprecated,
                        "symbols": len(slot.symbols),
                        "default": slot.default is not None,
                    }
                )
    get_reporter().flush()
    if args.json:
        print(json.dumps(rows, indent=2, sort_keys=True))
        return 0
    for r in rows:
        flags = ("R" if r["required"] else "-") + ("D" if r["deprecated"] else "-")
        print(
            f"{r['type']:<6} {r['offset']:>6} +{r['size']:<4} {flags} "
            f"{r['field']}.{r['value']} [{r['types']}]"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="resasm", description="Schema-driven resource record assembler"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="Assemble resources into binary records")
    b.add_argument("resources", type=Path)
    b.add_argument("schemas", type=Path)
    b.add_argument("-o", "--output", type=Path, default=Path("."))
    b.add_argument(
        "--byte-order", choices=["big", "little"], default="big"
    )
    b.add_argument(
        "--encoding",
        default="mac_roman",
        help="String encoding for C and Pascal strings",
    )
    b.add_argument(
        "--policy",
        choices=[policy.value for policy in ErrorPolicy],
        default=ErrorPolicy.CONTINUE.value,
        help="continue: report and keep going; abort: stop at the first error",
    )
    b.add_argument(
        "--keep-invalid",
        action="store_true",
        help="Also write records for resources that reported errors",
    )
    b.set_defaults(func=_build_cmd)

    v = sub.add_parser("validate", help="Validate a schema file")
    v.add_argument("schemas", type=Path)
    v.set_defaults(func=_validate_cmd)

    lay = sub.add_parser("layout", help="Print the byte layout of schema tables")
    lay.add_argument("schemas", type=Path)
    lay.add_argument("--type", help="Only show this resource type")
    lay.add_argument("--json", action="store_true", help="Emit JSON rows")
    lay.set_defaults(func=_layout_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    requested = args.reporter
    if requested == "json":
        set_reporter(JsonLinesReporter())
    elif requested == "silent":
        set_reporter(SilentReporter())
    elif requested == "rich" and sys.stderr.isatty():
        set_reporter(RichReporter())
    else:
        set_reporter(PlainReporter())
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except ResasmError as e:
        get_logger().error("%s", e)
        return 2
    finally:
        get_reporter().flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
