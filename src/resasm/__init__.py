"""resasm: schema-driven assembler for fixed-layout resource records."""

from .blob import Blob
from .resource import Field, Resource, ValueType
from .schema import (
    FieldSchema,
    SchemaTable,
    TypeMask,
    ValueSchema,
    expect,
    named,
    schema_table,
)
from .assembler import (
    AssembleOptions,
    AssemblyResult,
    Assembler,
    Diagnostic,
    ErrorPolicy,
    assemble,
)
from .api import assemble_batch, assemble_resource, build, BuildOptions

__version__ = "0.1.0"

__all__ = [
    "Blob",
    "Field",
    "Resource",
    "ValueType",
    "FieldSchema",
    "SchemaTable",
    "TypeMask",
    "ValueSchema",
    "expect",
    "named",
    "schema_table",
    "AssembleOptions",
    "AssemblyResult",
    "Assembler",
    "Diagnostic",
    "ErrorPolicy",
    "assemble",
    "assemble_batch",
    "assemble_resource",
    "build",
    "BuildOptions",
]
