from .models import (
    DefaultWriter,
    TypeMask,
    ValueSchema,
    FieldSchema,
    SchemaTable,
    SchemaRegistry,
    expect,
    named,
    schema_table,
)
from .defaults import (
    integer_default,
    resource_reference_default,
    color_default,
    cstr_default,
    pstr_default,
)
from .validator import ValidationErrorRecord, validate_table, validate_tables
from .loader import load_schemas, parse_schema_document

__all__ = [
    "DefaultWriter",
    "TypeMask",
    "ValueSchema",
    "FieldSchema",
    "SchemaTable",
    "SchemaRegistry",
    "expect",
    "named",
    "schema_table",
    "integer_default",
    "resource_reference_default",
    "color_default",
    "cstr_default",
    "pstr_default",
    "ValidationErrorRecord",
    "validate_table",
    "validate_tables",
    "load_schemas",
    "parse_schema_document",
]
