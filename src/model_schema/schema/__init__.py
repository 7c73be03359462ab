"""Schema normalization, matching, comparison, and reporting.

Provides the diff engine (``check_schema``, ``diff_schema``,
``check_table``), its building blocks (``normalize``, ``match_elements``,
``PostgresTypeCanonicalizer``), report rendering (``render``,
``dump_element``) and live PostgreSQL introspection
(``SchemaIntrospector``).

Usage:
    from model_schema.schema import check_schema, TableDescription
    from model_schema.schema import SchemaIntrospector
"""

from model_schema.schema.comparator import (
    SchemaProvider,
    check_schema,
    check_table,
    diff_schema,
)
from model_schema.schema.introspector import SchemaIntrospector
from model_schema.schema.matcher import elements_equal, match_elements
from model_schema.schema.models import (
    ColumnSpec,
    ConstraintSpec,
    DiffRecord,
    IndexSpec,
    TableDescription,
)
from model_schema.schema.normalizer import normalize, normalize_all
from model_schema.schema.reporter import dump_element, render
from model_schema.schema.types import PostgresTypeCanonicalizer, TypeCanonicalizer

__all__ = [
    "check_schema",
    "check_table",
    "diff_schema",
    "SchemaProvider",
    "SchemaIntrospector",
    "match_elements",
    "elements_equal",
    "normalize",
    "normalize_all",
    "dump_element",
    "render",
    "PostgresTypeCanonicalizer",
    "TypeCanonicalizer",
    "ColumnSpec",
    "IndexSpec",
    "ConstraintSpec",
    "DiffRecord",
    "TableDescription",
]
