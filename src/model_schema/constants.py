"""Shared constants: categories, diff kinds, and per-category defaults.

The default maps are the single source of truth for attribute names and
their default values. They drive normalization (unknown keys are rejected,
missing keys are filled in) and rendering (default-valued attributes are
never printed). Map order is the stable attribute order used in reports.
"""

from types import MappingProxyType
from typing import Any, Literal

# Name of the environment variable the integration layer reads to skip checks
DISABLE_MODEL_SCHEMA_KEY = "DISABLE_MODEL_SCHEMA"

# ============================================================================
# Categories, diff kinds, sides
# ============================================================================

FIELD_COLUMNS = "columns"
FIELD_INDEXES = "indexes"
FIELD_CONSTRAINTS = "constraints"
FIELDS = (FIELD_COLUMNS, FIELD_INDEXES, FIELD_CONSTRAINTS)

TYPE_EXTRA = "extra"
TYPE_MISSING = "missing"
TYPE_MISMATCH = "mismatch"

SIDE_ACTUAL = "actual"
SIDE_EXPECTED = "expected"

Category = Literal["columns", "indexes", "constraints"]
DiffKind = Literal["extra", "missing", "mismatch"]
Side = Literal["actual", "expected"]

# ============================================================================
# Default attribute maps
# ============================================================================

DEFAULT_COLUMN: MappingProxyType[str, Any] = MappingProxyType(
    {
        "name": None,
        "type": None,
        "collate": None,
        "default": None,
        "deferrable": None,
        "index": None,
        "key": ("id",),
        "null": None,
        "on_delete": "no_action",
        "on_update": "no_action",
        "primary_key": None,
        "primary_key_constraint_name": None,
        "unique": None,
        "unique_constraint_name": None,
        "serial": None,
        "table": None,
        "text": None,
        "fixed": None,
        "size": None,
        "only_time": None,
    }
)

DEFAULT_INDEX: MappingProxyType[str, Any] = MappingProxyType(
    {
        "columns": None,
        "name": None,
        "type": None,
        "unique": None,
        "where": None,
    }
)

DEFAULT_CONSTRAINT: MappingProxyType[str, Any] = MappingProxyType(
    {
        "name": None,
        "check": None,
    }
)

DEFAULTS: MappingProxyType[str, MappingProxyType[str, Any]] = MappingProxyType(
    {
        FIELD_COLUMNS: DEFAULT_COLUMN,
        FIELD_INDEXES: DEFAULT_INDEX,
        FIELD_CONSTRAINTS: DEFAULT_CONSTRAINT,
    }
)

# Column attributes that only refine the type; folded into the canonical type
TYPE_QUALIFIERS = ("text", "fixed", "size", "serial", "only_time")
