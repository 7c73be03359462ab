"""Human-readable rendering of schema diffs.

Each element is dumped as the single declaration line a developer would
write with ``model_schema.declaration.TableDefinition`` to declare exactly
that element. Only attributes that differ from the category defaults are
printed, in default-map order, so reports stay short and stable.

Report layout, per category (columns, indexes, constraints), each section
only when non-empty::

    Table users has extra columns:

    	column('nickname', 'varchar(50)')

    Table users is missing columns:

    	column('age', int, null=False)

    Table users has mismatched columns:

    	actual:    column('email', 'text')
    	expected:  column('email', str, size=100, unique=True)
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from model_schema.constants import (
    DEFAULTS,
    DISABLE_MODEL_SCHEMA_KEY,
    FIELD_COLUMNS,
    FIELD_INDEXES,
    FIELDS,
    TYPE_EXTRA,
    TYPE_MISMATCH,
    TYPE_MISSING,
)

if TYPE_CHECKING:
    from model_schema.errors import SchemaDiffError


# ============================================================================
# Single-element dumps
# ============================================================================


def _format_value(value: Any) -> str:
    if isinstance(value, type):
        return value.__name__
    if isinstance(value, (tuple, list)):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return repr(value)


def _non_default(category: str, spec: BaseModel, skip: tuple[str, ...]) -> list[str]:
    defaults = DEFAULTS[category]
    attrs = spec.model_dump()
    return [
        f"{key}={_format_value(attrs[key])}"
        for key in defaults
        if key not in skip and attrs[key] != defaults[key]
    ]


def _dump_column(spec: BaseModel) -> str:
    if spec.table is not None:
        skip = ("name", "table") + (("type",) if spec.type is int else ())
        args = [repr(spec.name), repr(spec.table)]
        func = "foreign_key"
    elif spec.primary_key and spec.serial:
        skip = ("name", "primary_key", "serial") + (("type",) if spec.type is int else ())
        args = [repr(spec.name)]
        func = "primary_key"
    else:
        skip = ("name", "type")
        args = [repr(spec.name), _format_value(spec.type)]
        func = "column"

    args.extend(_non_default(FIELD_COLUMNS, spec, skip))
    return f"{func}({', '.join(args)})"


def dump_element(category: str, spec: BaseModel) -> str:
    """Render one normalized spec as its declaration line.

    Example:
        >>> dump_element("indexes", normalize("indexes", {"columns": ["a"], "unique": True}))
        "index(['a'], unique=True)"
    """
    if category == FIELD_COLUMNS:
        return _dump_column(spec)
    if category == FIELD_INDEXES:
        args = [_format_value(spec.columns)]
        args.extend(_non_default(category, spec, ("columns",)))
        return f"index({', '.join(args)})"

    args = [repr(spec.check)]
    args.extend(_non_default(category, spec, ("check",)))
    return f"constraint({', '.join(args)})"


# ============================================================================
# Report sections
# ============================================================================


def _dump_extra_diffs(error: "SchemaDiffError", field: str) -> str | None:
    extra_diffs = error.diffs_by(field, TYPE_EXTRA)
    if not extra_diffs:
        return None

    header = f"Table {error.table_name} has extra {field}:\n"
    diff_str = "\n\t".join(dump_element(field, d.element) for d in extra_diffs)
    return f"{header}\n\t{diff_str}\n"


def _dump_missing_diffs(error: "SchemaDiffError", field: str) -> str | None:
    missing_diffs = error.diffs_by(field, TYPE_MISSING)
    if not missing_diffs:
        return None

    header = f"Table {error.table_name} is missing {field}:\n"
    diff_str = "\n\t".join(dump_element(field, d.element) for d in missing_diffs)
    return f"{header}\n\t{diff_str}\n"


def _dump_mismatch_diffs(error: "SchemaDiffError", field: str) -> str | None:
    mismatch_diffs = error.diffs_by(field, TYPE_MISMATCH)
    if not mismatch_diffs:
        return None

    header = f"Table {error.table_name} has mismatched {field}:\n"
    diff_str = "\n\n\t".join(
        f"actual:    {dump_element(field, d.actual)}\n\t"
        f"expected:  {dump_element(field, d.expected)}"
        for d in mismatch_diffs
    )
    return f"{header}\n\t{diff_str}\n"


def render(error: "SchemaDiffError") -> str:
    """Render a ``SchemaDiffError`` as a grouped multi-line report.

    Deterministic: the same error always renders to the same text.
    """
    parts = []
    for field in FIELDS:
        parts.extend(
            [
                _dump_extra_diffs(error, field),
                _dump_missing_diffs(error, field),
                _dump_mismatch_diffs(error, field),
            ]
        )

    footer = (
        "You may disable schema checks by passing disabled=True to the check "
        f"or by setting the environment variable {DISABLE_MODEL_SCHEMA_KEY}=1.\n"
    )
    return "\n\n" + "\n".join(p for p in parts if p is not None) + "\n" + footer
