"""Pydantic models for table descriptions and schema diffs.

This module contains schema-domain models:
- Element specs: ColumnSpec, IndexSpec, ConstraintSpec
- Raw description: TableDescription (three lists of attribute mappings)
- Diff unit: DiffRecord

Specs are frozen and closed (``extra="forbid"``): a spec always carries every
attribute of its category, filled with the defaults from
``model_schema.constants``. Use ``model_schema.schema.normalizer.normalize``
to build specs from raw mappings.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from model_schema.constants import (
    FIELD_COLUMNS,
    FIELD_CONSTRAINTS,
    FIELD_INDEXES,
    SIDE_ACTUAL,
    SIDE_EXPECTED,
    TYPE_EXTRA,
    TYPE_MISMATCH,
    TYPE_MISSING,
    Category,
    DiffKind,
    Side,
)


# ============================================================================
# Element Specs
# ============================================================================


class ColumnSpec(BaseModel):
    """Schema for one table column.

    ``type`` is either a Python type (``int``, ``str``, ``datetime``...) or an
    engine literal string (``"varchar(255)"``). The qualifier attributes
    (``text``, ``fixed``, ``size``, ``serial``, ``only_time``) only refine the
    type.

    Example:
        >>> col = ColumnSpec(name="id", type=int, primary_key=True)
        >>> col.on_delete
        'no_action'
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    type: Any = None
    collate: str | None = None
    default: Any = None
    deferrable: bool | None = None
    index: Any = None
    key: tuple[str, ...] | None = ("id",)
    null: bool | None = None
    on_delete: str | None = "no_action"
    on_update: str | None = "no_action"
    primary_key: bool | None = None
    primary_key_constraint_name: str | None = None
    unique: bool | None = None
    unique_constraint_name: str | None = None
    serial: bool | None = None
    table: str | None = None
    text: bool | None = None
    fixed: bool | None = None
    size: int | tuple[int, ...] | None = None
    only_time: bool | None = None


class IndexSpec(BaseModel):
    """Schema for one index. Column order is significant."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    columns: tuple[str, ...] | None = None
    name: str | None = None
    type: str | None = None
    unique: bool | None = None
    where: str | None = None


class ConstraintSpec(BaseModel):
    """Schema for one table-level check constraint."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    check: str | None = None


ElementSpec = ColumnSpec | IndexSpec | ConstraintSpec

SPEC_MODELS: dict[str, type[BaseModel]] = {
    FIELD_COLUMNS: ColumnSpec,
    FIELD_INDEXES: IndexSpec,
    FIELD_CONSTRAINTS: ConstraintSpec,
}


# ============================================================================
# Table Description
# ============================================================================


class TableDescription(BaseModel):
    """Structural description of one table, as handed to the diff engine.

    Both the actual-schema provider (database introspection) and the
    expected-schema provider (declarations) produce this shape. Entries are
    raw attribute mappings (or already-built specs); they are validated and
    normalized at check time, not here, so unknown attribute names surface as
    ``InvalidAttributeError`` with the element named.

    Example:
        >>> desc = TableDescription(columns=[{"name": "x", "type": "integer"}])
        >>> desc.indexes
        []
    """

    columns: list[Any] = Field(default_factory=list)
    indexes: list[Any] = Field(default_factory=list)
    constraints: list[Any] = Field(default_factory=list)

    def elements(self, category: str) -> list:
        """Raw entries of one category, in declaration order."""
        return list(getattr(self, category))


# ============================================================================
# Diff Record
# ============================================================================


class DiffRecord(BaseModel):
    """One unit of disagreement between actual and expected schema.

    ``extra`` and ``missing`` records carry a single ``element`` and the
    ``side`` it came from; ``mismatch`` records carry both ``actual`` and
    ``expected``. No text is stored -- reports are rendered on demand.
    """

    model_config = ConfigDict(frozen=True)

    category: Category
    kind: DiffKind
    side: Side | None = None
    element: ElementSpec | None = None
    actual: ElementSpec | None = None
    expected: ElementSpec | None = None

    @classmethod
    def extra(cls, category: str, element: ElementSpec) -> "DiffRecord":
        return cls(category=category, kind=TYPE_EXTRA, side=SIDE_ACTUAL, element=element)

    @classmethod
    def missing(cls, category: str, element: ElementSpec) -> "DiffRecord":
        return cls(
            category=category, kind=TYPE_MISSING, side=SIDE_EXPECTED, element=element
        )

    @classmethod
    def mismatch(
        cls, category: str, actual: ElementSpec, expected: ElementSpec
    ) -> "DiffRecord":
        return cls(
            category=category, kind=TYPE_MISMATCH, actual=actual, expected=expected
        )
