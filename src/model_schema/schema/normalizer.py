"""Spec normalization: fill defaults, reject unknown attributes.

Turns a raw attribute mapping for one column, index, or constraint into a
fully populated spec, so that two descriptions become directly comparable
key for key. Pure -- no I/O, no shared state.

Usage:
    from model_schema.schema.normalizer import normalize

    spec = normalize("columns", {"name": "age", "type": int, "null": False})
    spec.on_delete  # 'no_action'
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from model_schema.constants import DEFAULTS, FIELD_COLUMNS, FIELD_INDEXES
from model_schema.errors import DuplicateElementError, InvalidAttributeError
from model_schema.schema.models import SPEC_MODELS


def element_identity(category: str, element: Mapping[str, Any] | BaseModel) -> Any:
    """Best human-readable handle for an element, used in error messages.

    Columns are named by ``name``; indexes by their column list (or ``name``
    when no columns were given); constraints by ``name`` or their check body.
    """
    if isinstance(element, BaseModel):
        element = element.model_dump()

    if category == FIELD_COLUMNS:
        return element.get("name")
    if category == FIELD_INDEXES:
        columns = element.get("columns")
        return list(columns) if columns is not None else element.get("name")
    return element.get("name") or element.get("check")


def normalize(
    category: str,
    raw: Mapping[str, Any] | BaseModel,
    defaults: Mapping[str, Any] | None = None,
) -> BaseModel:
    """Build the spec for one element, filling in every missing attribute.

    Args:
        category: ``"columns"``, ``"indexes"``, or ``"constraints"``.
        raw: Attribute mapping (possibly partial), or an already-built spec
            of this category, which is returned unchanged.
        defaults: Default map to fill from. Defaults to the category's map
            in ``model_schema.constants.DEFAULTS``.

    Returns:
        ``ColumnSpec``, ``IndexSpec``, or ``ConstraintSpec``.

    Raises:
        ValueError: If *category* is not a known category.
        InvalidAttributeError: If *raw* has attribute names outside the
            category's default map. Every offending key is named.

    Example:
        >>> normalize("indexes", {"columns": ["name"]}).unique is None
        True
    """
    if category not in SPEC_MODELS:
        raise ValueError(f"Unknown schema category: {category!r}")

    model = SPEC_MODELS[category]
    if isinstance(raw, model):
        return raw

    if defaults is None:
        defaults = DEFAULTS[category]

    invalid_keys = [key for key in raw if key not in defaults]
    if invalid_keys:
        raise InvalidAttributeError(category, element_identity(category, raw), invalid_keys)

    return model.model_validate({**defaults, **raw})


def normalize_all(
    category: str,
    raws: Iterable[Mapping[str, Any] | BaseModel],
    defaults: Mapping[str, Any] | None = None,
) -> list[BaseModel]:
    """Normalize a whole category list, preserving order.

    Column names must be unique within a table.

    Raises:
        InvalidAttributeError: On the first element with unknown attributes.
        DuplicateElementError: If two columns share a name.
    """
    specs = [normalize(category, raw, defaults) for raw in raws]

    if category == FIELD_COLUMNS:
        seen: set[str | None] = set()
        for spec in specs:
            if spec.name in seen:
                raise DuplicateElementError(category, spec.name)
            seen.add(spec.name)

    return specs
