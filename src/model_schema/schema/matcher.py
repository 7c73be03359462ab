"""Element matching between actual and expected specs of one category.

To find an accurate diff, matching runs in passes over the expected list:

1. Exact matches: each expected element is paired with the first remaining
   actual element that is equal to it; both are consumed and produce no diff.
2. Close matches: each still-unmatched expected element is paired with the
   first remaining actual element sharing its identity (same column name,
   same index name or column list, same check body). The pair becomes a
   ``mismatch``; with no candidate the expected element is ``missing``.
3. Leftovers: every actual element not consumed is ``extra``.

Exact matches are consumed before any close match so a loose pairing never
steals an element that is a perfect match for another expected element.
Inputs are never mutated; consumption is tracked by list position.
"""

from model_schema.constants import (
    FIELD_COLUMNS,
    FIELD_CONSTRAINTS,
    FIELD_INDEXES,
    TYPE_QUALIFIERS,
)
from model_schema.schema.models import (
    ColumnSpec,
    ConstraintSpec,
    DiffRecord,
    ElementSpec,
    IndexSpec,
)
from model_schema.schema.types import TypeCanonicalizer


# ============================================================================
# Equality rules
# ============================================================================


def columns_equal(
    actual: ColumnSpec, expected: ColumnSpec, canonicalizer: TypeCanonicalizer
) -> bool:
    """Compare two columns attribute by attribute.

    ``type`` and its qualifiers are replaced by one canonical type string
    comparison; every other attribute must be equal.
    """
    actual_attrs = actual.model_dump()
    expected_attrs = expected.model_dump()
    if actual_attrs.keys() != expected_attrs.keys():
        return False

    for key, value in actual_attrs.items():
        if key == "type" or key in TYPE_QUALIFIERS:
            continue
        if value != expected_attrs[key]:
            return False

    return canonicalizer.canonical_type(actual) == canonicalizer.canonical_type(expected)


def indexes_equal(actual: IndexSpec, expected: IndexSpec) -> bool:
    """Compare two indexes; an unnamed expected index accepts any name."""
    actual_attrs = actual.model_dump()
    expected_attrs = expected.model_dump()
    if actual_attrs.keys() != expected_attrs.keys():
        return False

    if expected_attrs["name"] is None:
        del actual_attrs["name"]
        del expected_attrs["name"]

    return actual_attrs == expected_attrs


def constraints_equal(actual: ConstraintSpec, expected: ConstraintSpec) -> bool:
    return actual.model_dump() == expected.model_dump()


def elements_equal(
    category: str,
    actual: ElementSpec,
    expected: ElementSpec,
    canonicalizer: TypeCanonicalizer,
) -> bool:
    """Dispatch to the equality rule of *category*."""
    if category == FIELD_COLUMNS:
        return columns_equal(actual, expected, canonicalizer)
    if category == FIELD_INDEXES:
        return indexes_equal(actual, expected)
    if category == FIELD_CONSTRAINTS:
        return constraints_equal(actual, expected)
    raise ValueError(f"Unknown schema category: {category!r}")


# ============================================================================
# Identity rules
# ============================================================================


def same_identity(category: str, actual: ElementSpec, expected: ElementSpec) -> bool:
    """Whether *actual* is plausibly the same element as *expected*.

    - columns: same name
    - indexes: same name (when the expected index is named) or same
      column list
    - constraints: same check body
    """
    if category == FIELD_COLUMNS:
        return actual.name == expected.name
    if category == FIELD_INDEXES:
        if expected.name is not None and actual.name == expected.name:
            return True
        return actual.columns == expected.columns
    if category == FIELD_CONSTRAINTS:
        return actual.check == expected.check
    raise ValueError(f"Unknown schema category: {category!r}")


# ============================================================================
# Matching
# ============================================================================


def match_elements(
    category: str,
    actual: list[ElementSpec],
    expected: list[ElementSpec],
    canonicalizer: TypeCanonicalizer,
) -> list[DiffRecord]:
    """Pair up *actual* and *expected* specs and return the differences.

    Args:
        category: ``"columns"``, ``"indexes"``, or ``"constraints"``.
        actual: Normalized specs observed in the database, in table order.
        expected: Normalized specs declared by the developer.
        canonicalizer: Used by the column equality rule.

    Returns:
        Missing and mismatch records in expected-list order, followed by
        extra records in actual-list order. Empty when everything matches.

    Example:
        >>> spec = normalize("columns", {"name": "x", "type": "integer"})
        >>> match_elements("columns", [spec], [spec], canonicalizer)
        []
    """
    consumed: set[int] = set()
    unmatched: list[ElementSpec] = []

    # first pass: exact matches, earliest actual element wins
    for exp_elem in expected:
        for index, db_elem in enumerate(actual):
            if index in consumed:
                continue
            if elements_equal(category, db_elem, exp_elem, canonicalizer):
                consumed.add(index)
                break
        else:
            unmatched.append(exp_elem)

    records: list[DiffRecord] = []

    # second pass: close matches become mismatches, the rest are missing
    for exp_elem in unmatched:
        for index, db_elem in enumerate(actual):
            if index in consumed:
                continue
            if same_identity(category, db_elem, exp_elem):
                consumed.add(index)
                records.append(DiffRecord.mismatch(category, db_elem, exp_elem))
                break
        else:
            records.append(DiffRecord.missing(category, exp_elem))

    # whatever was never consumed has no counterpart at all
    for index, db_elem in enumerate(actual):
        if index not in consumed:
            records.append(DiffRecord.extra(category, db_elem))

    return records
