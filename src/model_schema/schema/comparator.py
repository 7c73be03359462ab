"""Schema comparison of one table: actual vs. expected.

Normalizes both descriptions, matches columns, indexes and constraints, and
raises ``SchemaDiffError`` carrying every difference found.
Pure logic -- no I/O, no database connections, no logging.

Usage:
    from model_schema.schema.comparator import check_schema
    from model_schema.schema.introspector import SchemaIntrospector

    async with SchemaIntrospector(database_url) as introspector:
        actual = await introspector.describe_table("users")

    expected = TableDescription(
        columns=[{"name": "id", "type": int, "primary_key": True, "serial": True}],
    )

    try:
        check_schema("users", actual, expected, introspector)
    except SchemaDiffError as e:
        print(e)
"""

from typing import Protocol

from model_schema.constants import FIELD_COLUMNS, FIELD_CONSTRAINTS, FIELD_INDEXES
from model_schema.errors import SchemaDiffError
from model_schema.schema.matcher import match_elements
from model_schema.schema.models import ColumnSpec, DiffRecord, TableDescription
from model_schema.schema.normalizer import normalize_all
from model_schema.schema.types import TypeCanonicalizer


class SchemaProvider(Protocol):
    """Source of actual table descriptions.

    ``describe_table`` is a coroutine that raises ``TableNotFoundError`` when
    the table does not exist. The provider also canonicalizes column types
    for its engine. ``SchemaIntrospector`` implements this protocol.
    """

    async def describe_table(self, table_name: str) -> TableDescription:
        ...

    def canonical_type(self, column: ColumnSpec) -> str:
        ...


def diff_schema(
    actual: TableDescription,
    expected: TableDescription,
    canonicalizer: TypeCanonicalizer,
    skip_indexes: bool = False,
) -> list[DiffRecord]:
    """Compute every difference between *actual* and *expected*.

    Both sides are fully normalized before any matching, so an invalid
    attribute in either description fails before a single element is
    compared.

    Args:
        actual: Description observed in the database.
        expected: Description declared by the developer.
        canonicalizer: Column type canonicalization (usually the provider).
        skip_indexes: If True, indexes are not compared at all.

    Returns:
        Diff records for columns, then indexes, then constraints; each
        category in matcher emission order. Empty list when they match.

    Raises:
        InvalidAttributeError: If a description uses an unknown attribute.
        DuplicateElementError: If a description repeats a column name.
    """
    fields = [FIELD_COLUMNS, FIELD_CONSTRAINTS]
    if not skip_indexes:
        fields.insert(1, FIELD_INDEXES)

    normalized = [
        (
            field,
            normalize_all(field, actual.elements(field)),
            normalize_all(field, expected.elements(field)),
        )
        for field in fields
    ]

    records: list[DiffRecord] = []
    for field, db_specs, exp_specs in normalized:
        records.extend(match_elements(field, db_specs, exp_specs, canonicalizer))

    return records


def check_schema(
    table_name: str,
    actual: TableDescription,
    expected: TableDescription,
    canonicalizer: TypeCanonicalizer,
    *,
    skip_indexes: bool = False,
    disabled: bool = False,
) -> None:
    """Check that the actual table schema matches the expected one.

    Args:
        table_name: Table identifier, used in the error report.
        actual: Description observed in the database.
        expected: Description declared by the developer.
        canonicalizer: Column type canonicalization.
        skip_indexes: If True, indexes are not compared.
        disabled: If True, returns immediately without comparing anything.

    Raises:
        SchemaDiffError: If at least one difference exists. Carries the
            table name and the complete ordered record list.
        InvalidAttributeError: If a description uses an unknown attribute.

    Examples:
        >>> desc = TableDescription(columns=[{"name": "x", "type": "integer"}])
        >>> check_schema("t", desc, desc, PostgresTypeCanonicalizer())

        >>> check_schema("t", desc, TableDescription(), PostgresTypeCanonicalizer())
        Traceback (most recent call last):
        ...
        model_schema.errors.SchemaDiffError: ...
    """
    if disabled:
        return

    records = diff_schema(actual, expected, canonicalizer, skip_indexes=skip_indexes)
    if records:
        raise SchemaDiffError(table_name, records)


async def check_table(
    provider: SchemaProvider,
    table_name: str,
    expected: TableDescription,
    *,
    skip_indexes: bool = False,
    disabled: bool = False,
) -> None:
    """Fetch the actual description from *provider* and check it.

    Example:
        async with SchemaIntrospector(database_url) as introspector:
            await check_table(introspector, "users", users.describe())

    Raises:
        TableNotFoundError: If the provider has no such table.
        SchemaDiffError: If the schemas differ.
    """
    if disabled:
        return

    actual = await provider.describe_table(table_name)
    check_schema(table_name, actual, expected, provider, skip_indexes=skip_indexes)
