"""Tests for the diff engine.

Verifies check_schema()/diff_schema()/check_table() across all three
categories: success paths, option handling, category ordering, the
fail-fast attribute check, and the documented scenarios.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from model_schema.errors import (
    InvalidAttributeError,
    SchemaDiffError,
    TableNotFoundError,
)
from model_schema.schema.comparator import check_schema, check_table, diff_schema
from model_schema.schema.introspector import SchemaIntrospector
from model_schema.schema.models import TableDescription
from model_schema.schema.types import PostgresTypeCanonicalizer

CANON = PostgresTypeCanonicalizer()


class FakeProvider:
    """In-memory actual-schema provider."""

    def __init__(self, tables: dict[str, TableDescription]):
        self._tables = tables

    async def describe_table(self, table_name: str) -> TableDescription:
        if table_name not in self._tables:
            raise TableNotFoundError(table_name)
        return self._tables[table_name]

    def canonical_type(self, column) -> str:
        return CANON.canonical_type(column)


class TestScenarios:
    """End-to-end scenarios for a single table."""

    def test_simple_match(self) -> None:
        """Identical descriptions succeed silently."""
        actual = TableDescription(columns=[{"name": "x", "type": "Int", "null": False}])
        expected = TableDescription(columns=[{"name": "x", "type": "Int", "null": False}])

        assert check_schema("t", actual, expected, CANON) is None

    def test_extra_column(self) -> None:
        """A column only in the database is one extra record."""
        actual = TableDescription(columns=[{"name": "name", "type": "text"}])
        expected = TableDescription()

        with pytest.raises(SchemaDiffError) as exc_info:
            check_schema("users", actual, expected, CANON)

        err = exc_info.value
        assert len(err.records) == 1
        assert err.records[0].kind == "extra"
        assert err.records[0].element.name == "name"
        message = str(err)
        assert "extra columns" in message
        assert "column('name', 'text')" in message

    def test_missing_column(self) -> None:
        """A declared column with no counterpart is one missing record."""
        actual = TableDescription()
        expected = TableDescription(columns=[{"name": "age", "type": int}])

        with pytest.raises(SchemaDiffError) as exc_info:
            check_schema("users", actual, expected, CANON)

        err = exc_info.value
        assert [r.kind for r in err.records] == ["missing"]
        assert "missing columns" in str(err)
        assert "column('age', int)" in str(err)

    def test_type_alias_equivalence(self) -> None:
        """Different spellings of integer do not mismatch."""
        actual = TableDescription(columns=[{"name": "n", "type": "integer"}])

        for spelling in (int, "int4", "INT", "integer"):
            expected = TableDescription(columns=[{"name": "n", "type": spelling}])
            check_schema("t", actual, expected, CANON)

    def test_timestamp_precision_equivalence(self) -> None:
        """The introspected spelling of timestamp(3) matches the declared one."""
        actual = TableDescription(
            columns=[{"name": "t", "type": "timestamp(3) without time zone"}]
        )
        expected = TableDescription(columns=[{"name": "t", "type": "timestamp(3)"}])

        check_schema("t", actual, expected, CANON)

    def test_index_loose_match(self) -> None:
        """Same columns, different uniqueness: one mismatch record."""
        actual = TableDescription(
            indexes=[{"columns": ["name"], "name": "idx_a", "unique": False}]
        )
        expected = TableDescription(indexes=[{"columns": ["name"], "unique": True}])

        with pytest.raises(SchemaDiffError) as exc_info:
            check_schema("t", actual, expected, CANON)

        records = exc_info.value.records
        assert len(records) == 1
        assert records[0].kind == "mismatch"
        assert records[0].category == "indexes"
        assert records[0].actual.name == "idx_a"
        assert records[0].expected.unique is True

    def test_invalid_attribute_before_matching(self) -> None:
        """An unknown key fails before any element is matched."""
        actual = TableDescription(columns=[{"name": "other", "type": "text"}])
        expected = TableDescription(columns=[{"name": "age", "type": int, "foo": 1}])

        with patch("model_schema.schema.comparator.match_elements") as mock_match:
            with pytest.raises(InvalidAttributeError) as exc_info:
                check_schema("t", actual, expected, CANON)

        mock_match.assert_not_called()
        assert exc_info.value.keys == ("foo",)
        assert exc_info.value.identity == "age"

    def test_invalid_attribute_in_last_category_wins_over_diffs(self) -> None:
        """Column diffs never mask an invalid constraint attribute."""
        actual = TableDescription(columns=[{"name": "a", "type": "text"}])
        expected = TableDescription(constraints=[{"check": "a <> ''", "deferred": True}])

        with pytest.raises(InvalidAttributeError, match="deferred"):
            check_schema("t", actual, expected, CANON)


class TestOptions:
    """Verify the disabled and skip_indexes options."""

    def test_disabled_skips_everything(self) -> None:
        """disabled=True returns without even normalizing."""
        actual = TableDescription(columns=[{"name": "a", "type": "text"}])
        expected = TableDescription(columns=[{"name": "b", "bogus": 1}])

        assert check_schema("t", actual, expected, CANON, disabled=True) is None

    def test_skip_indexes(self) -> None:
        """Index differences are ignored with skip_indexes=True."""
        actual = TableDescription(indexes=[{"columns": ["a"], "name": "idx_a"}])
        expected = TableDescription(indexes=[{"columns": ["b"]}])

        check_schema("t", actual, expected, CANON, skip_indexes=True)

        with pytest.raises(SchemaDiffError):
            check_schema("t", actual, expected, CANON)

    def test_skip_indexes_still_checks_constraints(self) -> None:
        actual = TableDescription()
        expected = TableDescription(constraints=[{"check": "a > 0"}])

        with pytest.raises(SchemaDiffError):
            check_schema("t", actual, expected, CANON, skip_indexes=True)


class TestRecordOrder:
    """Verify category ordering and determinism."""

    def _descriptions(self) -> tuple[TableDescription, TableDescription]:
        actual = TableDescription(
            columns=[
                {"name": "id", "type": "integer", "primary_key": True, "serial": True},
                {"name": "legacy", "type": "text"},
                {"name": "email", "type": "text"},
            ],
            indexes=[{"columns": ["email"], "name": "idx_email"}],
            constraints=[{"name": "positive", "check": "(id > 0)"}],
        )
        expected = TableDescription(
            columns=[
                {"name": "id", "type": int, "primary_key": True, "serial": True},
                {"name": "email", "type": str, "size": 100},
                {"name": "age", "type": int},
            ],
            indexes=[{"columns": ["email"], "unique": True}],
            constraints=[{"check": "(age > 0)"}],
        )
        return actual, expected

    def test_categories_in_order(self) -> None:
        """Columns, then indexes, then constraints."""
        actual, expected = self._descriptions()

        records = diff_schema(actual, expected, CANON)

        assert [(r.category, r.kind) for r in records] == [
            ("columns", "mismatch"),
            ("columns", "missing"),
            ("columns", "extra"),
            ("indexes", "mismatch"),
            ("constraints", "missing"),
            ("constraints", "extra"),
        ]

    def test_stable_across_runs(self) -> None:
        actual, expected = self._descriptions()
        assert diff_schema(actual, expected, CANON) == diff_schema(actual, expected, CANON)

    def test_error_carries_full_record_list(self) -> None:
        actual, expected = self._descriptions()

        with pytest.raises(SchemaDiffError) as exc_info:
            check_schema("users", actual, expected, CANON)

        assert exc_info.value.table_name == "users"
        assert list(exc_info.value.records) == diff_schema(actual, expected, CANON)

    def test_empty_descriptions_match(self) -> None:
        assert diff_schema(TableDescription(), TableDescription(), CANON) == []


class TestCheckTable:
    """Verify check_table() with a schema provider."""

    def test_match(self) -> None:
        desc = TableDescription(columns=[{"name": "id", "type": "integer"}])
        provider = FakeProvider({"users": desc})

        asyncio.run(
            check_table(
                provider, "users", TableDescription(columns=[{"name": "id", "type": int}])
            )
        )

    def test_table_not_found(self) -> None:
        """A missing table is a distinct error, not a diff."""
        provider = FakeProvider({})

        with pytest.raises(TableNotFoundError, match="users"):
            asyncio.run(check_table(provider, "users", TableDescription()))

    def test_diff_raised(self) -> None:
        provider = FakeProvider({"users": TableDescription()})

        with pytest.raises(SchemaDiffError):
            asyncio.run(
                check_table(
                    provider, "users", TableDescription(columns=[{"name": "id", "type": int}])
                )
            )

    def test_disabled_skips_provider(self) -> None:
        provider = FakeProvider({})
        asyncio.run(check_table(provider, "users", TableDescription(), disabled=True))


class TestCheckTableWithIntrospector:
    """check_table() accepts the package's own SchemaIntrospector."""

    def _introspector(self, describe: AsyncMock) -> SchemaIntrospector:
        introspector = SchemaIntrospector("postgresql://localhost/test")
        introspector.describe_table = describe
        return introspector

    def test_match(self) -> None:
        describe = AsyncMock(
            return_value=TableDescription(
                columns=[{"name": "id", "type": "integer", "primary_key": True, "serial": True}]
            )
        )
        introspector = self._introspector(describe)
        expected = TableDescription(
            columns=[{"name": "id", "type": int, "primary_key": True, "serial": True}]
        )

        asyncio.run(check_table(introspector, "users", expected))

        describe.assert_awaited_once_with("users")

    def test_mismatch(self) -> None:
        introspector = self._introspector(
            AsyncMock(return_value=TableDescription(columns=[{"name": "id", "type": "text"}]))
        )
        expected = TableDescription(columns=[{"name": "id", "type": int}])

        with pytest.raises(SchemaDiffError) as exc_info:
            asyncio.run(check_table(introspector, "users", expected))

        assert [r.kind for r in exc_info.value.records] == ["mismatch"]

    def test_table_not_found(self) -> None:
        introspector = self._introspector(AsyncMock(side_effect=TableNotFoundError("users")))

        with pytest.raises(TableNotFoundError, match="Table users doesn't exist."):
            asyncio.run(check_table(introspector, "users", TableDescription()))
