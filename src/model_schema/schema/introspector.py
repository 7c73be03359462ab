"""PostgreSQL table introspection via pg_catalog.

This module queries the live database to describe one table in the shape
the diff engine consumes:
- Columns: name, literal type, nullability, default, plus single-column
  primary key, unique and foreign key constraints folded in
- Indexes: columns, name, access method, uniqueness, partial predicate
  (primary key, constraint-backed and expression indexes excluded)
- Check constraints: name and body

Uses psycopg (v3) async connections.
"""

import logging
import re
from typing import Any

import psycopg
from psycopg import AsyncConnection

from model_schema.errors import TableNotFoundError
from model_schema.schema.models import ColumnSpec, TableDescription
from model_schema.schema.types import PostgresTypeCanonicalizer, TypeCanonicalizer

logger = logging.getLogger(__name__)

# pg_constraint.confdeltype / confupdtype codes
_FK_ACTIONS: dict[str, str] = {
    "a": "no_action",
    "r": "restrict",
    "c": "cascade",
    "n": "set_null",
    "d": "set_default",
}

_NEXTVAL_REGEX = re.compile(r"^nextval\('.*'::regclass\)$")
_STRING_DEFAULT_REGEX = re.compile(r"^'((?:[^']|'')*)'(?:::[\w\s\"\.\[\]()]+)?$")
_INTEGER_REGEX = re.compile(r"^-?\d+$")
_FLOAT_REGEX = re.compile(r"^-?\d+\.\d+$")
_NULL_REGEX = re.compile(r"^NULL(?:::.+)?$", re.IGNORECASE)
_CHECK_REGEX = re.compile(r"^CHECK \((.*)\)(?: NOT VALID)?$", re.DOTALL)


def _parse_default(expression: str) -> Any:
    """Convert a column default expression into a Python value when simple.

    Literal strings, integers, floats, booleans and NULL become Python values;
    anything else (``now()``, casts of expressions) is kept as the expression.
    """
    text = expression.strip()
    # strip a redundant wrapping cast like (0)::bigint
    if text.startswith("(") and ")::" in text:
        inner = text[1 : text.index(")::")]
        if _INTEGER_REGEX.match(inner) or _FLOAT_REGEX.match(inner):
            text = inner

    if _NULL_REGEX.match(text):
        return None
    if text in ("true", "false"):
        return text == "true"
    if _INTEGER_REGEX.match(text):
        return int(text)
    if _FLOAT_REGEX.match(text):
        return float(text)

    match = _STRING_DEFAULT_REGEX.match(text)
    if match:
        return match.group(1).replace("''", "'")

    return text


def _check_body(definition: str) -> str:
    """Strip the ``CHECK (...)`` wrapper from a constraint definition."""
    match = _CHECK_REGEX.match(definition.strip())
    return match.group(1) if match else definition


class SchemaIntrospector:
    """Describes PostgreSQL tables for schema checks.

    Uses pg_catalog for column, constraint and index extraction. Also acts
    as the type canonicalizer for the descriptions it produces.

    Usage:
        async with SchemaIntrospector(database_url) as introspector:
            actual = await introspector.describe_table("users")
            check_schema("users", actual, expected, introspector)
    """

    def __init__(
        self,
        database_url: str,
        schema_name: str = "public",
        connect_timeout: int = 10,
        canonicalizer: TypeCanonicalizer | None = None,
    ):
        """Initialize with database connection URL.

        Args:
            database_url: PostgreSQL connection URL.
            schema_name: PostgreSQL schema holding the tables (default: public).
            connect_timeout: Seconds to wait for a connection (default: 10).
            canonicalizer: Type canonicalization; defaults to
                ``PostgresTypeCanonicalizer``.
        """
        self._database_url = database_url
        self._schema_name = schema_name
        self._connect_timeout = connect_timeout
        self._canonicalizer = canonicalizer or PostgresTypeCanonicalizer()
        self._conn: AsyncConnection | None = None

    async def __aenter__(self) -> "SchemaIntrospector":
        """Async context manager entry - opens connection."""
        # Append connect_timeout if not already in URL
        url = self._database_url
        if "connect_timeout" not in url:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}connect_timeout={self._connect_timeout}"

        self._conn = await AsyncConnection.connect(url)
        logger.debug("Introspector connected (schema=%s)", self._schema_name)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - closes connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_connection(self) -> AsyncConnection:
        if not self._conn:
            raise RuntimeError("Introspector not connected. Use async with statement.")
        return self._conn

    def canonical_type(self, column: ColumnSpec) -> str:
        return self._canonicalizer.canonical_type(column)

    async def test_connection(self) -> bool:
        """Run ``SELECT 1`` on the open connection.

        Raises:
            RuntimeError: If not connected.
            ConnectionError: If the query fails.
        """
        conn = self._require_connection()
        try:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()
        except psycopg.Error as e:
            raise ConnectionError(f"Connection test failed: {e}") from e
        return True

    async def table_exists(self, table_name: str) -> bool:
        """Whether *table_name* is a base table in the configured schema."""
        conn = self._require_connection()
        query = """
            SELECT 1
            FROM information_schema.tables
            WHERE table_schema = %s
              AND table_name = %s
              AND table_type = 'BASE TABLE'
        """
        async with conn.cursor() as cur:
            await cur.execute(query, (self._schema_name, table_name))
            return await cur.fetchone() is not None

    async def describe_table(self, table_name: str) -> TableDescription:
        """Describe one table's columns, indexes and check constraints.

        Args:
            table_name: Table to describe.

        Returns:
            TableDescription with raw attribute mappings; only non-default
            attributes are set.

        Raises:
            RuntimeError: If not connected.
            TableNotFoundError: If the table does not exist.
        """
        self._require_connection()

        if not await self.table_exists(table_name):
            raise TableNotFoundError(table_name)

        columns = await self._get_columns(table_name)
        key_constraints, checks = await self._get_constraints(table_name)
        self._apply_key_constraints(columns, key_constraints)
        indexes = await self._get_indexes(table_name)

        logger.debug(
            "Described table %s: %d columns, %d indexes, %d constraints",
            table_name,
            len(columns),
            len(indexes),
            len(checks),
        )
        return TableDescription(
            columns=list(columns.values()),
            indexes=indexes,
            constraints=checks,
        )

    async def _get_columns(self, table_name: str) -> dict[str, dict[str, Any]]:
        """Get columns for a table, in ordinal order."""
        query = """
            SELECT
                a.attname,
                format_type(a.atttypid, a.atttypmod) AS data_type,
                a.attnotnull,
                pg_get_expr(d.adbin, d.adrelid) AS column_default,
                a.attidentity
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
            WHERE n.nspname = %s
              AND c.relname = %s
              AND a.attnum > 0
              AND NOT a.attisdropped
            ORDER BY a.attnum
        """
        conn = self._require_connection()
        async with conn.cursor() as cur:
            await cur.execute(query, (self._schema_name, table_name))
            columns: dict[str, dict[str, Any]] = {}
            for row in await cur.fetchall():
                name, data_type, not_null, default, identity = row

                column: dict[str, Any] = {"name": name, "type": data_type}
                if identity or (default and _NEXTVAL_REGEX.match(default)):
                    column["serial"] = True
                elif default is not None:
                    column["default"] = _parse_default(default)
                if not_null:
                    column["null"] = False

                columns[name] = column
            return columns

    async def _get_constraints(
        self, table_name: str
    ) -> tuple[list[tuple], list[dict[str, Any]]]:
        """Get key constraints (p, u, f) and check constraints for a table."""
        query = """
            SELECT
                con.conname,
                con.contype,
                ARRAY(
                    SELECT att.attname
                    FROM unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_attribute att
                      ON att.attrelid = con.conrelid AND att.attnum = k.attnum
                    ORDER BY k.ord
                ) AS columns,
                ref.relname AS references_table,
                ARRAY(
                    SELECT att.attname
                    FROM unnest(con.confkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_attribute att
                      ON att.attrelid = con.confrelid AND att.attnum = k.attnum
                    ORDER BY k.ord
                ) AS references_columns,
                con.confdeltype,
                con.confupdtype,
                pg_get_constraintdef(con.oid) AS definition
            FROM pg_constraint con
            JOIN pg_class c ON c.oid = con.conrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_class ref ON ref.oid = con.confrelid
            WHERE n.nspname = %s
              AND c.relname = %s
              AND con.contype IN ('p', 'u', 'f', 'c')
            ORDER BY con.conname
        """
        conn = self._require_connection()
        async with conn.cursor() as cur:
            await cur.execute(query, (self._schema_name, table_name))

            key_constraints: list[tuple] = []
            checks: list[dict[str, Any]] = []
            for row in await cur.fetchall():
                name, ctype, *_, definition = row
                if ctype == "c":
                    checks.append({"name": name, "check": _check_body(definition)})
                else:
                    key_constraints.append(row)
            return key_constraints, checks

    def _apply_key_constraints(
        self, columns: dict[str, dict[str, Any]], key_constraints: list[tuple]
    ) -> None:
        """Fold single-column primary key, unique and foreign keys into columns.

        Multi-column key constraints have no column-level form and are left
        out of the description.
        """
        for row in key_constraints:
            name, ctype, cols, ref_table, ref_cols, on_delete, on_update, _ = row
            if len(cols) != 1 or cols[0] not in columns:
                logger.debug("Skipping multi-column constraint %s", name)
                continue

            column = columns[cols[0]]
            if ctype == "p":
                column["primary_key"] = True
                # NOT NULL is implied by the primary key
                column.pop("null", None)
            elif ctype == "u":
                column["unique"] = True
            elif ctype == "f":
                column["table"] = ref_table
                column["key"] = list(ref_cols)
                column["on_delete"] = _FK_ACTIONS.get(on_delete, "no_action")
                column["on_update"] = _FK_ACTIONS.get(on_update, "no_action")

    async def _get_indexes(self, table_name: str) -> list[dict[str, Any]]:
        """Get indexes for a table.

        Primary key, constraint-backed and expression indexes are excluded.
        """
        query = """
            SELECT
                i.relname AS index_name,
                array_agg(a.attname ORDER BY x.ordinality) AS columns,
                ix.indisunique AS is_unique,
                am.amname AS index_type,
                pg_get_expr(ix.indpred, ix.indrelid) AS predicate
            FROM pg_index ix
            JOIN pg_class t ON t.oid = ix.indrelid
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_am am ON am.oid = i.relam
            JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS x(attnum, ordinality) ON TRUE
            LEFT JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = x.attnum
            WHERE n.nspname = %s
              AND t.relname = %s
              AND NOT ix.indisprimary
              AND NOT EXISTS (
                  SELECT 1 FROM pg_constraint con WHERE con.conindid = ix.indexrelid
              )
            GROUP BY i.relname, ix.indisunique, am.amname, ix.indpred, ix.indrelid
            ORDER BY i.relname
        """
        conn = self._require_connection()
        async with conn.cursor() as cur:
            await cur.execute(query, (self._schema_name, table_name))
            indexes = []
            for row in await cur.fetchall():
                name, columns, is_unique, idx_type, predicate = row
                if None in columns:
                    # expression keys (attnum 0) have no column-level form
                    logger.debug("Skipping expression index %s", name)
                    continue

                index: dict[str, Any] = {"columns": list(columns), "name": name}
                if idx_type != "btree":
                    index["type"] = idx_type
                if is_unique:
                    index["unique"] = True
                if predicate is not None:
                    index["where"] = predicate
                indexes.append(index)
            return indexes
