"""Column type canonicalization.

Defines the ``TypeCanonicalizer`` Protocol the diff engine uses to compare
column types, and ``PostgresTypeCanonicalizer``, which renders a column's
declared type plus its qualifier attributes (``size``, ``fixed``, ``text``,
``serial``, ``only_time``) into the literal type string PostgreSQL would use.

Two columns have the same type if and only if they canonicalize to the same
string, so ``int``, ``"int4"`` and ``"INTEGER"`` all compare equal.

Usage:
    from model_schema.schema.types import PostgresTypeCanonicalizer

    canonicalizer = PostgresTypeCanonicalizer()
    canonicalizer.canonical_type(ColumnSpec(name="n", type=str, size=50))
    # 'varchar(50)'
"""

import re
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Protocol

from model_schema.schema.models import ColumnSpec


class TypeCanonicalizer(Protocol):
    """Renders a column's type into a canonical string for comparison.

    Implementations must be deterministic: the same column always yields
    the same string. The engine calls this for both the actual and the
    expected column of every candidate pair.
    """

    def canonical_type(self, column: ColumnSpec) -> str:
        """Return the canonical type string for *column*.

        Args:
            column: Normalized column spec (type plus qualifiers).

        Returns:
            Canonical literal type, e.g. ``"varchar(255)"``.
        """
        ...


# Base type aliases folded onto one spelling
_TYPE_ALIASES: dict[str, str] = {
    "int": "integer",
    "int4": "integer",
    "int8": "bigint",
    "int2": "smallint",
    "serial4": "serial",
    "serial8": "bigserial",
    "serial2": "smallserial",
    "character varying": "varchar",
    "character": "char",
    "bpchar": "char",
    "bool": "boolean",
    "float8": "double precision",
    "float": "double precision",
    "float4": "real",
    "decimal": "numeric",
    "timestamp without time zone": "timestamp",
    "timestamp with time zone": "timestamptz",
    "time without time zone": "time",
    "time with time zone": "timetz",
    "bit varying": "varbit",
}

# Integer types and their auto-increment counterparts
_SERIAL_TYPES: dict[str, str] = {
    "integer": "serial",
    "bigint": "bigserial",
    "smallint": "smallserial",
}

_LITERAL_REGEX = re.compile(
    r"^(?P<base>[a-z_][a-z0-9_ ]*?)\s*(?P<args>\([^)]*\))?\s*(?P<array>(\[\d*\])*)$"
)

# format_type places precision before the zone: timestamp(3) without time zone
_TIME_ZONE_REGEX = re.compile(
    r"^(?P<base>timestamp|time)\s*(?P<args>\([^)]*\))\s*(?P<zone>with(?:out)? time zone)(?P<array>.*)$"
)


class PostgresTypeCanonicalizer:
    """Canonical PostgreSQL type strings for Python types and literals.

    Python types map the way a schema generator would create them:

    - ``int`` -> ``integer`` (``serial`` when ``serial=True``)
    - ``str`` -> ``varchar(255)``; ``char(n)`` when ``fixed``; ``text`` when
      ``text``; ``size`` overrides the length
    - ``float`` -> ``double precision``, ``Decimal`` -> ``numeric[(p, s)]``
    - ``bool`` -> ``boolean``, ``bytes`` -> ``bytea``
    - ``datetime`` -> ``timestamp`` (``time`` when ``only_time``),
      ``date`` -> ``date``, ``time`` -> ``time``, ``timedelta`` -> ``interval``
    - ``uuid.UUID`` -> ``uuid``

    Literal strings are lower-cased, whitespace-collapsed and alias-folded.
    """

    DEFAULT_STRING_SIZE = 255

    def canonical_type(self, column: ColumnSpec) -> str:
        column_type = column.type

        if column_type is None:
            return ""
        if isinstance(column_type, str):
            return self._canonical_literal(column_type, column)
        if isinstance(column_type, type):
            return self._canonical_python_type(column_type, column)

        raise TypeError(
            f"Unsupported type {column_type!r} for column {column.name!r}"
        )

    def _canonical_python_type(self, column_type: type, column: ColumnSpec) -> str:
        # bool before int: bool is a subclass of int
        if issubclass(column_type, bool):
            return "boolean"
        if issubclass(column_type, int):
            return "serial" if column.serial else "integer"
        if issubclass(column_type, str):
            if column.text:
                return "text"
            size = column.size or self.DEFAULT_STRING_SIZE
            return f"{'char' if column.fixed else 'varchar'}({size})"
        if issubclass(column_type, float):
            return "double precision"
        if issubclass(column_type, Decimal):
            if column.size is None:
                return "numeric"
            return f"numeric({_format_size(column.size)})"
        if issubclass(column_type, bytes):
            return "bytea"
        # datetime before date: datetime is a subclass of date
        if issubclass(column_type, datetime):
            return "time" if column.only_time else "timestamp"
        if issubclass(column_type, date):
            return "date"
        if issubclass(column_type, time):
            return "time"
        if issubclass(column_type, timedelta):
            return "interval"
        if issubclass(column_type, uuid.UUID):
            return "uuid"

        raise TypeError(
            f"No PostgreSQL type for {column_type.__name__} (column {column.name!r})"
        )

    def _canonical_literal(self, literal: str, column: ColumnSpec) -> str:
        text = " ".join(literal.lower().split())
        zone_match = _TIME_ZONE_REGEX.match(text)
        if zone_match:
            text = "{base} {zone}{args}{array}".format(**zone_match.groupdict())
        match = _LITERAL_REGEX.match(text)
        if not match:
            # Unparseable literals (domains, quoted names) compare verbatim
            return text

        base = _TYPE_ALIASES.get(match.group("base"), match.group("base"))
        args = match.group("args")
        array = match.group("array") or ""

        if args:
            args = "(" + ", ".join(a.strip() for a in args[1:-1].split(",")) + ")"
        elif column.size is not None:
            args = f"({_format_size(column.size)})"
        else:
            args = ""

        if column.serial and base in _SERIAL_TYPES:
            base = _SERIAL_TYPES[base]

        return f"{base}{args}{array}"


def _format_size(size: int | tuple[int, ...]) -> str:
    if isinstance(size, int):
        return str(size)
    return ", ".join(str(s) for s in size)
