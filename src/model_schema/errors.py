"""Exception types raised by schema checks.

Taxonomy:
- ``InvalidAttributeError``: a description used an unrecognized attribute name
- ``DuplicateElementError``: a column name appears twice in one description
- ``TableNotFoundError``: the actual-schema provider could not find the table
- ``SchemaDiffError``: reality does not match the expectation

The check never recovers locally -- every error aborts the current check and
reaches the caller. ``SchemaDiffError`` renders its message lazily, so a
caller that only tests for the error pays no formatting cost.
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from model_schema.schema.models import DiffRecord


class ModelSchemaError(Exception):
    """Base class for all model-schema errors."""

    pass


class InvalidAttributeError(ModelSchemaError):
    """Raised when a description contains unrecognized attribute names.

    Example:
        >>> err = InvalidAttributeError("columns", "age", ["foo"])
        >>> str(err)
        "foo is an invalid attribute for columns element 'age'"
    """

    def __init__(self, category: str, identity: object, keys: Sequence[str]):
        self.category = category
        self.identity = identity
        self.keys = tuple(keys)

        verb = "is an invalid attribute" if len(self.keys) == 1 else "are invalid attributes"
        super().__init__(
            f"{', '.join(self.keys)} {verb} for {category} element {identity!r}"
        )


class DuplicateElementError(ModelSchemaError):
    """Raised when two elements of one category share the same name."""

    def __init__(self, category: str, identity: object):
        self.category = category
        self.identity = identity
        super().__init__(f"Duplicate {category} element {identity!r}")


class TableNotFoundError(ModelSchemaError):
    """Raised when the table to check does not exist in the database."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table {table_name} doesn't exist.")


class SchemaDiffError(ModelSchemaError):
    """Raised when the actual table schema differs from the expected schema.

    Holds the table name and the ordered diff records produced by one check.
    The record list is frozen at construction; callers needing structured
    access should use ``records`` rather than parse ``str(error)``.
    """

    def __init__(self, table_name: str, records: Iterable["DiffRecord"]):
        self._table_name = table_name
        self._records: tuple["DiffRecord", ...] = tuple(records)
        super().__init__(table_name, self._records)

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def records(self) -> tuple["DiffRecord", ...]:
        return self._records

    def diffs_by(self, category: str, kind: str) -> list["DiffRecord"]:
        """Records of the given category and kind, in emission order."""
        return [r for r in self._records if r.category == category and r.kind == kind]

    def __str__(self) -> str:
        # model_schema.schema imports this module at package import time
        from model_schema.schema.reporter import render

        return render(self)
