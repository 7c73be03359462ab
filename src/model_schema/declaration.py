"""Declarative builder for expected table schemas.

``TableDefinition`` collects columns, indexes and constraints in the same
form the diff report prints them, so a report line can be pasted straight
back into a declaration.

Usage:
    from model_schema.declaration import TableDefinition

    users = TableDefinition()
    users.primary_key("id")
    users.foreign_key("organization_id", "organizations", null=False,
                      on_delete="cascade")
    users.column("email", str, size=100, null=False, unique=True)
    users.column("created_at", datetime, null=False)
    users.index(["email"], unique=True)
    users.constraint("char_length(email) > 3", name="email_length")

    expected = users.describe()
"""

from typing import Any

from model_schema.schema.models import TableDescription


class TableDefinition:
    """Collects the expected columns, indexes and constraints of one table.

    Options are stored as given; unknown option names are reported as
    ``InvalidAttributeError`` when the definition is checked, naming the
    offending element.
    """

    def __init__(self) -> None:
        self.columns: list[dict[str, Any]] = []
        self.indexes: list[dict[str, Any]] = []
        self.constraints: list[dict[str, Any]] = []

    def column(self, name: str, type: Any, **opts: Any) -> "TableDefinition":
        """Declare a column.

        Args:
            name: Column name.
            type: Python type (``int``, ``str``...) or a literal type string.
            **opts: Column attributes (``null``, ``default``, ``size``...).
        """
        self.columns.append({"name": name, "type": type, **opts})
        return self

    def primary_key(self, name: str, type: Any = int, **opts: Any) -> "TableDefinition":
        """Declare an auto-incrementing primary key column."""
        return self.column(name, type, primary_key=True, serial=True, **opts)

    def foreign_key(
        self, name: str, table: str, type: Any = int, **opts: Any
    ) -> "TableDefinition":
        """Declare a column referencing *table* (``key`` defaults to ``["id"]``)."""
        return self.column(name, type, table=table, **opts)

    def index(self, columns: list[str] | str, **opts: Any) -> "TableDefinition":
        """Declare an index; a single column name may be passed as a string."""
        if isinstance(columns, str):
            columns = [columns]
        self.indexes.append({"columns": list(columns), **opts})
        return self

    def constraint(self, check: str, name: str | None = None) -> "TableDefinition":
        """Declare a check constraint by its body expression."""
        constraint: dict[str, Any] = {"check": check}
        if name is not None:
            constraint["name"] = name
        self.constraints.append(constraint)
        return self

    def describe(self) -> TableDescription:
        return TableDescription(
            columns=list(self.columns),
            indexes=list(self.indexes),
            constraints=list(self.constraints),
        )
