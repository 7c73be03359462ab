"""model-schema: check that live database tables match their declared schema.

Compares the actual structure of a table (columns, indexes, check
constraints) with an expected declaration and raises ``SchemaDiffError``
with a readable report of every difference.

Usage:
    from model_schema import TableDefinition, check_model_schema
    from model_schema import check_schema, TableDescription, SchemaDiffError
"""

__version__ = "0.1.0"

# Declarations
from model_schema.declaration import TableDefinition

# Errors
from model_schema.errors import (
    DuplicateElementError,
    InvalidAttributeError,
    ModelSchemaError,
    SchemaDiffError,
    TableNotFoundError,
)

# Integration
from model_schema.factory import (
    ProfileNotFoundError,
    check_model_schema,
    checks_disabled,
)

# Schema (diff engine)
from model_schema.schema.comparator import check_schema, check_table, diff_schema
from model_schema.schema.models import DiffRecord, TableDescription
from model_schema.schema.types import PostgresTypeCanonicalizer

__all__ = [
    # Declarations
    "TableDefinition",
    # Errors
    "ModelSchemaError",
    "InvalidAttributeError",
    "DuplicateElementError",
    "TableNotFoundError",
    "SchemaDiffError",
    # Integration
    "check_model_schema",
    "checks_disabled",
    "ProfileNotFoundError",
    # Schema
    "check_schema",
    "check_table",
    "diff_schema",
    "DiffRecord",
    "TableDescription",
    "PostgresTypeCanonicalizer",
]
