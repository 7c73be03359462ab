"""TOML loading for connection profiles and expected table schemas."""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from model_schema.config.models import DatabaseConfig, DatabaseProfile
from model_schema.schema.models import TableDescription

CONFIG_FILE_NAME = "model_schema.toml"


def load_db_config(config_path: Path | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Args:
        config_path: Path to model_schema.toml (default: ./model_schema.toml)

    Returns:
        DatabaseConfig with all profiles and check settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If a profile is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILE_NAME

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create {CONFIG_FILE_NAME} with a [profiles.<name>] section."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        try:
            profiles[name] = DatabaseProfile(**profile_data)
        except ValidationError as e:
            raise ValueError(f"Invalid profile '{name}' in {config_path}: {e}") from e

    # Parse check settings
    check_settings = data.get("check", {})

    return DatabaseConfig(
        profiles=profiles,
        schema_name=check_settings.get("schema_name", "public"),
        skip_indexes=check_settings.get("skip_indexes", False),
    )


def load_expected_schema(schema_path: Path) -> TableDescription:
    """Load an expected table schema from a TOML file.

    The file holds arrays of tables, one per element; attribute names are
    checked when the schema is compared, not here::

        [[columns]]
        name = "id"
        type = "integer"
        primary_key = true
        serial = true

        [[indexes]]
        columns = ["email"]
        unique = true

        [[constraints]]
        check = "(age > 0)"

    Args:
        schema_path: Path to the TOML file.

    Returns:
        TableDescription with the declared columns, indexes and constraints.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file has top-level keys other than the three
            element arrays.
    """
    if not schema_path.exists():
        raise FileNotFoundError(f"Expected schema not found: {schema_path}")

    with open(schema_path, "rb") as f:
        data = tomllib.load(f)

    unknown = sorted(set(data) - {"columns", "indexes", "constraints"})
    if unknown:
        raise ValueError(
            f"Unknown sections in {schema_path.name}: {', '.join(unknown)}"
        )

    return TableDescription(
        columns=data.get("columns", []),
        indexes=data.get("indexes", []),
        constraints=data.get("constraints", []),
    )
