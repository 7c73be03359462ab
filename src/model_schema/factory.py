"""Integration layer: environment toggles, profiles, and live checks.

Wires the PostgreSQL introspector to the diff engine. Environment variables
are read here, never in the engine:

- ``{prefix}DISABLE_MODEL_SCHEMA=1`` skips every check
- ``{prefix}DB_PROFILE`` selects the connection profile from model_schema.toml

Usage:
    from model_schema.factory import check_model_schema

    await check_model_schema("users", users.describe(), profile_name="local")
"""

import logging
import os
from pathlib import Path
from urllib.parse import quote

from model_schema.config.loader import load_db_config
from model_schema.config.models import DatabaseProfile
from model_schema.constants import DISABLE_MODEL_SCHEMA_KEY
from model_schema.schema.comparator import check_table
from model_schema.schema.introspector import SchemaIntrospector
from model_schema.schema.models import TableDescription

logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


# ============================================================================
# Environment and profiles
# ============================================================================


def checks_disabled(env_prefix: str = "") -> bool:
    """Whether ``{env_prefix}DISABLE_MODEL_SCHEMA`` is set to ``1``."""
    return os.environ.get(f"{env_prefix}{DISABLE_MODEL_SCHEMA_KEY}") == "1"


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from the ``{env_prefix}DB_PROFILE`` env var.

    Raises:
        ProfileNotFoundError: If the variable is not set
    """
    env_var = f"{env_prefix}DB_PROFILE"
    env_profile = os.environ.get(env_var)
    if env_profile:
        return env_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Set {env_var}=<name> or pass --profile."
    )


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with password substituted
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def resolve_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | None = None,
) -> tuple[str, DatabaseProfile]:
    """Look up a profile by name (or from the environment).

    Returns:
        Tuple of (profile_name, DatabaseProfile)

    Raises:
        ProfileNotFoundError: If no profile is configured or it is unknown
        FileNotFoundError: If the config file doesn't exist
    """
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix)

    config = load_db_config(config_path)
    if profile_name not in config.profiles:
        available = ", ".join(config.profiles.keys())
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found. Available: {available}"
        )

    return profile_name, config.profiles[profile_name]


# ============================================================================
# Live checks
# ============================================================================


async def check_model_schema(
    table_name: str,
    expected: TableDescription,
    *,
    database_url: str | None = None,
    profile_name: str | None = None,
    env_prefix: str = "",
    schema_name: str = "public",
    skip_indexes: bool = False,
    disabled: bool = False,
    config_path: Path | None = None,
) -> None:
    """Check a live table against its expected schema.

    Connects only when checks are enabled. When *database_url* is not
    given, the URL comes from the selected profile.

    Args:
        table_name: Table to check.
        expected: Declared schema (e.g. ``TableDefinition.describe()``).
        database_url: Explicit connection URL; bypasses profiles.
        profile_name: Profile from model_schema.toml (default: env var).
        env_prefix: Prefix for environment variable lookup.
        schema_name: PostgreSQL schema holding the table.
        skip_indexes: If True, indexes are not compared.
        disabled: If True, returns without connecting.
        config_path: Path to model_schema.toml.

    Raises:
        TableNotFoundError: If the table does not exist.
        InvalidAttributeError: If *expected* uses an unknown attribute.
        SchemaDiffError: If the live schema differs from *expected*.
        ProfileNotFoundError: If no connection could be resolved.
    """
    if disabled or checks_disabled(env_prefix):
        logger.debug("Schema check for %s disabled", table_name)
        return

    if database_url is None:
        profile_name, profile = resolve_profile(profile_name, env_prefix, config_path)
        database_url = resolve_url(profile)
        logger.info("Checking table %s against profile %s", table_name, profile_name)

    async with SchemaIntrospector(database_url, schema_name=schema_name) as introspector:
        await check_table(
            introspector, table_name, expected, skip_indexes=skip_indexes
        )
