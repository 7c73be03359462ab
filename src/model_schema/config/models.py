"""Pydantic models for database configuration."""

from pydantic import BaseModel


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from model_schema.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: str = "postgres"  # Defaults to postgres


class DatabaseConfig(BaseModel):
    """Complete configuration from model_schema.toml."""

    profiles: dict[str, DatabaseProfile]
    schema_name: str = "public"
    skip_indexes: bool = False
