"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from model_schema.config import load_db_config, DatabaseProfile, DatabaseConfig
    >>> from model_schema.config import load_expected_schema
"""

from model_schema.config.loader import load_db_config, load_expected_schema
from model_schema.config.models import DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "load_expected_schema", "DatabaseConfig", "DatabaseProfile"]
