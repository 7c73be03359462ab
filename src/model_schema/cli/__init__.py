"""CLI module for checking live tables against expected schemas.

Provides commands for listing connection profiles, checking one table
against an expected schema file, and dumping a live table's declaration.

Usage:
    DB_PROFILE=local model-schema check --table users --expected users.toml
    model-schema check --table users --expected users.toml --profile rds --no-indexes
    model-schema dump --table users --profile local
    model-schema profiles

Commands:
    check     - Check a table against an expected schema TOML file
    dump      - Print the declaration lines of a live table
    profiles  - List available profiles
"""

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from model_schema.config.loader import load_db_config, load_expected_schema
from model_schema.constants import FIELD_COLUMNS, FIELD_CONSTRAINTS, FIELD_INDEXES
from model_schema.errors import (
    DuplicateElementError,
    InvalidAttributeError,
    SchemaDiffError,
    TableNotFoundError,
)
from model_schema.factory import (
    ProfileNotFoundError,
    check_model_schema,
    resolve_profile,
    resolve_url,
)
from model_schema.schema.introspector import SchemaIntrospector
from model_schema.schema.normalizer import normalize_all
from model_schema.schema.reporter import dump_element

console = Console()


def _config_path(args: argparse.Namespace) -> Path | None:
    config = getattr(args, "config", None)
    return Path(config) if config else None


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_check(args: argparse.Namespace) -> int:
    """Async implementation for check command.

    Args:
        args: Parsed arguments with table, expected, profile, no_indexes,
            config, and env_prefix.

    Returns:
        0 if the table matches, 1 on mismatch or any error.
    """
    env_prefix = getattr(args, "env_prefix", "")
    config_path = _config_path(args)

    try:
        expected = load_expected_schema(Path(args.expected))
        profile_name, profile = resolve_profile(args.profile, env_prefix, config_path)
        config = load_db_config(config_path)
    except (FileNotFoundError, ValueError, ProfileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    console.print(
        f"Checking table [bold]{args.table}[/bold] "
        f"on profile [bold cyan]{profile_name}[/bold cyan]...",
        style="dim",
    )

    try:
        await check_model_schema(
            args.table,
            expected,
            database_url=resolve_url(profile),
            env_prefix=env_prefix,
            schema_name=config.schema_name,
            skip_indexes=args.no_indexes or config.skip_indexes,
        )
    except SchemaDiffError as e:
        console.print()
        console.print("[bold red]x[/bold red] Schema mismatch")
        console.print(str(e), markup=False, highlight=False)
        return 1
    except (TableNotFoundError, InvalidAttributeError, DuplicateElementError) as e:
        console.print()
        console.print(f"[bold red]x[/bold red] {escape(str(e))}", highlight=False)
        return 1
    except (ValidationError, TypeError) as e:
        console.print()
        console.print(
            f"[bold red]x[/bold red] Invalid expected schema {escape(args.expected)}: {escape(str(e))}",
            highlight=False,
        )
        return 1
    except Exception as e:
        console.print()
        console.print(f"[bold red]x[/bold red] Failed to connect to database: {escape(str(e))}")
        return 1

    console.print()
    console.print("[bold green]v[/bold green] Schema matches")
    return 0


async def _async_dump(args: argparse.Namespace) -> int:
    """Async implementation for dump command.

    Prints columns, then constraints, then indexes, separated by blank
    lines -- ready to paste into a ``TableDefinition``.

    Args:
        args: Parsed arguments with table, profile, config, and env_prefix.

    Returns:
        0 on success, 1 on failure.
    """
    env_prefix = getattr(args, "env_prefix", "")
    config_path = _config_path(args)

    try:
        _, profile = resolve_profile(args.profile, env_prefix, config_path)
        config = load_db_config(config_path)
    except (FileNotFoundError, ValueError, ProfileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    try:
        async with SchemaIntrospector(
            resolve_url(profile), schema_name=config.schema_name
        ) as introspector:
            description = await introspector.describe_table(args.table)
    except TableNotFoundError as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1
    except Exception as e:
        console.print(f"[bold red]x[/bold red] Failed to connect to database: {escape(str(e))}")
        return 1

    blocks = []
    for field in (FIELD_COLUMNS, FIELD_CONSTRAINTS, FIELD_INDEXES):
        specs = normalize_all(field, description.elements(field))
        if specs:
            blocks.append("\n".join(dump_element(field, spec) for spec in specs))

    console.print("\n\n".join(blocks), markup=False, highlight=False)
    return 0


# ============================================================================
# Sync command wrappers (cmd_profiles reads local files only)
# ============================================================================


def cmd_check(args: argparse.Namespace) -> int:
    """Check a table against an expected schema file.

    Wraps the async implementation with ``asyncio.run()``.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 if the table matches, 1 otherwise.
    """
    return asyncio.run(_async_check(args))


def cmd_dump(args: argparse.Namespace) -> int:
    """Print the declaration of a live table.

    Wraps the async implementation with ``asyncio.run()``.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 on failure.
    """
    return asyncio.run(_async_dump(args))


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from model_schema.toml.

    Reads only local TOML config -- no database calls.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 if the config file is not found.
    """
    try:
        config = load_db_config(_config_path(args))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    table = Table(
        title="Database Profiles", show_header=True, header_style="bold"
    )
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(name, profile.provider, profile.description or "")

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="model-schema",
        description="Check live database tables against expected schemas",
    )

    # Global option: --env-prefix
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to model_schema.toml (default: ./model_schema.toml)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # check command
    p_check = subparsers.add_parser(
        "check",
        help="Check a table against an expected schema file",
    )
    p_check.add_argument("--table", "-t", required=True, help="Table to check")
    p_check.add_argument(
        "--expected",
        "-e",
        required=True,
        help="Path to TOML file with [[columns]], [[indexes]], [[constraints]]",
    )
    p_check.add_argument(
        "--profile",
        "-p",
        default=None,
        help="Profile to check against (default: DB_PROFILE env var)",
    )
    p_check.add_argument(
        "--no-indexes",
        action="store_true",
        help="Skip index checks",
    )
    p_check.set_defaults(func=cmd_check)

    # dump command
    p_dump = subparsers.add_parser(
        "dump",
        help="Print the declaration lines of a live table",
    )
    p_dump.add_argument("--table", "-t", required=True, help="Table to dump")
    p_dump.add_argument(
        "--profile",
        "-p",
        default=None,
        help="Profile to read from (default: DB_PROFILE env var)",
    )
    p_dump.set_defaults(func=cmd_dump)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
