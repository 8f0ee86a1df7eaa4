"""CLI commands for global configuration management."""

from typing import Any

import typer

from committer import global_config
from committer.config import API_KEY_ENV_VAR
from committer.diff import parse_exclusion_rule
from committer.global_config import GlobalConfigError
from committer.cli.utils import load_config_or_exit

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage committer configuration in ~/.config/committer/",
    add_completion=False,
)

# Subcommand group for exclusion patterns
exclude_app = typer.Typer(
    name="exclude",
    help="Manage the patterns of files left out of the diff",
    add_completion=False,
)
config_app.add_typer(exclude_app, name="exclude")


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "on", "1"):
        return True
    if lowered in ("false", "no", "off", "0"):
        return False
    typer.echo(f"Invalid value: {value} (expected true or false)", err=True)
    raise typer.Exit(1)


def _set(key: str, value: Any) -> None:
    try:
        updated = global_config.update_config(**{key: value})
    except GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ {key} set to {updated.to_dict()[key]}")


@config_app.command("show")
def config_show() -> None:
    """Show the current configuration."""
    config = load_config_or_exit()

    typer.echo("Configuration")
    typer.echo(f"  file: {global_config.get_config_file_path()}")
    typer.echo()
    typer.echo(f"  auto_commit: {str(config.auto_commit).lower()}")
    typer.echo(f"  commit_after_branch: {str(config.commit_after_branch).lower()}")
    typer.echo(f"  verbose: {str(config.verbose).lower()}")
    typer.echo(f"  model: {config.model}")
    typer.echo(f"  max_diff_bytes: {config.max_diff_bytes}")
    typer.echo(f"  idle_timeout: {config.idle_timeout:g}")
    typer.echo(f"  file_priority: {config.file_priority.value}")
    typer.echo(f"  exclude: {len(config.exclude)} pattern(s)")

    source = global_config.api_key_source()
    if source == "env":
        typer.echo("  api_key: [set via env]")
    elif source == "credentials":
        typer.echo("  api_key: [set in credentials file]")
    else:
        typer.echo("  api_key: [not set]")


@config_app.command("auto-commit")
def config_auto_commit(value: str = typer.Argument(..., help="true or false")) -> None:
    """Commit without asking once a message is generated."""
    _set("auto_commit", _parse_bool(value))


@config_app.command("commit-after-branch")
def config_commit_after_branch(value: str = typer.Argument(..., help="true or false")) -> None:
    """Commit right after creating a branch with [b]."""
    _set("commit_after_branch", _parse_bool(value))


@config_app.command("verbose")
def config_verbose(value: str = typer.Argument(..., help="true or false")) -> None:
    """Always report excluded and truncated files."""
    _set("verbose", _parse_bool(value))


@config_app.command("model")
def config_model(value: str = typer.Argument(..., help="OpenRouter model, e.g. openai/gpt-4o")) -> None:
    """Set the OpenRouter model."""
    _set("model", value)


@config_app.command("max-diff-bytes")
def config_max_diff_bytes(value: int = typer.Argument(..., help="Byte budget for the diff")) -> None:
    """Set the byte budget for the diff sent to the model."""
    _set("max_diff_bytes", value)


@config_app.command("file-priority")
def config_file_priority(value: str = typer.Argument(..., help="diff or recent")) -> None:
    """Choose which files get the diff budget first (git order or most recently modified)."""
    _set("file_priority", value)


@config_app.command("set-key")
def config_set_key() -> None:
    """Store the OpenRouter API key in the credentials file."""
    api_key = typer.prompt("Enter your OpenRouter API key", hide_input=True).strip()
    if not api_key:
        typer.echo("API key cannot be empty", err=True)
        raise typer.Exit(1)

    try:
        global_config.save_credential(API_KEY_ENV_VAR, api_key)
    except GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ API key saved to {global_config.get_credentials_file_path()}")


@exclude_app.command("list")
def exclude_list() -> None:
    """Show the exclusion patterns."""
    config = load_config_or_exit()

    typer.echo("Excluded from the diff:")
    typer.echo()
    if config.exclude:
        for pattern in config.exclude:
            typer.echo(f"  - {pattern}")
        typer.echo()
        typer.echo(f"Total: {len(config.exclude)} pattern(s)")
    else:
        typer.echo("  (no patterns configured)")


@exclude_app.command("add")
def exclude_add(
    pattern: str = typer.Argument(
        ...,
        help="Pattern to add (e.g. yarn.lock, *.snap, vendor/, docs/*.pdf)",
    ),
) -> None:
    """Add an exclusion pattern."""
    try:
        rule = parse_exclusion_rule(pattern)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    config = load_config_or_exit()
    if pattern in config.exclude:
        typer.echo(f"Pattern already exists: {pattern}")
        raise typer.Exit(0)

    try:
        global_config.update_config(exclude=config.exclude + [pattern])
    except GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Added exclusion pattern: {pattern} ({rule.kind.value})")


@exclude_app.command("remove")
def exclude_remove(
    pattern: str = typer.Argument(..., help="Pattern to remove"),
) -> None:
    """Remove an exclusion pattern."""
    config = load_config_or_exit()
    if pattern not in config.exclude:
        typer.echo(f"Pattern not found: {pattern}", err=True)
        raise typer.Exit(1)

    try:
        global_config.update_config(exclude=[p for p in config.exclude if p != pattern])
    except GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Removed exclusion pattern: {pattern}")
