"""Shared utility functions for CLI commands."""

import sys
from typing import Optional

import typer
from loguru import logger

from committer import global_config
from committer.config import CommitterConfig
from committer.global_config import GlobalConfigError
from committer.llm import StreamingClient

LOG_FORMAT = "<level>{level: <8}</level> | {message}"


def setup_logging(verbose: bool) -> None:
    """Route loguru to stderr.

    Verbose runs report excluded, reordered and truncated files (INFO);
    otherwise only warnings and errors are shown.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level="INFO" if verbose else "WARNING",
        colorize=True,
    )


def load_config_or_exit() -> CommitterConfig:
    """Load the user configuration, exiting with status 1 when it is invalid."""
    try:
        return global_config.load_config()
    except GlobalConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(1)


def require_api_key() -> str:
    """Return the OpenRouter API key or exit with setup instructions."""
    api_key = global_config.get_api_key()
    if not api_key:
        typer.echo("✗ No API key found", err=True)
        typer.echo("  → Set the OPENROUTER_API_KEY environment variable", err=True)
        typer.echo("  → or run 'committer config set-key'", err=True)
        raise typer.Exit(1)
    return api_key


def make_client(api_key: str, config: CommitterConfig) -> StreamingClient:
    return StreamingClient(api_key, idle_timeout=config.idle_timeout)


def stream_to_stdout(text: str) -> None:
    """Live sink: print a delta as soon as it arrives."""
    sys.stdout.write(text)
    sys.stdout.flush()


def show_credential_help() -> None:
    typer.echo("  → Check OPENROUTER_API_KEY or run 'committer config set-key'", err=True)


def effective_verbose(flag: bool, config: CommitterConfig) -> bool:
    return flag or config.verbose


def effective_model(override: Optional[str], config: CommitterConfig) -> str:
    return override or config.model
