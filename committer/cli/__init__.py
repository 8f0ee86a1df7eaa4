"""CLI entry point for committer.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from committer.cli.config import config_app, exclude_app
from committer.cli.main import main_command
from committer.cli.pr import pr_command

# Main application
app = typer.Typer(
    name="committer",
    help="committer: AI-generated conventional commits and pull requests",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("pr")(pr_command)

# Set the main callback for default behavior
app.callback(invoke_without_command=True)(main_command)


__all__ = [
    "app",
    "config_app",
    "exclude_app",
    "main_command",
    "pr_command",
]
