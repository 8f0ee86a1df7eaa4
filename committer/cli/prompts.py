"""Interactive prompts for commit and pull request workflows.

Every prompt accepts a single key or the full word (y/yes, n/no, e/edit).
Editing opens $EDITOR through typer.edit.

Contains:
- prompt_commit: Commit, cancel, edit or create a branch first
- prompt_branch_action: Create a suggested branch or stay
- prompt_pr: Create, cancel or edit a pull request
- prompt_uncommitted_changes: Commit first, skip or quit before a pull request
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import typer

from committer.git import UncommittedChanges


class CommitChoice(Enum):
    COMMIT = "commit"
    CANCEL = "cancel"
    CREATE_BRANCH = "branch"


@dataclass
class CommitAction:
    """User's choice after reviewing a commit message."""

    choice: CommitChoice
    message: str = ""


@dataclass
class BranchAction:
    """User's choice about a suggested branch. name is None to stay."""

    name: Optional[str] = None

    @property
    def create(self) -> bool:
        return self.name is not None


@dataclass
class PrAction:
    """User's choice after reviewing a pull request. create=False cancels."""

    create: bool
    title: str = ""
    body: str = ""


class UncommittedAction(Enum):
    COMMIT = "commit"
    SKIP = "skip"
    QUIT = "quit"


def _ask() -> str:
    return typer.prompt("Choice", default="", show_default=False).strip().lower()


def _edit(text: str, extension: str) -> str:
    edited = typer.edit(text, extension=extension)
    # None when the editor was closed without saving
    return edited.strip() if edited is not None else text


def split_title_body(text: str) -> tuple[str, str]:
    """Split edited text into a title line and a body."""
    lines = text.strip().split("\n")
    title = lines[0].strip() if lines else ""
    body = "\n".join(lines[1:]).strip()
    return title, body


def prompt_commit(message: str, show_branch_option: bool = True) -> CommitAction:
    """Ask whether to commit a message.

    Options: [y] commit, [n] cancel, [e] edit in $EDITOR, and when
    show_branch_option is set, [b] create a branch first.
    """
    current = message

    def print_menu() -> None:
        typer.echo()
        typer.echo("  [y] Commit")
        typer.echo("  [n] Cancel")
        typer.echo("  [e] Edit in $EDITOR")
        if show_branch_option:
            typer.echo("  [b] Create branch first")
        typer.echo()

    invalid = "Please enter y, n, e, or b" if show_branch_option else "Please enter y, n, or e"

    print_menu()
    while True:
        choice = _ask()
        if choice in ("y", "yes"):
            return CommitAction(CommitChoice.COMMIT, current)
        if choice in ("n", "no"):
            return CommitAction(CommitChoice.CANCEL, current)
        if choice in ("e", "edit"):
            current = _edit(current, ".txt")
            typer.echo()
            typer.echo(current)
            print_menu()
        elif choice in ("b", "branch") and show_branch_option:
            return CommitAction(CommitChoice.CREATE_BRANCH, current)
        else:
            typer.echo(f"  → {invalid}")


def prompt_branch_action(
    current: str,
    suggested: str,
    reason: str = "",
    show_mismatch_header: bool = True,
) -> BranchAction:
    """Ask whether to create a suggested branch.

    Options: [y] create, [n] stay on the current branch, [e] edit the
    name (then the menu is shown again).
    """
    if show_mismatch_header:
        typer.echo()
        typer.echo("⚠ Branch mismatch detected")
        typer.echo(f"  Current:   {current}")
        typer.echo(f"  Suggested: {suggested}")
        if reason:
            typer.echo(f"  Reason:    {reason}")
        typer.echo()

    suggestion = suggested

    def print_menu() -> None:
        typer.echo(f"  [y] Create branch '{suggestion}'")
        typer.echo(f"  [n] Stay on '{current}'")
        typer.echo("  [e] Edit branch name")
        typer.echo()

    print_menu()
    while True:
        choice = _ask()
        if choice in ("y", "yes"):
            return BranchAction(suggestion)
        if choice in ("n", "no"):
            return BranchAction(None)
        if choice in ("e", "edit"):
            suggestion = typer.prompt("Branch name", default=suggestion).strip() or suggestion
            typer.echo()
            print_menu()
        else:
            typer.echo("  → Please enter y, n, or e")


def prompt_pr(title: str, body: str) -> PrAction:
    """Ask whether to create a pull request.

    Options: [y] create, [n] cancel, [e] edit title and body together in
    $EDITOR (first line is the title).
    """
    current_title, current_body = title, body

    def print_menu() -> None:
        typer.echo()
        typer.echo("  [y] Create PR")
        typer.echo("  [n] Cancel")
        typer.echo("  [e] Edit in $EDITOR")
        typer.echo()

    print_menu()
    while True:
        choice = _ask()
        if choice in ("y", "yes"):
            return PrAction(True, current_title, current_body)
        if choice in ("n", "no"):
            return PrAction(False, current_title, current_body)
        if choice in ("e", "edit"):
            edited = _edit(f"{current_title}\n\n{current_body}", ".md")
            current_title, current_body = split_title_body(edited)
            typer.echo()
            typer.echo(current_title)
            typer.echo()
            typer.echo(current_body)
            print_menu()
        else:
            typer.echo("  → Please enter y, n, or e")


def prompt_uncommitted_changes(changes: UncommittedChanges) -> UncommittedAction:
    """Warn that uncommitted changes won't be in the pull request and ask what to do."""
    typer.echo()
    typer.echo("⚠ Uncommitted changes won't be included in this PR")
    typer.echo()

    if changes.staged:
        typer.echo("Staged:")
        for path in changes.staged:
            typer.echo(f"  {path}")
        typer.echo()

    if changes.unstaged:
        typer.echo("Unstaged:")
        for path in changes.unstaged:
            typer.echo(f"  {path}")
        typer.echo()

    typer.echo("  [c] Commit changes first")
    typer.echo("  [s] Skip and continue")
    typer.echo("  [q] Quit")
    typer.echo()

    while True:
        choice = _ask()
        if choice in ("c", "commit"):
            return UncommittedAction.COMMIT
        if choice in ("s", "skip"):
            return UncommittedAction.SKIP
        if choice in ("q", "quit"):
            return UncommittedAction.QUIT
        typer.echo("  → Please enter c, s, or q")
