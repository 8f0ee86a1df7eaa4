"""Commit execution.

Contains:
- stage_all_changes: Stage every change in the working tree
- run_git_commit: Create a commit with the given message
"""

from committer.git.runner import _run_git_command


def stage_all_changes() -> None:
    """Stage all changes, including untracked and deleted files.

    Raises:
        GitError: If staging fails.
    """
    _run_git_command(["add", "--all"])


def run_git_commit(message: str) -> str:
    """Commit the staged changes.

    Args:
        message: The full commit message (title, blank line, body).

    Returns:
        git's summary output for the new commit.

    Raises:
        GitError: If the commit fails (e.g. a hook rejects it).
        ValueError: If the message is blank.
    """
    if not message.strip():
        raise ValueError("Commit message cannot be empty")
    return _run_git_command(["commit", "--cleanup=strip", "-m", message.strip()])
