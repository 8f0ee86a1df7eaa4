"""Git command runner and repository utilities.

Contains:
- _run_git_command: Run a git command and return its output
- get_repo_root: Get the root directory of the current git repository
- has_head: Check whether the repository has at least one commit
"""

import subprocess
from pathlib import Path

from committer.git.exceptions import GitError, NotARepositoryError


def _run_git_command(args: list[str], strip: bool = True) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        strip: Strip surrounding whitespace from the output. Porcelain
            formats need their leading columns, so callers parsing them pass False.

    Returns:
        The stdout of the git command. Bytes that are not valid UTF-8
        (file content in other encodings) become U+FFFD.

    Raises:
        GitError: If the command fails.
    """
    try:
        result = subprocess.run(
            ["git"] + args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
        return result.stdout.strip() if strip else result.stdout
    except subprocess.CalledProcessError as e:
        raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr.strip()}")
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH.")


def get_repo_root() -> Path:
    """Get the root directory of the current git repository.

    Returns:
        Path to the repository root.

    Raises:
        NotARepositoryError: If not in a git repository.
    """
    try:
        root = _run_git_command(["rev-parse", "--show-toplevel"])
        return Path(root)
    except GitError:
        raise NotARepositoryError(
            "Not in a git repository. Please run this command from within a git repo."
        )


def has_head() -> bool:
    """Check whether HEAD points at a commit (false in a fresh repository)."""
    try:
        _run_git_command(["rev-parse", "--verify", "--quiet", "HEAD"])
        return True
    except GitError:
        return False
