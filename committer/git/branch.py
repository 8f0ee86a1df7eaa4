"""Git branch and commit history utilities.

Contains:
- get_current_branch: Get the current branch name
- get_recent_commits: Get the last n commit subjects
- create_and_switch_branch: Create a branch and check it out
- branch_exists: Check whether a local or remote-tracking ref exists
- detect_base_branch: Guess the branch a pull request should target
- get_commits_since: Commit subjects on HEAD that are not on a base branch
- has_upstream / push_branch: Upstream tracking for pull requests
"""

from typing import Optional

from committer.git.runner import _run_git_command
from committer.git.exceptions import GitError

# Tried in order when origin/HEAD is not set
BASE_BRANCH_CANDIDATES = ["main", "master", "develop"]


def get_current_branch() -> str:
    """Get the current branch name.

    Returns:
        The current branch name, or 'HEAD' if in detached state.
    """
    branch = _run_git_command(["branch", "--show-current"])
    if not branch:
        # Detached HEAD state
        return "HEAD"
    return branch


def get_recent_commits(n: int = 5) -> list[str]:
    """Get the last n commit subjects.

    Args:
        n: Number of commits to retrieve.

    Returns:
        List of commit subject lines.
    """
    try:
        output = _run_git_command(["log", f"-n{n}", "--pretty=%s"])
        if not output:
            return []
        return output.split("\n")
    except GitError:
        # No commits yet in the repo
        return []


def create_and_switch_branch(name: str) -> None:
    """Create a new branch at HEAD and check it out.

    Args:
        name: The new branch name.

    Raises:
        GitError: If the branch exists already or the name is invalid.
    """
    _run_git_command(["checkout", "-b", name])


def branch_exists(ref: str) -> bool:
    """Check whether a ref (branch or remote-tracking branch) resolves."""
    try:
        _run_git_command(["rev-parse", "--verify", "--quiet", ref])
        return True
    except GitError:
        return False


def detect_base_branch() -> str:
    """Guess the branch a pull request from HEAD should target.

    Uses origin's default branch when known, otherwise the first existing
    candidate from BASE_BRANCH_CANDIDATES.

    Returns:
        The base branch name.

    Raises:
        GitError: If no base branch can be found.
    """
    try:
        ref = _run_git_command(["symbolic-ref", "--quiet", "refs/remotes/origin/HEAD"])
        if ref.startswith("refs/remotes/origin/"):
            return ref[len("refs/remotes/origin/"):]
    except GitError:
        pass

    for candidate in BASE_BRANCH_CANDIDATES:
        if branch_exists(candidate) or branch_exists(f"origin/{candidate}"):
            return candidate

    raise GitError(
        "Could not detect a base branch. Pass one explicitly with --base."
    )


def get_commits_since(base: str) -> list[str]:
    """Get subjects of commits on HEAD that are not on base, oldest first.

    Args:
        base: The base branch name.

    Returns:
        List of commit subject lines.

    Raises:
        GitError: If base does not exist.
    """
    output = _run_git_command(["log", "--reverse", "--pretty=%s", f"{base}..HEAD"])
    if not output:
        return []
    return output.split("\n")


def has_upstream(branch: Optional[str] = None) -> bool:
    """Check whether a branch has an upstream tracking branch."""
    ref = f"{branch}@{{upstream}}" if branch else "@{upstream}"
    try:
        _run_git_command(["rev-parse", "--abbrev-ref", "--symbolic-full-name", ref])
        return True
    except GitError:
        return False


def push_branch(branch: str, remote: str = "origin") -> None:
    """Push a branch and set its upstream.

    Raises:
        GitError: If the push fails.
    """
    _run_git_command(["push", "--set-upstream", remote, branch])
