"""Git diff retrieval.

Contains:
- DiffScope: Which changes to describe (staged only, or all tracked changes)
- get_diff: Get the working-copy diff for a scope as a RawDiff
- get_branch_diff: Get the diff between a base branch and HEAD
"""

from enum import Enum
from typing import TYPE_CHECKING, Union

from loguru import logger

from committer.diff import EmptyDiff, RawDiff, parse_unified_diff
from committer.git.runner import _run_git_command, get_repo_root, has_head

if TYPE_CHECKING:
    from loguru import Logger


# Plain patch text with rename detection, regardless of user diff config
DIFF_FLAGS = ["--no-color", "--no-ext-diff", "-M"]


class DiffScope(Enum):
    """Which changes the diff covers."""

    STAGED = "staged"
    ALL = "all"


def _diff_args(scope: DiffScope) -> list[str]:
    if scope is DiffScope.STAGED:
        return ["diff", "--cached"] + DIFF_FLAGS
    if has_head():
        return ["diff", "HEAD"] + DIFF_FLAGS
    # No commits yet: everything tracked is in the index
    return ["diff", "--cached"] + DIFF_FLAGS


def get_diff(
    scope: DiffScope = DiffScope.STAGED,
    log: "Logger" = logger,
) -> Union[RawDiff, EmptyDiff]:
    """Get the diff of the relevant changes in the current repository.

    Args:
        scope: STAGED for the index only, ALL for every tracked change.
        log: Logger for diagnostics.

    Returns:
        The parsed RawDiff, or EmptyDiff when no file changed.

    Raises:
        NotARepositoryError: If not in a git repository.
        GitError: If the diff command fails.
    """
    get_repo_root()

    output = _run_git_command(["-c", "core.quotepath=false"] + _diff_args(scope), strip=False)
    diff = parse_unified_diff(output)

    if not diff.files:
        if scope is DiffScope.STAGED:
            return EmptyDiff("No staged changes found.")
        return EmptyDiff("No changes found.")

    log.info("Collected {} changed file(s) ({} bytes)", len(diff), diff.byte_size)
    return diff


def get_branch_diff(base: str, log: "Logger" = logger) -> Union[RawDiff, EmptyDiff]:
    """Get the diff of HEAD against the merge base with a base branch.

    Args:
        base: The base branch name.
        log: Logger for diagnostics.

    Returns:
        The parsed RawDiff, or EmptyDiff when the branch has no changes.

    Raises:
        NotARepositoryError: If not in a git repository.
        GitError: If the diff command fails (e.g. unknown base).
    """
    get_repo_root()

    output = _run_git_command(
        ["-c", "core.quotepath=false", "diff", f"{base}...HEAD"] + DIFF_FLAGS,
        strip=False,
    )
    diff = parse_unified_diff(output)

    if not diff.files:
        return EmptyDiff(f"No changes between {base} and HEAD.")

    log.info("Collected {} changed file(s) against {}", len(diff), base)
    return diff
