"""Git status utilities.

Contains:
- UncommittedChanges: Staged and unstaged file lists
- get_status: Get git status output in porcelain format
- has_changes: Check whether the working tree has any changes at all
- get_uncommitted_changes: Split porcelain status into staged and unstaged files
"""

from dataclasses import dataclass, field

from committer.git.runner import _run_git_command


@dataclass
class UncommittedChanges:
    """Files with uncommitted changes, split by index state."""

    staged: list[str] = field(default_factory=list)
    unstaged: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.staged and not self.unstaged


def get_status() -> str:
    """Get git status output in porcelain format.

    Returns:
        The git status output.
    """
    return _run_git_command(["status", "--porcelain=v1"], strip=False)


def has_changes() -> bool:
    """Check whether there are staged, unstaged or untracked changes."""
    return bool(get_status().strip())


def get_uncommitted_changes() -> UncommittedChanges:
    """Get staged and unstaged (including untracked) files.

    The porcelain format uses two columns:
    - First column: staged status (index)
    - Second column: worktree status

    A file can appear in both lists when it has staged and further
    unstaged modifications.

    Returns:
        UncommittedChanges with both lists in git status order.
    """
    changes = UncommittedChanges()

    for line in get_status().split("\n"):
        if len(line) < 4:
            continue

        index_col, worktree_col = line[0], line[1]
        filename = line[3:]

        if index_col == "?":
            changes.unstaged.append(filename)
            continue
        if index_col != " ":
            changes.staged.append(filename)
        if worktree_col != " ":
            changes.unstaged.append(filename)

    return changes
