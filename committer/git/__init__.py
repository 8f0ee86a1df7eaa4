"""Git access for committer.

This package provides modular git access with:
- exceptions: GitError, NotARepositoryError
- runner: _run_git_command, get_repo_root, has_head
- diff: DiffScope, get_diff, get_branch_diff
- status: UncommittedChanges, get_status, has_changes, get_uncommitted_changes
- branch: get_current_branch, get_recent_commits, create_and_switch_branch,
          branch_exists, detect_base_branch, get_commits_since, has_upstream, push_branch
- commit: stage_all_changes, run_git_commit
"""

# Exceptions
from committer.git.exceptions import (
    GitError,
    NotARepositoryError,
)

# Runner utilities
from committer.git.runner import (
    _run_git_command,
    get_repo_root,
    has_head,
)

# Diff retrieval
from committer.git.diff import (
    DiffScope,
    get_diff,
    get_branch_diff,
)

# Status utilities
from committer.git.status import (
    UncommittedChanges,
    get_status,
    has_changes,
    get_uncommitted_changes,
)

# Branch utilities
from committer.git.branch import (
    get_current_branch,
    get_recent_commits,
    create_and_switch_branch,
    branch_exists,
    detect_base_branch,
    get_commits_since,
    has_upstream,
    push_branch,
)

# Commit execution
from committer.git.commit import (
    stage_all_changes,
    run_git_commit,
)


__all__ = [
    # Exceptions
    "GitError",
    "NotARepositoryError",
    # Runner
    "_run_git_command",
    "get_repo_root",
    "has_head",
    # Diff
    "DiffScope",
    "get_diff",
    "get_branch_diff",
    # Status
    "UncommittedChanges",
    "get_status",
    "has_changes",
    "get_uncommitted_changes",
    # Branch
    "get_current_branch",
    "get_recent_commits",
    "create_and_switch_branch",
    "branch_exists",
    "detect_base_branch",
    "get_commits_since",
    "has_upstream",
    "push_branch",
    # Commit
    "stage_all_changes",
    "run_git_commit",
]
