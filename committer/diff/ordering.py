"""File priority policies applied before truncation.

The truncator packs files in the order it receives them, so whichever policy
runs here decides which files keep their hunks when the budget runs out.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from committer.diff.models import ChangeKind, FileSegment, RawDiff


class FilePriority(Enum):
    """Order in which files compete for the diff budget."""

    DIFF_ORDER = "diff"  # As printed by git (path order)
    RECENT_FIRST = "recent"  # Most recently modified working-tree files first


def _mtime(segment: FileSegment, repo_root: Path) -> Optional[float]:
    if segment.change_kind is ChangeKind.DELETED:
        return None
    try:
        return (repo_root / segment.path).stat().st_mtime
    except OSError:
        return None


def prioritize_files(
    diff: RawDiff,
    priority: FilePriority = FilePriority.DIFF_ORDER,
    repo_root: Optional[Path] = None,
) -> RawDiff:
    """Resequence the files of a diff according to a priority policy.

    Args:
        diff: The diff to reorder.
        priority: The policy to apply.
        repo_root: Working-tree root, required for RECENT_FIRST.

    Returns:
        A new RawDiff. DIFF_ORDER returns the files unchanged. RECENT_FIRST
        sorts by modification time, newest first; files without a
        modification time (deleted, missing) go last. Ties keep git order.
    """
    if priority is FilePriority.DIFF_ORDER:
        return RawDiff(files=list(diff.files))

    if repo_root is None:
        raise ValueError("repo_root is required for recency-based file priority")

    stamped = [(_mtime(segment, repo_root), index, segment) for index, segment in enumerate(diff.files)]
    with_time = sorted((s for s in stamped if s[0] is not None), key=lambda s: (-s[0], s[1]))
    without_time = [s for s in stamped if s[0] is None]

    return RawDiff(files=[segment for _, _, segment in with_time + without_time])
