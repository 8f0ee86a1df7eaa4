"""Data models for diff processing.

Contains:
- ChangeKind: How a file was changed (added, modified, deleted, renamed)
- Hunk: One contiguous changed region of a file
- FileSegment: The diff of a single file (header lines plus hunks)
- RawDiff: Ordered sequence of file segments
- EmptyDiff: Distinguished "nothing changed" value
- DiffBudget: Byte ceiling with a running consumed-byte counter
- TruncatedDiff: Result of packing a diff into a budget
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Default byte ceiling for diff content sent to the provider
DEFAULT_MAX_DIFF_BYTES = 300_000


def byte_len(text: str) -> int:
    """Return the UTF-8 encoded size of text."""
    return len(text.encode("utf-8"))


class ChangeKind(Enum):
    """Kind of change a file segment describes."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"

    @property
    def status_letter(self) -> str:
        """Single-letter status, as printed by git --name-status."""
        return {
            ChangeKind.ADDED: "A",
            ChangeKind.MODIFIED: "M",
            ChangeKind.DELETED: "D",
            ChangeKind.RENAMED: "R",
        }[self]


@dataclass
class Hunk:
    """One contiguous changed region of a file."""

    header: str  # The @@ ... @@ line
    lines: list[str] = field(default_factory=list)  # Body lines (+, -, context, \ markers)

    @property
    def text_lines(self) -> list[str]:
        """All lines of the hunk, header first, each newline-terminated."""
        return [f"{self.header}\n"] + [f"{line}\n" for line in self.lines]

    @property
    def text(self) -> str:
        return "".join(self.text_lines)

    @property
    def line_count(self) -> int:
        return 1 + len(self.lines)


@dataclass
class FileSegment:
    """Diff for a single file: its header lines and its hunks."""

    path: str
    change_kind: ChangeKind
    header_lines: list[str]  # From 'diff --git' up to the first @@
    hunks: list[Hunk] = field(default_factory=list)
    old_path: Optional[str] = None  # For renames
    is_binary: bool = False

    @property
    def header_text(self) -> str:
        return "".join(f"{line}\n" for line in self.header_lines)

    @property
    def body_lines(self) -> list[str]:
        """Every hunk line in order, each newline-terminated."""
        lines: list[str] = []
        for hunk in self.hunks:
            lines.extend(hunk.text_lines)
        return lines

    @property
    def body_text(self) -> str:
        return "".join(self.body_lines)

    @property
    def text(self) -> str:
        return self.header_text + self.body_text

    @property
    def header_bytes(self) -> int:
        return byte_len(self.header_text)

    @property
    def body_bytes(self) -> int:
        return byte_len(self.body_text)

    @property
    def body_line_count(self) -> int:
        return sum(hunk.line_count for hunk in self.hunks)

    @property
    def paths(self) -> list[str]:
        """The current path, plus the previous path for renames."""
        if self.old_path and self.old_path != self.path:
            return [self.path, self.old_path]
        return [self.path]

    def describe(self) -> str:
        """One-line summary such as 'M src/app.py' or 'R old.py -> new.py'."""
        if self.change_kind is ChangeKind.RENAMED and self.old_path:
            return f"R {self.old_path} -> {self.path}"
        return f"{self.change_kind.status_letter} {self.path}"


@dataclass
class RawDiff:
    """Ordered sequence of per-file diff segments."""

    files: list[FileSegment] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.files)

    @property
    def byte_size(self) -> int:
        return byte_len(self.text)

    @property
    def paths(self) -> list[str]:
        return [segment.path for segment in self.files]

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class EmptyDiff:
    """No changes to describe. Not an error: callers exit cleanly."""

    reason: str = "No changes found."


@dataclass
class DiffBudget:
    """Byte ceiling for diff content with a running consumed-byte counter."""

    max_bytes: int = DEFAULT_MAX_DIFF_BYTES
    consumed: int = 0

    def __post_init__(self) -> None:
        if self.max_bytes <= 0:
            raise ValueError("Diff budget must be a positive number of bytes")

    @property
    def remaining(self) -> int:
        return max(0, self.max_bytes - self.consumed)

    @property
    def deficit(self) -> int:
        """Bytes consumed beyond the ceiling (only headers may cause this)."""
        return max(0, self.consumed - self.max_bytes)

    def consume(self, n: int) -> None:
        self.consumed += n


@dataclass
class TruncatedDiff:
    """A diff packed into a byte budget."""

    text: str
    files: list[FileSegment]
    budget: DiffBudget
    original_bytes: int
    truncated: bool = False
    cut_files: list[str] = field(default_factory=list)
    omitted_files: list[str] = field(default_factory=list)

    @property
    def byte_size(self) -> int:
        return byte_len(self.text)

    @property
    def deficit(self) -> int:
        return self.budget.deficit

    @property
    def file_summary(self) -> str:
        """Newline-separated one-line descriptions of every file."""
        return "\n".join(segment.describe() for segment in self.files)
