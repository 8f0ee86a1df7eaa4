"""Unified diff parser.

Contains functions for parsing `git diff` output into a RawDiff:
- parse_unified_diff: Parse unified diff output into per-file segments
- _parse_file_block: Parse a single file block from the diff
- _parse_hunks: Split the hunk portion of a file block into Hunks
"""

import re
from typing import Optional

from committer.diff.models import ChangeKind, FileSegment, Hunk, RawDiff

# Each side is either C-quoted ("a/we\"ird") or bare (a/plain)
_QUOTED_PATH = r'"(?:[^"\\]|\\.)*"'
_DIFF_GIT_RE = re.compile(
    rf"^diff --git (?P<old>{_QUOTED_PATH}|a/.*?) (?P<new>{_QUOTED_PATH}|b/.*)$"
)

# Single-character escapes git uses in quoted paths; anything else is octal
_C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "t": 0x09,
    "n": 0x0A,
    "v": 0x0B,
    "f": 0x0C,
    "r": 0x0D,
    '"': 0x22,
    "\\": 0x5C,
}
_OCTAL_DIGITS = "01234567"


def parse_unified_diff(diff_output: str) -> RawDiff:
    """Parse unified diff output from 'git diff'.

    Args:
        diff_output: Raw output from git diff

    Returns:
        RawDiff with one FileSegment per file, in the order git printed them.
    """
    files: list[FileSegment] = []

    if not diff_output.strip():
        return RawDiff(files=files)

    # Split by file blocks
    # Each file starts with 'diff --git a/... b/...'
    file_blocks = re.split(r"(?=^diff --git )", diff_output, flags=re.MULTILINE)

    for block in file_blocks:
        if not block.startswith("diff --git"):
            continue

        lines = block.split("\n")
        # The split leaves the newline separating this block from the next
        while lines and lines[-1] == "":
            lines.pop()

        segment = _parse_file_block(lines)
        if segment:
            files.append(segment)

    return RawDiff(files=files)


def _decode_c_escapes(text: str) -> str:
    """Decode the backslash escapes git writes inside a quoted path."""
    out = bytearray()
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            escape = text[i + 1]
            if escape in _C_ESCAPES:
                out.append(_C_ESCAPES[escape])
                i += 2
                continue
            octal = text[i + 1:i + 4]
            if len(octal) == 3 and all(c in _OCTAL_DIGITS for c in octal):
                out.append(int(octal, 8))
                i += 4
                continue
        out.extend(char.encode("utf-8"))
        i += 1
    # Octal escapes are raw bytes of a UTF-8 path
    return out.decode("utf-8", errors="replace")


def _unquote(path: str, strip_prefix: bool = False) -> str:
    """Undo git's path quoting (and optionally drop the a/ or b/ prefix)."""
    path = path.rstrip("\t")
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        path = _decode_c_escapes(path[1:-1])
    if strip_prefix and path.startswith(("a/", "b/")):
        path = path[2:]
    return path


def _parse_file_block(lines: list[str]) -> Optional[FileSegment]:
    """Parse a single file block from the diff.

    Args:
        lines: Lines of the file block

    Returns:
        FileSegment, or None if the block does not open with "diff --git"
    """
    if not lines or not lines[0].startswith("diff --git"):
        return None

    old_path: Optional[str] = None
    new_path: Optional[str] = None

    match = _DIFF_GIT_RE.match(lines[0])
    if match:
        old_path = _unquote(match.group("old"), strip_prefix=True)
        new_path = _unquote(match.group("new"), strip_prefix=True)

    header_lines = []
    hunk_start_idx = len(lines)
    is_binary = False
    is_new_file = False
    is_deleted_file = False
    is_renamed = False

    for i, line in enumerate(lines):
        if line.startswith("@@"):
            hunk_start_idx = i
            break
        header_lines.append(line)

        if line.startswith("new file mode"):
            is_new_file = True
        elif line.startswith("deleted file mode"):
            is_deleted_file = True
        elif line.startswith("rename from "):
            is_renamed = True
            old_path = _unquote(line[len("rename from "):])
        elif line.startswith("rename to "):
            is_renamed = True
            new_path = _unquote(line[len("rename to "):])
        elif line.startswith("--- ") and line != "--- /dev/null":
            old_path = _unquote(line[4:], strip_prefix=True)
        elif line.startswith("+++ ") and line != "+++ /dev/null":
            new_path = _unquote(line[4:], strip_prefix=True)
        elif line.startswith("Binary files") or "GIT binary patch" in line:
            is_binary = True

    if new_path is None and old_path is None:
        # Unreadable header: keep the segment under its raw header text
        new_path = lines[0][len("diff --git "):].strip() or lines[0]

    if is_new_file:
        change_kind = ChangeKind.ADDED
    elif is_deleted_file:
        change_kind = ChangeKind.DELETED
    elif is_renamed:
        change_kind = ChangeKind.RENAMED
    else:
        change_kind = ChangeKind.MODIFIED

    # Deleted files only name the old side in their ---/+++ lines
    path = (old_path or new_path) if is_deleted_file else (new_path or old_path)

    return FileSegment(
        path=path,
        change_kind=change_kind,
        header_lines=header_lines,
        hunks=_parse_hunks(lines[hunk_start_idx:]),
        old_path=old_path if is_renamed else None,
        is_binary=is_binary,
    )


def _parse_hunks(lines: list[str]) -> list[Hunk]:
    """Split the hunk portion of a file block into Hunks.

    Args:
        lines: Lines starting at the first @@ header

    Returns:
        List of Hunk objects in order
    """
    hunks: list[Hunk] = []
    current: Optional[Hunk] = None

    for line in lines:
        if line.startswith("@@"):
            current = Hunk(header=line)
            hunks.append(current)
        elif current is not None:
            current.lines.append(line)

    return hunks
