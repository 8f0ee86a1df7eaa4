"""Byte-budget truncation for diffs.

Contains:
- truncate_diff: Pack a diff into a DiffBudget, keeping every file header
- TRUNCATION_MARKER / OMITTED_NOTICE: Annotations for cut and omitted files

Packing is greedy, deterministic and order-preserving. Headers are reserved
first; hunks then fill the budget file by file; the first file that would
overflow is cut at a line boundary and annotated; later files keep only
their header and an omission notice.
"""

from typing import TYPE_CHECKING, Optional

from loguru import logger

from committer.diff.models import DiffBudget, FileSegment, RawDiff, TruncatedDiff, byte_len

if TYPE_CHECKING:
    from loguru import Logger


TRUNCATION_MARKER = "... [truncated: {lines} more lines ({bytes} bytes) of {path} omitted] ...\n"
OMITTED_NOTICE = "... [omitted: all {lines} lines ({bytes} bytes) of changes to {path}, diff budget exhausted] ...\n"


def _truncation_marker(segment: FileSegment, lines: int, n_bytes: int) -> str:
    return TRUNCATION_MARKER.format(lines=lines, bytes=n_bytes, path=segment.path)


def _omitted_notice(segment: FileSegment) -> str:
    return OMITTED_NOTICE.format(lines=segment.body_line_count, bytes=segment.body_bytes, path=segment.path)


def _annotation_reserve(segment: FileSegment) -> int:
    """Upper bound on the bytes any annotation for this segment can take."""
    full_marker = _truncation_marker(segment, segment.body_line_count, segment.body_bytes)
    return max(byte_len(full_marker), byte_len(_omitted_notice(segment)))


def truncate_diff(
    diff: RawDiff,
    budget: Optional[DiffBudget] = None,
    log: "Logger" = logger,
) -> TruncatedDiff:
    """Enforce a byte budget on a diff while keeping every file's header.

    Args:
        diff: The (filtered) diff, already in priority order.
        budget: The byte budget; a fresh default budget when omitted.
        log: Logger receiving truncation reports.

    Returns:
        TruncatedDiff whose text fits the budget, unless the headers alone
        exceed it, in which case only headers are emitted and the overrun is
        reported as the budget's deficit.
    """
    budget = budget or DiffBudget()
    files = list(diff.files)
    original_text = diff.text
    original_bytes = byte_len(original_text)

    if original_bytes <= budget.max_bytes:
        budget.consume(original_bytes)
        return TruncatedDiff(
            text=original_text,
            files=files,
            budget=budget,
            original_bytes=original_bytes,
        )

    header_total = sum(segment.header_bytes for segment in files)
    with_hunks = [segment.path for segment in files if segment.hunks]

    if header_total > budget.max_bytes:
        text = "".join(segment.header_text for segment in files)
        budget.consume(byte_len(text))
        log.warning(
            "File headers alone need {} bytes, over the {} byte diff budget by {}; sending headers only",
            header_total,
            budget.max_bytes,
            budget.deficit,
        )
        return TruncatedDiff(
            text=text,
            files=files,
            budget=budget,
            original_bytes=original_bytes,
            truncated=True,
            omitted_files=with_hunks,
        )

    reserves = [_annotation_reserve(segment) if segment.hunks else 0 for segment in files]
    slack = budget.max_bytes - header_total

    if sum(reserves) > slack:
        text, omitted = _pack_headers_with_notices(files, slack)
        budget.consume(byte_len(text))
        log.warning("Diff budget of {} bytes only fits file headers; all hunks omitted", budget.max_bytes)
        return TruncatedDiff(
            text=text,
            files=files,
            budget=budget,
            original_bytes=original_bytes,
            truncated=True,
            omitted_files=omitted,
        )

    parts: list[str] = []
    cut_files: list[str] = []
    omitted_files: list[str] = []
    remaining = slack - sum(reserves)
    exhausted = False

    for segment, reserve in zip(files, reserves):
        parts.append(segment.header_text)
        if not segment.hunks:
            continue

        # A file emitted in full needs no annotation, so its reserve is released
        if not exhausted and segment.body_bytes <= remaining + reserve:
            parts.append(segment.body_text)
            remaining += reserve - segment.body_bytes
            continue

        if exhausted:
            notice = _omitted_notice(segment)
            parts.append(notice)
            omitted_files.append(segment.path)
            remaining += reserve - byte_len(notice)
            continue

        exhausted = True
        kept: list[str] = []
        kept_bytes = 0
        for line in segment.body_lines:
            size = byte_len(line)
            if kept_bytes + size > remaining:
                break
            kept.append(line)
            kept_bytes += size

        if kept:
            annotation = _truncation_marker(
                segment,
                segment.body_line_count - len(kept),
                segment.body_bytes - kept_bytes,
            )
            cut_files.append(segment.path)
        else:
            annotation = _omitted_notice(segment)
            omitted_files.append(segment.path)

        parts.extend(kept)
        parts.append(annotation)
        remaining += reserve - kept_bytes - byte_len(annotation)

    text = "".join(parts)
    budget.consume(byte_len(text))

    log.info(
        "Diff truncated from {} to {} bytes (budget {})",
        original_bytes,
        budget.consumed,
        budget.max_bytes,
    )
    for path in cut_files:
        log.info("Truncated: {}", path)
    for path in omitted_files:
        log.info("Hunks omitted: {}", path)

    return TruncatedDiff(
        text=text,
        files=files,
        budget=budget,
        original_bytes=original_bytes,
        truncated=True,
        cut_files=cut_files,
        omitted_files=omitted_files,
    )


def _pack_headers_with_notices(files: list[FileSegment], slack: int) -> tuple[str, list[str]]:
    """Emit every header, adding omission notices while they still fit."""
    parts: list[str] = []
    omitted: list[str] = []
    for segment in files:
        parts.append(segment.header_text)
        if not segment.hunks:
            continue
        omitted.append(segment.path)
        notice = _omitted_notice(segment)
        if byte_len(notice) <= slack:
            parts.append(notice)
            slack -= byte_len(notice)
    return "".join(parts), omitted
