"""Diff processing pipeline for committer.

This package turns raw `git diff` output into the text sent to the LLM:
- models: RawDiff, FileSegment, Hunk, ChangeKind, EmptyDiff, DiffBudget, TruncatedDiff
- parser: parse_unified_diff
- filters: ExclusionRule, parse_exclusion_rules, filter_diff, DEFAULT_EXCLUDE_PATTERNS
- ordering: FilePriority, prioritize_files
- truncate: truncate_diff
"""

from committer.diff.models import (
    DEFAULT_MAX_DIFF_BYTES,
    ChangeKind,
    DiffBudget,
    EmptyDiff,
    FileSegment,
    Hunk,
    RawDiff,
    TruncatedDiff,
    byte_len,
)
from committer.diff.parser import parse_unified_diff
from committer.diff.filters import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_EXCLUSION_RULES,
    ExclusionRule,
    RuleKind,
    filter_diff,
    parse_exclusion_rule,
    parse_exclusion_rules,
)
from committer.diff.ordering import FilePriority, prioritize_files
from committer.diff.truncate import truncate_diff


__all__ = [
    # Models
    "DEFAULT_MAX_DIFF_BYTES",
    "ChangeKind",
    "DiffBudget",
    "EmptyDiff",
    "FileSegment",
    "Hunk",
    "RawDiff",
    "TruncatedDiff",
    "byte_len",
    # Parser
    "parse_unified_diff",
    # Filters
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_EXCLUSION_RULES",
    "ExclusionRule",
    "RuleKind",
    "filter_diff",
    "parse_exclusion_rule",
    "parse_exclusion_rules",
    # Ordering
    "FilePriority",
    "prioritize_files",
    # Truncation
    "truncate_diff",
]
