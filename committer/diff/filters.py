"""Diff exclusion rules and filtering.

Contains:
- RuleKind / ExclusionRule: Path predicates (exact name, suffix, directory, glob)
- DEFAULT_EXCLUDE_PATTERNS: Default patterns for files to exclude from the diff
- parse_exclusion_rule / parse_exclusion_rules: Build rules from pattern strings
- filter_diff: Drop file segments matching any rule
"""

import fnmatch
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Iterable, Union

from loguru import logger

from committer.diff.models import EmptyDiff, FileSegment, RawDiff

if TYPE_CHECKING:
    from loguru import Logger


# Lock files are auto-generated and inflate the diff without adding useful
# context for commit message generation
DEFAULT_LOCK_FILES = [
    "Cargo.lock",
    "package-lock.json",
    "npm-shrinkwrap.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "bun.lockb",
    "poetry.lock",
    "Pipfile.lock",
    "uv.lock",
    "Gemfile.lock",
    "composer.lock",
    "go.sum",
    "flake.lock",
    "mix.lock",
    "pubspec.lock",
    "Podfile.lock",
    "packages.lock.json",
]

DEFAULT_GENERATED_SUFFIXES = [
    "*.min.js",
    "*.min.css",
    "*.map",
]

DEFAULT_BUILD_DIRECTORIES = [
    "target/",
    "node_modules/",
    "dist/",
    "build/",
    ".next/",
    "__pycache__/",
]

DEFAULT_EXCLUDE_PATTERNS = DEFAULT_LOCK_FILES + DEFAULT_GENERATED_SUFFIXES + DEFAULT_BUILD_DIRECTORIES

_GLOB_CHARS = set("*?[")


class RuleKind(Enum):
    """How an exclusion rule matches a path."""

    EXACT = "exact"
    SUFFIX = "suffix"
    DIRECTORY = "directory"
    GLOB = "glob"


@dataclass(frozen=True)
class ExclusionRule:
    """A path-matching predicate used to drop irrelevant diff segments."""

    kind: RuleKind
    value: str

    def matches(self, path: str) -> bool:
        """Check whether a repository-relative path matches this rule.

        Args:
            path: File path as printed by git (forward slashes).

        Returns:
            True if the path should be excluded.
        """
        name = PurePosixPath(path).name

        if self.kind is RuleKind.EXACT:
            return name == self.value or path == self.value
        if self.kind is RuleKind.SUFFIX:
            return path.endswith(self.value)
        if self.kind is RuleKind.DIRECTORY:
            # Matches at any directory boundary: dist/x.js and web/dist/x.js
            return f"/{path}".find(f"/{self.value}") != -1
        return fnmatch.fnmatch(path, self.value) or fnmatch.fnmatch(name, self.value)

    def __str__(self) -> str:
        if self.kind is RuleKind.SUFFIX:
            return f"*{self.value}"
        return self.value


def parse_exclusion_rule(pattern: str) -> ExclusionRule:
    """Build an ExclusionRule from a pattern string.

    - "build/" (trailing slash) is a directory-prefix rule
    - "*.min.js" (leading "*." and no other wildcard) is a suffix rule
    - any other wildcard pattern is a glob rule
    - anything else is an exact file name

    Args:
        pattern: The pattern as written in config.

    Returns:
        The corresponding ExclusionRule.

    Raises:
        ValueError: If the pattern is empty.
    """
    pattern = pattern.strip()
    if not pattern:
        raise ValueError("Exclusion pattern cannot be empty")

    if pattern.endswith("/"):
        return ExclusionRule(RuleKind.DIRECTORY, pattern.lstrip("/"))
    if pattern.startswith("*.") and not _GLOB_CHARS.intersection(pattern[1:]):
        return ExclusionRule(RuleKind.SUFFIX, pattern[1:])
    if _GLOB_CHARS.intersection(pattern):
        return ExclusionRule(RuleKind.GLOB, pattern)
    return ExclusionRule(RuleKind.EXACT, pattern)


def parse_exclusion_rules(patterns: Iterable[str]) -> list[ExclusionRule]:
    """Build rules from pattern strings, skipping blank entries and duplicates."""
    rules: list[ExclusionRule] = []
    for pattern in patterns:
        if not pattern or not pattern.strip():
            continue
        rule = parse_exclusion_rule(pattern)
        if rule not in rules:
            rules.append(rule)
    return rules


DEFAULT_EXCLUSION_RULES = parse_exclusion_rules(DEFAULT_EXCLUDE_PATTERNS)


def segment_is_excluded(segment: FileSegment, rules: Iterable[ExclusionRule]) -> bool:
    """Check whether any of a segment's paths matches any rule."""
    return any(rule.matches(path) for rule in rules for path in segment.paths)


def filter_diff(
    diff: RawDiff,
    rules: Iterable[ExclusionRule] = DEFAULT_EXCLUSION_RULES,
    log: "Logger" = logger,
) -> Union[RawDiff, EmptyDiff]:
    """Drop every file segment matching an exclusion rule.

    Remaining segments keep their relative order. Exclusions are reported
    to the logger only.

    Args:
        diff: The raw diff to filter.
        rules: Exclusion rules to apply.
        log: Logger receiving one INFO record per excluded file.

    Returns:
        The filtered RawDiff, or EmptyDiff if every segment was excluded.
    """
    rules = list(rules)
    kept: list[FileSegment] = []

    for segment in diff.files:
        if segment_is_excluded(segment, rules):
            log.info("Excluded from diff: {}", segment.path)
            continue
        kept.append(segment)

    if diff.files and not kept:
        return EmptyDiff("Only excluded files changed - no code changes to describe.")
    if not kept:
        return EmptyDiff()

    return RawDiff(files=kept)
