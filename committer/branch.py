"""Branch naming utilities.

Generated branch names follow the pattern <type>/<scope>-<description>,
e.g. feat/auth-login, fix/ui-button-style, refactor/api-client.

Contains:
- PROTECTED_BRANCHES: Branches that should never receive direct commits
- is_protected_branch: Check a branch name against PROTECTED_BRANCHES
- slugify: Kebab-case slug without filler words
- generate_fallback_branch: Branch name from a commit message, no LLM
- clean_branch_name: Tidy a branch name returned by the LLM
"""

import re
from typing import Optional

PROTECTED_BRANCHES = ["main", "master", "develop", "dev", "staging", "production"]

FILLER_WORDS = {
    "add", "update", "fix", "remove", "delete", "change", "modify",
    "implement", "create", "make", "set", "get", "use", "handle",
    "support", "enable", "disable", "allow", "improve", "enhance",
    "the", "a", "an", "to", "for", "of", "in", "on", "with", "and", "or",
}

_FALLBACK_TITLE_RE = re.compile(r"^([a-z]+)(?:\(([^)]+)\))?!?:\s*(.+)$")


def is_protected_branch(branch: str) -> bool:
    return branch in PROTECTED_BRANCHES


def _keep_slug_chars(text: str) -> str:
    return "".join(c for c in text.lower() if c.isalnum() or c == "-")


def slugify(text: str, max_words: int = 3) -> str:
    """Convert text to a kebab-case slug suitable for branch names.

    Filler words ("add", "the", "for", ...) are dropped unless nothing else
    is left.

    Args:
        text: Free text, typically a commit subject.
        max_words: Maximum number of words kept.

    Returns:
        The slug, e.g. "refresh-token-rotation".
    """
    words = [w for w in text.split() if w.lower() not in FILLER_WORDS][:max_words]
    if not words:
        words = text.split()[:max_words]
    return _keep_slug_chars("-".join(words))


def generate_fallback_branch(commit_message: str) -> str:
    """Generate a branch name from a commit message without the LLM.

    Conventional titles give "<type>/<scope>-<slug>" or "<type>/<slug>";
    anything else gives "feat/<slug>".
    """
    lines = commit_message.strip().split("\n")
    first_line = lines[0].strip() if lines else ""

    match = _FALLBACK_TITLE_RE.match(first_line)
    if match:
        commit_type, scope, description = match.groups()
        desc_slug = slugify(description, 3) or "changes"
        if scope:
            return f"{commit_type}/{_keep_slug_chars(scope.replace(' ', '-'))}-{desc_slug}"
        return f"{commit_type}/{desc_slug}"

    return f"feat/{slugify(first_line, 3) or 'changes'}"


def clean_branch_name(raw: str) -> Optional[str]:
    """Tidy an LLM-suggested branch name.

    Takes the first non-blank line, strips quotes and backticks and
    replaces whitespace with dashes.

    Returns:
        The cleaned name, or None if nothing usable is left.
    """
    for line in raw.strip().split("\n"):
        name = line.strip().strip("`'\"").strip()
        if name and not name.startswith("```"):
            name = re.sub(r"\s+", "-", name)
            return name or None
    return None
