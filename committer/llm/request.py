"""Provider request construction.

Contains:
- PromptRequest: Immutable chat completion request
- escape_data: Neutralize data-block delimiters inside repository text
- build_commit_request: Request for a streamed commit message
- build_pr_request: Request for a streamed pull request description

Builders are pure: identical inputs give byte-identical request bodies.
"""

import json
import re
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from committer.diff import TruncatedDiff
from committer.llm.assembler import CONVENTIONAL_TYPES
from committer.llm.prompts import (
    SYSTEM_PROMPT,
    USER_PROMPT_TEMPLATE_COMMIT,
    USER_PROMPT_TEMPLATE_PR,
)

# Opening or closing forms of the data tags, e.g. "</diff>" or "< files >"
_DELIMITER_RE = re.compile(r"<(?=\s*/?\s*(?:diff|files|commits)\b)", re.IGNORECASE)


class PromptRequest(BaseModel):
    """A chat completion request, immutable once built.

    Attributes:
        model: OpenRouter model identifier.
        system: System instructions.
        user: User content holding the delimited repository data.
        stream: Whether the provider should stream the response.
    """

    model_config = ConfigDict(frozen=True)

    model: str
    system: str
    user: str
    stream: bool = True

    @field_validator("model")
    @classmethod
    def model_not_empty(cls, v: str) -> str:
        """Ensure the model identifier is set."""
        if not v.strip():
            raise ValueError("model cannot be empty")
        return v.strip()

    def payload(self) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system},
                {"role": "user", "content": self.user},
            ],
            "stream": self.stream,
        }

    def body(self) -> bytes:
        """Serialize the payload to the exact JSON bytes sent on the wire."""
        return json.dumps(self.payload(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def escape_data(text: str) -> str:
    """Escape data-block delimiters so repository text cannot close its block.

    Only the leading "<" of a <diff>, <files> or <commits> tag (any case,
    opening or closing) is replaced with "&lt;"; all other text is kept.
    """
    return _DELIMITER_RE.sub("&lt;", text)


def _types_list(allowed_types: Iterable[str]) -> str:
    return ", ".join(allowed_types)


def build_commit_request(
    diff: TruncatedDiff,
    model: str,
    allowed_types: Optional[list[str]] = None,
) -> PromptRequest:
    """Build the request for a conventional commit message.

    Args:
        diff: The filtered, budgeted diff.
        model: OpenRouter model identifier.
        allowed_types: Commit types offered to the model.

    Returns:
        The immutable PromptRequest.
    """
    user = USER_PROMPT_TEMPLATE_COMMIT.format(
        types=_types_list(allowed_types or CONVENTIONAL_TYPES),
        files=escape_data(diff.file_summary),
        diff=escape_data(diff.text.rstrip("\n")),
    )
    return PromptRequest(model=model, system=SYSTEM_PROMPT, user=user)


def build_pr_request(
    diff: TruncatedDiff,
    commits: list[str],
    branch: str,
    base: str,
    model: str,
    allowed_types: Optional[list[str]] = None,
) -> PromptRequest:
    """Build the request for a pull request title and description.

    Args:
        diff: The filtered, budgeted diff of the branch against base.
        commits: Commit subjects on the branch, oldest first.
        branch: The branch being proposed.
        base: The branch it targets.
        model: OpenRouter model identifier.
        allowed_types: Commit types offered to the model for the title.

    Returns:
        The immutable PromptRequest.
    """
    commit_lines = "\n".join(f"- {subject}" for subject in commits) or "(none)"
    user = USER_PROMPT_TEMPLATE_PR.format(
        branch=escape_data(branch),
        base=escape_data(base),
        types=_types_list(allowed_types or CONVENTIONAL_TYPES),
        commits=escape_data(commit_lines),
        files=escape_data(diff.file_summary),
        diff=escape_data(diff.text.rstrip("\n")),
    )
    return PromptRequest(model=model, system=SYSTEM_PROMPT, user=user)
