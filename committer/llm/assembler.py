"""Response assembly and conventional-commit validation.

Contains:
- CONVENTIONAL_TYPES: Default set of allowed commit types
- AssembledMessage: The final, immutable message
- parse_title: Match a title line against type(scope)!: subject
- assemble_message: Build an AssembledMessage from complete text
- ResponseAssembler: Accumulate stream events into exactly one message
"""

import re
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from committer.llm.frames import EventKind, StreamEvent
from committer.llm.parsing import strip_code_fence

CONVENTIONAL_TYPES = [
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "chore",
    "ci",
    "revert",
]

TITLE_PATTERN = re.compile(
    r"^(?P<type>[a-z]+)(?:\((?P<scope>[^()]+)\))?(?P<breaking>!)?: (?P<subject>\S.*)$"
)


class AssembledMessage(BaseModel):
    """A generated message, frozen once assembled.

    Attributes:
        text: Every text delta concatenated, exactly as received.
        title: First non-blank line (after removing a wrapping code fence).
        body: Everything after the title, trimmed of blank edge lines.
        commit_type: Conventional type, when the title conforms.
        scope: Conventional scope, if present.
        breaking: Whether the title carries the "!" marker.
        subject: Text after "type(scope): ".
        conformant: Whether the title matches the conventional grammar
            with an allowed type.
        complete: False when the stream ended early (cancelled or
            interrupted) and the text is partial.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    title: str = ""
    body: str = ""
    commit_type: Optional[str] = None
    scope: Optional[str] = None
    breaking: bool = False
    subject: Optional[str] = None
    conformant: bool = False
    complete: bool = True

    @property
    def cleaned_text(self) -> str:
        """The text without a wrapping markdown fence or edge whitespace."""
        return strip_code_fence(self.text)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


def parse_title(title: str, allowed_types: Iterable[str] = CONVENTIONAL_TYPES) -> Optional[dict]:
    """Parse a conventional commit title.

    Args:
        title: A single line.
        allowed_types: Accepted values for the type.

    Returns:
        Dict with type, scope, breaking and subject, or None when the line
        does not conform.
    """
    match = TITLE_PATTERN.match(title.strip())
    if not match or match.group("type") not in set(allowed_types):
        return None
    return {
        "commit_type": match.group("type"),
        "scope": match.group("scope").strip() if match.group("scope") else None,
        "breaking": bool(match.group("breaking")),
        "subject": match.group("subject").strip(),
    }


def assemble_message(
    text: str,
    allowed_types: Iterable[str] = CONVENTIONAL_TYPES,
    complete: bool = True,
) -> AssembledMessage:
    """Derive title, body and conformance from the full response text.

    Non-conforming text is never altered or dropped; it is only flagged.
    """
    lines = strip_code_fence(text).split("\n")

    title_index = next((i for i, line in enumerate(lines) if line.strip()), None)
    if title_index is None:
        return AssembledMessage(text=text, complete=complete)

    title = lines[title_index].strip()
    body = "\n".join(lines[title_index + 1:]).strip("\n").rstrip()
    parts = parse_title(title, allowed_types)

    return AssembledMessage(
        text=text,
        title=title,
        body=body,
        conformant=parts is not None,
        complete=complete,
        **(parts or {}),
    )


class ResponseAssembler:
    """Accumulates streamed text and produces one AssembledMessage.

    Args:
        allowed_types: Commit types accepted as conformant.
    """

    def __init__(self, allowed_types: Optional[Iterable[str]] = None):
        self.allowed_types = list(allowed_types or CONVENTIONAL_TYPES)
        self._parts: list[str] = []
        self._message: Optional[AssembledMessage] = None

    def feed(self, event: StreamEvent) -> None:
        """Append a text delta; terminal events carry no text and are skipped.

        Raises:
            RuntimeError: If the message was already produced.
        """
        if self._message is not None:
            raise RuntimeError("ResponseAssembler already finished")
        if event.kind is EventKind.TEXT:
            self._parts.append(event.text)

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def message(self) -> Optional[AssembledMessage]:
        return self._message

    def finish(self, complete: bool = True) -> AssembledMessage:
        """Produce the message. Can only be called once.

        Args:
            complete: False when the stream did not reach its terminal event.

        Raises:
            RuntimeError: On a second call.
        """
        if self._message is not None:
            raise RuntimeError("ResponseAssembler already finished")
        self._message = assemble_message(self.text, self.allowed_types, complete)
        return self._message
