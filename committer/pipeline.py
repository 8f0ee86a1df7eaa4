"""Generation pipeline.

Wires filter -> file priority -> truncation -> request -> streaming client
-> assembler. Configuration and the logger are passed in explicitly.

Contains:
- Outcome / GenerationResult: How a generation ended and what it produced
- prepare_diff: Filter, order and budget a raw diff
- stream_message: Drive a StreamingClient into a ResponseAssembler
- generate_commit_message: Full commit message generation
- generate_pr_description: Full pull request description generation
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Union

from loguru import logger

from committer.config import CommitterConfig
from committer.diff import (
    DiffBudget,
    EmptyDiff,
    FilePriority,
    RawDiff,
    TruncatedDiff,
    filter_diff,
    prioritize_files,
    truncate_diff,
)
from committer.llm.assembler import AssembledMessage, ResponseAssembler
from committer.llm.exceptions import (
    ProviderStreamError,
    StreamCancelledError,
    StreamInterruptedError,
)
from committer.llm.frames import EventKind
from committer.llm.request import PromptRequest, build_commit_request, build_pr_request

if TYPE_CHECKING:
    from loguru import Logger

    from committer.llm.stream import StreamingClient


TextSink = Callable[[str], None]


class Outcome(Enum):
    """How a generation ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    INTERRUPTED = "interrupted"


@dataclass
class GenerationResult:
    """Outcome of one streamed generation.

    Attributes:
        outcome: COMPLETED, CANCELLED or INTERRUPTED.
        message: The assembled message; partial unless COMPLETED.
        error: The exception that ended the stream early, if any.
        diff: The budgeted diff the request was built from.
    """

    outcome: Outcome
    message: AssembledMessage
    error: Optional[StreamInterruptedError] = None
    diff: Optional[TruncatedDiff] = None

    @property
    def completed(self) -> bool:
        return self.outcome is Outcome.COMPLETED


def prepare_diff(
    diff: Union[RawDiff, EmptyDiff],
    config: CommitterConfig,
    repo_root: Optional[Path] = None,
    log: "Logger" = logger,
) -> Union[TruncatedDiff, EmptyDiff]:
    """Filter, order and budget a diff.

    Args:
        diff: Output of get_diff / get_branch_diff.
        config: Supplies exclusion patterns, file priority and budget.
        repo_root: Repository root, required for recency ordering.
        log: Logger receiving exclusion and truncation reports.

    Returns:
        The TruncatedDiff, or EmptyDiff when nothing is left to describe.
    """
    if isinstance(diff, EmptyDiff):
        return diff

    filtered = filter_diff(diff, config.exclusion_rules(), log=log)
    if isinstance(filtered, EmptyDiff):
        return filtered

    ordered = prioritize_files(filtered, config.file_priority, repo_root)
    if config.file_priority is not FilePriority.DIFF_ORDER:
        log.info("File priority {}: {}", config.file_priority.value, ", ".join(ordered.paths))

    return truncate_diff(ordered, DiffBudget(max_bytes=config.max_diff_bytes), log=log)


def stream_message(
    client: "StreamingClient",
    request: PromptRequest,
    sink: Optional[TextSink] = None,
    allowed_types: Optional[list[str]] = None,
    log: "Logger" = logger,
) -> GenerationResult:
    """Stream one response, forwarding each delta to the sink as it arrives.

    The next network read only happens after the sink has returned, so a
    slow sink slows the stream down instead of losing text.

    Args:
        client: The streaming client.
        request: The request to send.
        sink: Called with every text delta, in order.
        allowed_types: Commit types accepted as conformant.
        log: Logger for diagnostics.

    Returns:
        COMPLETED with the full message; INTERRUPTED (network failure,
        idle timeout or provider error frame) or CANCELLED (Ctrl-C) with
        the partial message and the ending error.

    Raises:
        ProviderError: If the request is rejected when opened.
    """
    assembler = ResponseAssembler(allowed_types)
    events = client.events(request)

    try:
        for event in events:
            if event.kind is EventKind.ERROR:
                raise ProviderStreamError(f"Provider error: {event.text}", assembler.text)
            assembler.feed(event)
            if event.kind is EventKind.TEXT and sink is not None:
                sink(event.text)
    except StreamInterruptedError as e:
        log.warning("Stream interrupted: {}", e)
        return GenerationResult(Outcome.INTERRUPTED, assembler.finish(complete=False), error=e)
    except KeyboardInterrupt:
        events.close()
        log.warning("Generation cancelled after {} characters", len(assembler.text))
        error = StreamCancelledError("Cancelled by user", assembler.text)
        return GenerationResult(Outcome.CANCELLED, assembler.finish(complete=False), error=error)
    finally:
        events.close()

    message = assembler.finish()
    if not message.is_empty and not message.conformant:
        log.warning("Generated title is not a conventional commit title: {}", message.title)
    return GenerationResult(Outcome.COMPLETED, message)


def generate_commit_message(
    diff: Union[RawDiff, EmptyDiff],
    config: CommitterConfig,
    client: "StreamingClient",
    model: Optional[str] = None,
    sink: Optional[TextSink] = None,
    repo_root: Optional[Path] = None,
    log: "Logger" = logger,
) -> Union[GenerationResult, EmptyDiff]:
    """Generate a commit message for a diff.

    Returns:
        The GenerationResult, or EmptyDiff when nothing is left after
        filtering (no provider call is made).
    """
    prepared = prepare_diff(diff, config, repo_root, log)
    if isinstance(prepared, EmptyDiff):
        return prepared

    request = build_commit_request(prepared, model or config.model)
    result = stream_message(client, request, sink=sink, log=log)
    result.diff = prepared
    return result


def generate_pr_description(
    diff: Union[RawDiff, EmptyDiff],
    commits: list[str],
    branch: str,
    base: str,
    config: CommitterConfig,
    client: "StreamingClient",
    model: Optional[str] = None,
    sink: Optional[TextSink] = None,
    repo_root: Optional[Path] = None,
    log: "Logger" = logger,
) -> Union[GenerationResult, EmptyDiff]:
    """Generate a pull request title and description for a branch diff.

    The message title is the pull request title; its body is the
    description.
    """
    prepared = prepare_diff(diff, config, repo_root, log)
    if isinstance(prepared, EmptyDiff):
        return prepared

    request = build_pr_request(prepared, commits, branch, base, model or config.model)
    result = stream_message(client, request, sink=sink, log=log)
    result.diff = prepared
    return result
