"""LLM access for committer.

This package provides:
- exceptions: LLMError and the provider/stream error taxonomy
- frames: FrameDecoder and StreamEvent for server-sent events
- stream: StreamingClient for streamed chat completions over httpx
- request: PromptRequest and the commit / pull request builders
- assembler: ResponseAssembler and AssembledMessage
- branch: Branch alignment analysis and naming (non-streaming)
"""

from committer.llm.exceptions import (
    AuthError,
    JSONParseError,
    LLMError,
    MissingAPIKeyError,
    NetworkInterruptedError,
    ProviderError,
    ProviderStreamError,
    ProviderUnavailableError,
    RateLimitedError,
    RequestError,
    StreamCancelledError,
    StreamInterruptedError,
)
from committer.llm.frames import DecoderState, EventKind, FrameDecoder, StreamEvent
from committer.llm.assembler import (
    CONVENTIONAL_TYPES,
    AssembledMessage,
    ResponseAssembler,
    assemble_message,
    parse_title,
)
from committer.llm.request import (
    PromptRequest,
    build_commit_request,
    build_pr_request,
    escape_data,
)
from committer.llm.stream import StreamingClient, classify_response


__all__ = [
    # Exceptions
    "AuthError",
    "JSONParseError",
    "LLMError",
    "MissingAPIKeyError",
    "NetworkInterruptedError",
    "ProviderError",
    "ProviderStreamError",
    "ProviderUnavailableError",
    "RateLimitedError",
    "RequestError",
    "StreamCancelledError",
    "StreamInterruptedError",
    # Frames
    "DecoderState",
    "EventKind",
    "FrameDecoder",
    "StreamEvent",
    # Assembly
    "CONVENTIONAL_TYPES",
    "AssembledMessage",
    "ResponseAssembler",
    "assemble_message",
    "parse_title",
    # Requests
    "PromptRequest",
    "build_commit_request",
    "build_pr_request",
    "escape_data",
    # Streaming
    "StreamingClient",
    "classify_response",
]
