"""Server-sent event frame decoding for streaming chat completions.

Contains:
- EventKind / StreamEvent: Decoded events handed to the consumer
- DecoderState: States of the frame buffer
- FrameDecoder: Incremental decoder from raw network reads to StreamEvents

The decoder only ever emits an event once a full frame (terminated by a
blank line) is buffered, so a frame split across any number of reads,
including in the middle of a multi-byte UTF-8 sequence, decodes exactly
once and in arrival order.
"""

import json
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

# End-of-stream sentinel, compared literally and never JSON-decoded
DONE_SENTINEL = "[DONE]"

FRAME_BOUNDARY = b"\n\n"


def _normalize_newlines(data: bytes) -> bytes:
    """Map the CRLF and bare CR line endings SSE allows onto LF."""
    return data.replace(b"\r\n", b"\n").replace(b"\r", b"\n")


class EventKind(Enum):
    """Kinds of stream events."""

    TEXT = "text"
    FINISH = "finish"
    ERROR = "error"


@dataclass(frozen=True)
class StreamEvent:
    """One decoded event: a text delta, the terminal marker, or an error."""

    kind: EventKind
    text: str = ""
    finish_reason: Optional[str] = None

    @classmethod
    def delta(cls, text: str) -> "StreamEvent":
        return cls(EventKind.TEXT, text=text)

    @classmethod
    def finish(cls, finish_reason: Optional[str] = None) -> "StreamEvent":
        return cls(EventKind.FINISH, finish_reason=finish_reason)

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls(EventKind.ERROR, text=message)

    @property
    def is_terminal(self) -> bool:
        return self.kind is not EventKind.TEXT


class DecoderState(Enum):
    """Frame buffer states: IDLE -> ACCUMULATING -> FRAME_READY -> IDLE."""

    IDLE = "idle"
    ACCUMULATING = "accumulating"
    FRAME_READY = "frame_ready"


class FrameDecoder:
    """Incremental server-sent-events decoder.

    Usage:
        decoder = FrameDecoder()
        for chunk in response.iter_bytes():
            for event in decoder.decode(chunk):
                ...
        for event in decoder.flush():
            ...

    Attributes:
        state: Current DecoderState.
        finished: True once the terminal sentinel was decoded. Later input
            is ignored.
        finish_reason: The last finish_reason reported by the provider.
    """

    def __init__(self):
        self._buffer = b""
        self._ready: deque[bytes] = deque()
        self.state = DecoderState.IDLE
        self.finished = False
        self.finish_reason: Optional[str] = None

    def feed(self, chunk: bytes) -> None:
        """Append one network read and split off every completed frame."""
        if self.finished or not chunk:
            return

        data = self._buffer + chunk
        # A trailing \r may be the first half of a CRLF split across reads
        held = b""
        if data.endswith(b"\r"):
            data, held = data[:-1], b"\r"
        self._buffer = _normalize_newlines(data)

        while True:
            end = self._buffer.find(FRAME_BOUNDARY)
            if end == -1:
                break
            self._ready.append(self._buffer[:end])
            self._buffer = self._buffer[end + len(FRAME_BOUNDARY):]

        self._buffer += held
        self._update_state()

    def frames(self) -> Iterator[str]:
        """Drain the completed frames, oldest first."""
        while self._ready:
            frame = self._ready.popleft()
            self._update_state()
            yield frame.decode("utf-8", errors="replace")

    def decode(self, chunk: bytes) -> list[StreamEvent]:
        """Feed one network read and return the events it completed.

        Args:
            chunk: Raw bytes as received, possibly empty or containing
                several partial frames.

        Returns:
            Events in arrival order. Nothing follows a FINISH event.
        """
        self.feed(chunk)
        return self._drain()

    def flush(self) -> list[StreamEvent]:
        """Decode a final frame left unterminated when the body ended."""
        if not self.finished and self._buffer.strip():
            self._ready.append(_normalize_newlines(self._buffer))
        self._buffer = b""
        return self._drain()

    def _drain(self) -> list[StreamEvent]:
        events = []
        for frame in self.frames():
            if self.finished:
                break
            event = self._parse_frame(frame)
            if event is not None:
                events.append(event)
        if self.finished:
            self._ready.clear()
            self._buffer = b""
            self._update_state()
        return events

    def _update_state(self) -> None:
        if self._ready:
            self.state = DecoderState.FRAME_READY
        elif self._buffer:
            self.state = DecoderState.ACCUMULATING
        else:
            self.state = DecoderState.IDLE

    def _parse_frame(self, frame: str) -> Optional[StreamEvent]:
        data_lines = []
        for line in frame.split("\n"):
            # Blank lines and comments (": keep-alive")
            if not line or line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            if field != "data":
                continue
            if value.startswith(" "):
                value = value[1:]
            data_lines.append(value)

        if not data_lines:
            return None

        data = "\n".join(data_lines)
        if data == DONE_SENTINEL:
            self.finished = True
            return StreamEvent.finish(self.finish_reason)

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            return StreamEvent.error(f"Malformed stream frame: {data[:200]}")

        if not isinstance(payload, dict):
            return StreamEvent.error(f"Unexpected stream frame: {data[:200]}")

        error = payload.get("error")
        if error:
            if isinstance(error, dict):
                return StreamEvent.error(str(error.get("message") or error))
            return StreamEvent.error(str(error))

        choices = payload.get("choices") or []
        if not choices:
            return None

        choice = choices[0]
        if choice.get("finish_reason"):
            self.finish_reason = choice["finish_reason"]

        content = (choice.get("delta") or {}).get("content")
        if content:
            return StreamEvent.delta(content)
        return None
