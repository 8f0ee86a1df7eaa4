"""Streaming chat-completions client.

Contains:
- classify_response: Map a failed HTTP response to a ProviderError
- StreamingClient: Open one streaming request and yield StreamEvents

The client never retries. Retryable failures are flagged on the raised
exception and left to the caller.
"""

from typing import TYPE_CHECKING, Iterator, Optional

import httpx
from loguru import logger

from committer.config import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_IDLE_TIMEOUT,
    OPENROUTER_API_URL,
    APP_TITLE,
    APP_URL,
)
from committer.llm.exceptions import (
    AuthError,
    MissingAPIKeyError,
    NetworkInterruptedError,
    ProviderError,
    ProviderUnavailableError,
    RateLimitedError,
    RequestError,
)
from committer.llm.frames import EventKind, FrameDecoder, StreamEvent

if TYPE_CHECKING:
    from loguru import Logger

    from committer.llm.request import PromptRequest


def _provider_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error

    text = response.text.strip()
    return text or response.reason_phrase or f"HTTP {response.status_code}"


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def classify_response(response: httpx.Response) -> ProviderError:
    """Classify a failed response by status code.

    Args:
        response: A response with status >= 400 whose body has been read.

    Returns:
        AuthError for 401/403, RateLimitedError for 429,
        ProviderUnavailableError for 5xx and RequestError for any other
        status, carrying the provider's message verbatim.
    """
    status = response.status_code
    message = _provider_message(response)

    if status in (401, 403):
        return AuthError(f"Authentication failed ({status}): {message}", status)
    if status == 429:
        return RateLimitedError(
            f"Rate limited by provider: {message}",
            status,
            retry_after=_retry_after(response),
        )
    if status >= 500:
        return ProviderUnavailableError(f"Provider unavailable ({status}): {message}", status)
    return RequestError(message, status)


class StreamingClient:
    """Client for one streaming chat completion per call to events().

    Args:
        api_key: Provider API key.
        url: Chat completions endpoint.
        idle_timeout: Seconds without any received byte before the stream
            is treated as interrupted.
        connect_timeout: Seconds allowed to open the connection.
        http_client: Optional httpx.Client (tests pass one with a
            MockTransport). A client created here is closed by close().
        log: Logger for diagnostics.
    """

    def __init__(
        self,
        api_key: str,
        url: str = OPENROUTER_API_URL,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
        log: "Logger" = logger,
    ):
        if not api_key:
            raise MissingAPIKeyError("An OpenRouter API key is required.")

        self.api_key = api_key
        self.url = url
        self.timeout = httpx.Timeout(
            connect=connect_timeout,
            read=idle_timeout,
            write=connect_timeout,
            pool=connect_timeout,
        )
        self.idle_timeout = idle_timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=self.timeout)
        self._log = log

    def __enter__(self) -> "StreamingClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
            "HTTP-Referer": APP_URL,
            "X-Title": APP_TITLE,
        }

    def events(self, request: "PromptRequest") -> Iterator[StreamEvent]:
        """Stream a completion as events, in provider emission order.

        The generator reads from the network only when the consumer asks
        for the next event. Closing it closes the HTTP response.

        Yields:
            TEXT events, then exactly one FINISH or ERROR event.

        Raises:
            AuthError, RateLimitedError, ProviderUnavailableError, RequestError:
                When the request is rejected or cannot be opened.
            NetworkInterruptedError: When the stream breaks, stalls for
                idle_timeout seconds or ends without completing. Carries
                the partial text.
        """
        decoder = FrameDecoder()
        received: list[str] = []
        opened = False

        try:
            with self._client.stream(
                "POST",
                self.url,
                content=request.body(),
                headers=self.headers(),
                timeout=self.timeout,
            ) as response:
                if response.status_code >= 400:
                    response.read()
                    raise classify_response(response)

                opened = True
                self._log.info("Streaming response from {}", request.model)

                for chunk in response.iter_bytes():
                    for event in decoder.decode(chunk):
                        if event.kind is EventKind.TEXT:
                            received.append(event.text)
                        yield event
                        if event.is_terminal:
                            return

                for event in decoder.flush():
                    if event.kind is EventKind.TEXT:
                        received.append(event.text)
                    yield event
                    if event.is_terminal:
                        return

        except httpx.ReadTimeout:
            if not opened:
                raise ProviderUnavailableError(
                    f"Provider did not respond within {self.idle_timeout:g}s."
                )
            raise NetworkInterruptedError(
                f"No data received for {self.idle_timeout:g}s; stream abandoned.",
                "".join(received),
            )
        except httpx.TransportError as e:
            if not opened:
                raise ProviderUnavailableError(f"Could not reach provider: {e}")
            raise NetworkInterruptedError(
                f"Connection lost while streaming: {e}",
                "".join(received),
            )

        # Body ended cleanly without the sentinel
        if decoder.finish_reason:
            self._log.info("Stream ended without sentinel after finish_reason={}", decoder.finish_reason)
            yield StreamEvent.finish(decoder.finish_reason)
            return

        raise NetworkInterruptedError(
            "Stream ended before the provider finished the response.",
            "".join(received),
        )
