"""LLM-related exception classes.

Contains all exception classes for provider operations:
- LLMError: Base exception for LLM-related errors
- MissingAPIKeyError: Raised when the API key is not set
- JSONParseError: Raised when a JSON response cannot be parsed
- ProviderError: The provider rejected the request when it was opened
  - AuthError, RateLimitedError, ProviderUnavailableError, RequestError
- StreamInterruptedError: The stream ended before the terminal event
  - NetworkInterruptedError, ProviderStreamError, StreamCancelledError
"""

from typing import Optional


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class MissingAPIKeyError(LLMError):
    """Raised when the required API key is not set."""

    pass


class JSONParseError(LLMError):
    """Raised when the LLM response cannot be parsed as valid JSON."""

    pass


class ProviderError(LLMError):
    """Raised when the provider rejects a request at open time.

    Attributes:
        status_code: HTTP status returned by the provider, if any.
        retryable: Whether the caller may retry the same request later.
    """

    retryable = False

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(ProviderError):
    """Raised on 401/403: the API key is missing, invalid or lacks access."""

    pass


class RateLimitedError(ProviderError):
    """Raised on 429. Retryable; retry_after is in seconds when the provider sent it."""

    retryable = True

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = 429,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, status_code)
        self.retry_after = retry_after


class ProviderUnavailableError(ProviderError):
    """Raised on 5xx responses and connection failures. Retryable."""

    retryable = True


class RequestError(ProviderError):
    """Raised on any other 4xx. The message is the provider's text verbatim."""

    pass


class StreamInterruptedError(LLMError):
    """Raised when a stream ends without its terminal event.

    Attributes:
        partial_text: Concatenation of every text delta received before the
            interruption. Never discarded.
    """

    def __init__(self, message: str, partial_text: str = ""):
        super().__init__(message)
        self.partial_text = partial_text


class NetworkInterruptedError(StreamInterruptedError):
    """Raised on mid-stream disconnect, read error or idle-read timeout."""

    pass


class ProviderStreamError(StreamInterruptedError):
    """Raised when the provider sends an error frame mid-stream."""

    pass


class StreamCancelledError(StreamInterruptedError):
    """Raised when the user interrupts a running stream."""

    pass
