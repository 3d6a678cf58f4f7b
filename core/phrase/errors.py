"""Provider failures raised when the Phrase API rejects a request.

Every remote call site hands a non-successful response to `classify_failure`, which picks
the failure type from the status code alone:

- 429: `RateLimitError`, carrying the rate limit and the seconds until it resets.
- any other status up to and including 500: `ProviderClientError` with the caller's message.
- above 500: `ProviderServerError` with a fixed generic message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from handlers.phrase_http import HttpResponse

__all__: list[str] = [
    "ProviderClientError",
    "ProviderError",
    "ProviderServerError",
    "RateLimitError",
    "classify_failure",
]

TOO_MANY_REQUESTS: Final[int] = 429
SERVER_ERROR_THRESHOLD: Final[int] = 500
SERVER_ERROR_MESSAGE: Final[str] = "Provider server error."


class ProviderError(Exception):
    """The Phrase API answered with an unexpected status code.

    Attributes:
        response (HttpResponse | None): The response that triggered the failure.
    """

    def __init__(self, msg: str, response: HttpResponse | None = None) -> None:
        super().__init__(msg)
        self.msg: str = msg
        self.response: HttpResponse | None = response

    @property
    def status(self) -> int | None:
        return self.response.status if self.response is not None else None


class RateLimitError(ProviderError):
    """The request was rate-limited. Retrying is left to the caller.

    Attributes:
        limit (str): Value of the `x-rate-limit-limit` header.
        reset (str): Value of the `x-rate-limit-reset` header, in seconds.
    """

    def __init__(self, limit: str, reset: str, response: HttpResponse | None = None) -> None:
        super().__init__(f"Rate limit exceeded ({limit}). please wait {reset} seconds.", response)
        self.limit: str = limit
        self.reset: str = reset

    @property
    def retry_after(self) -> float | None:
        """Seconds to wait before retrying, if the reset header is numeric."""
        try:
            return float(self.reset)
        except ValueError:
            return None


class ProviderClientError(ProviderError):
    """The request was rejected (status 500 or below, other than 429)."""


class ProviderServerError(ProviderError):
    """The Phrase API failed to process the request (status above 500)."""


def classify_failure(response: HttpResponse, message: str) -> ProviderError:
    """Build the failure matching a non-successful response.

    Args:
        response (HttpResponse): The rejected response.
        message (str): Context message used for client errors.

    Returns:
        ProviderError: The failure to raise.
    """
    if response.status == TOO_MANY_REQUESTS:
        return RateLimitError(
            limit=response.header("x-rate-limit-limit"),
            reset=response.header("x-rate-limit-reset"),
            response=response,
        )
    if response.status <= SERVER_ERROR_THRESHOLD:
        return ProviderClientError(message, response)
    return ProviderServerError(SERVER_ERROR_MESSAGE, response)
