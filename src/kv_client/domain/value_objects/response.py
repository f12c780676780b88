"""HTTP response and per-call request context."""

from __future__ import annotations

from dataclasses import dataclass, field

from kv_client.domain.value_objects.headers import Headers


@dataclass
class Response:
    """Result of one HTTP request.

    ``body`` is None for HEAD requests, no-content codes (204, 205, 304)
    and streamed responses, whose body went to the caller's sink instead.
    """

    code: int
    headers: Headers = field(default_factory=Headers)
    body: bytes | None = None


@dataclass
class RequestContext:
    """Call-scoped holder for the most recently observed response headers.

    Callers that need headers out of band (typically after a streamed
    request) create one context per logical operation and pass it to the
    transport verbs. Nothing is shared between contexts.
    """

    _last_response_headers: Headers | None = field(default=None, repr=False)

    @property
    def last_response_headers(self) -> Headers:
        if self._last_response_headers is None:
            self._last_response_headers = Headers()
        return self._last_response_headers

    @last_response_headers.setter
    def last_response_headers(self, headers: Headers) -> None:
        self._last_response_headers = headers

    def reset(self) -> None:
        """Forget the headers recorded so far."""
        self._last_response_headers = None
