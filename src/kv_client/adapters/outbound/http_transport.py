"""HTTP transport contract.

HTTP/1.1 verbs are presented as methods with identical semantics for
every executor: default headers are merged with the caller's, the
resource path is validated and resolved against the root URI, and the
request is handed to ``perform``, which concrete executors implement with
their HTTP library of choice.

Resource arguments are path segments, optionally followed by a mapping
of query parameters:

    transport.get(200, "riak", "users", "alice", {"r": 2})
    transport.put([200, 204], "riak", "users", "alice", b"{...}",
                  headers={"Content-Type": "application/json"})
"""

from __future__ import annotations

import base64
import re
import struct
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import urlencode, urljoin

from kv_client.domain.value_objects.headers import Headers
from kv_client.domain.value_objects.response import RequestContext, Response
from kv_client.infrastructure.config import ClientConfig, HTTPConfig


ACCEPT = "multipart/mixed, application/json;q=0.7, */*;q=0.5"
CLIENT_ID_HEADER = "X-Riak-ClientId"

NO_BODY_CODES = (204, 205, 304)

RESOURCE_PATH_SHORT = "resource path too short"
REQUEST_BODY_TYPE = "invalid body type"
PATH_AND_BODY_REQUIRED = "path and body required"

Expect = int | str | Iterable[int | str]
ChunkSink = Callable[[bytes], None]


class FailedRequest(Exception):
    """Raised by executors when the response code was not expected."""

    def __init__(
        self,
        method: str,
        expected: Expect,
        code: int,
        headers: Headers,
        body: bytes | None,
    ) -> None:
        self.method = method
        self.expected = expected
        self.code = code
        self.headers = headers
        self.body = body
        super().__init__(
            f"Expected {expected!r} from the store but received {code} for {method.upper()}."
        )

    @property
    def not_found(self) -> bool:
        return self.code == 404


class HTTPTransport:
    """Verb-level HTTP semantics shared by all request executors.

    Subclasses implement :meth:`perform`. The verbs never retry and never
    interpret response codes themselves.

    Args:
        http_config: Endpoint, TLS, prefix and credential settings.
        client_config: Client identity settings.
    """

    def __init__(
        self,
        http_config: HTTPConfig | None = None,
        client_config: ClientConfig | None = None,
    ) -> None:
        self.http_config = http_config or HTTPConfig()
        self.client_config = client_config or ClientConfig()

    # =========================================================================
    # Verbs
    # =========================================================================

    def head(
        self,
        expect: Expect,
        *resource: Any,
        headers: Mapping[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        """Perform a HEAD request.

        Returns:
            Response with headers and code only.
        """
        merged = self._merge_headers(headers)
        self.verify_path(resource)
        return self._dispatch("head", self.path(*resource), merged, expect, context=context)

    def get(
        self,
        expect: Expect,
        *resource: Any,
        headers: Mapping[str, str] | None = None,
        stream: ChunkSink | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        """Perform a GET request.

        Args:
            expect: Expected response code(s).
            *resource: Path segments and optional query mapping.
            headers: Headers overriding the defaults.
            stream: Sink receiving body chunks as they arrive; the
                returned response then carries no body.
            context: Records the response headers when given, including
                those of a response rejected with FailedRequest.
        """
        merged = self._merge_headers(headers)
        self.verify_path(resource)
        return self._dispatch(
            "get", self.path(*resource), merged, expect, stream=stream, context=context
        )

    def put(
        self,
        expect: Expect,
        *resource: Any,
        headers: Mapping[str, str] | None = None,
        stream: ChunkSink | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        """Perform a PUT request. The last positional argument is the body."""
        merged = self._merge_headers(headers)
        uri, body = self.verify_path_and_body(resource)
        return self._dispatch(
            "put", self.path(*uri), merged, expect, body, stream=stream, context=context
        )

    def post(
        self,
        expect: Expect,
        *resource: Any,
        headers: Mapping[str, str] | None = None,
        stream: ChunkSink | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        """Perform a POST request. The last positional argument is the body."""
        merged = self._merge_headers(headers)
        uri, body = self.verify_path_and_body(resource)
        return self._dispatch(
            "post", self.path(*uri), merged, expect, body, stream=stream, context=context
        )

    def delete(
        self,
        expect: Expect,
        *resource: Any,
        headers: Mapping[str, str] | None = None,
        stream: ChunkSink | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        """Perform a DELETE request."""
        merged = self._merge_headers(headers)
        self.verify_path(resource)
        return self._dispatch(
            "delete", self.path(*resource), merged, expect, stream=stream, context=context
        )

    def perform(
        self,
        method: str,
        uri: str,
        headers: dict[str, str],
        expect: Expect,
        body: Any = None,
        stream: ChunkSink | None = None,
    ) -> Response:
        """Execute a request with the underlying HTTP library.

        Implementations must raise :class:`FailedRequest` when
        :meth:`valid_response` rejects the code, and must include the body
        only when :meth:`return_body` allows it, sending chunks to
        ``stream`` otherwise.

        Args:
            method: One of "head", "get", "put", "post", "delete".
            uri: Absolute request URI.
            headers: Request headers.
            expect: Expected response code(s).
            body: PUT/POST body (str, bytes or a readable object).
            stream: Optional sink for response body chunks.

        Raises:
            NotImplementedError: If no executor is bound.
        """
        raise NotImplementedError(f"{type(self).__name__} does not implement perform()")

    # =========================================================================
    # Headers
    # =========================================================================

    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request, merged under caller headers."""
        headers = {"Accept": ACCEPT}
        client_id = self.client_id()
        if client_id is not None:
            headers[CLIENT_ID_HEADER] = client_id
        headers.update(self.basic_auth_header())
        return headers

    def client_id(self) -> str | None:
        """Client id header value.

        Numeric ids are packed as a 4-byte big-endian integer and base64
        encoded; textual ids are sent verbatim.
        """
        value = self.client_config.client_id
        if isinstance(value, int):
            return b64encode(value)
        if isinstance(value, str):
            return value
        return None

    def basic_auth_header(self) -> dict[str, str]:
        credentials = self.http_config.basic_auth
        if not credentials:
            return {}
        token = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    def _merge_headers(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        merged = self.default_headers()
        if headers:
            merged.update(headers)
        return merged

    # =========================================================================
    # Paths
    # =========================================================================

    def root_uri(self) -> str:
        """Root URI of the store's HTTP endpoint."""
        scheme = "https" if self.http_config.ssl_enabled else "http"
        return f"{scheme}://{self.http_config.host}:{self.http_config.http_port}/"

    def path(self, *segments: Any) -> str:
        """Resolve path segments (and optional trailing query mapping) to a URI."""
        parts = list(segments)
        query = parts.pop() if parts and isinstance(parts[-1], Mapping) else None

        relative = re.sub(r"/+", "/", "/".join(str(part) for part in parts))
        if relative.startswith("/"):
            relative = relative[1:]

        uri = urljoin(self.root_uri(), relative)
        if query:
            uri = f"{uri}?{urlencode(query, doseq=True)}"
        return uri

    def verify_path(self, resource: Iterable[Any]) -> None:
        """Check that a resource names more than a single segment.

        The map-reduce endpoint is the one single-segment path allowed.

        Raises:
            ValueError: If the path is too short.
        """
        segments = [part for part in resource if not isinstance(part, Mapping)]
        if len(segments) > 1 or self.http_config.mapred in segments:
            return
        raise ValueError(RESOURCE_PATH_SHORT)

    def verify_path_and_body(self, args: Iterable[Any]) -> tuple[list[Any], Any]:
        """Split positional arguments into resource and body.

        Returns:
            The resource segments and the body.

        Raises:
            ValueError: If the path or body is missing, or the body is
                not str, bytes or readable.
        """
        resource = list(args)
        body = resource.pop() if resource else None
        try:
            self.verify_path(resource)
        except ValueError:
            raise ValueError(PATH_AND_BODY_REQUIRED) from None

        if not (isinstance(body, (str, bytes, bytearray)) or hasattr(body, "read")):
            raise ValueError(REQUEST_BODY_TYPE)
        return resource, body

    # =========================================================================
    # Response interpretation
    # =========================================================================

    @staticmethod
    def valid_response(expected: Expect, actual: int | str) -> bool:
        """Check the actual response code against the expected code(s)."""
        if isinstance(expected, (int, str)):
            expected = [expected]
        return int(actual) in {int(code) for code in expected}

    @classmethod
    def return_body(cls, method: str, code: int | str, streaming: bool) -> bool:
        """Whether a response to this request should carry its body."""
        return (
            method != "head"
            and not cls.valid_response(NO_BODY_CODES, code)
            and not streaming
        )

    def _dispatch(
        self,
        method: str,
        uri: str,
        headers: dict[str, str],
        expect: Expect,
        body: Any = None,
        stream: ChunkSink | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        try:
            response = self.perform(method, uri, headers, expect, body, stream=stream)
        except FailedRequest as error:
            if context is not None:
                context.last_response_headers = error.headers
            raise
        if context is not None:
            context.last_response_headers = response.headers
        return response


def b64encode(n: int) -> str:
    """Base64 of an integer packed as 4 bytes, big-endian."""
    return base64.b64encode(struct.pack(">I", n & 0xFFFFFFFF)).decode("ascii")
