"""Request executor built on ``requests``."""

from __future__ import annotations

import time
from typing import Any

import requests
from opentelemetry import trace

from kv_client.adapters.outbound.http_transport import (
    ChunkSink,
    Expect,
    FailedRequest,
    HTTPTransport,
)
from kv_client.domain.value_objects.headers import Headers
from kv_client.domain.value_objects.response import Response
from kv_client.infrastructure.config import ClientConfig, HTTPConfig
from kv_client.infrastructure.logging import get_logger
from kv_client.infrastructure.metrics import MetricsRegistry, get_metrics
from kv_client.infrastructure.tracing import trace_span


logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


class RequestsTransport(HTTPTransport):
    """Performs transport requests with a pooled ``requests.Session``.

    Args:
        http_config: Endpoint settings.
        client_config: Client identity settings.
        session: Session to use; one is created when omitted.
        metrics: Metrics registry; the global one when omitted.
        tracer: Tracer for request spans; the global one when omitted.
    """

    def __init__(
        self,
        http_config: HTTPConfig | None = None,
        client_config: ClientConfig | None = None,
        session: requests.Session | None = None,
        metrics: MetricsRegistry | None = None,
        tracer: trace.Tracer | None = None,
    ) -> None:
        super().__init__(http_config, client_config)
        self._session = session or requests.Session()
        self._metrics = metrics or get_metrics()
        self._tracer = tracer

    def perform(
        self,
        method: str,
        uri: str,
        headers: dict[str, str],
        expect: Expect,
        body: Any = None,
        stream: ChunkSink | None = None,
    ) -> Response:
        if isinstance(body, str):
            body = body.encode("utf-8")

        streaming = stream is not None
        start = time.perf_counter()
        with trace_span(
            f"kv_client.http.{method}",
            {"http.method": method.upper(), "http.url": uri},
            kind=trace.SpanKind.CLIENT,
            tracer=self._tracer,
        ) as span:
            http_response = self._session.request(
                method.upper(),
                uri,
                headers=headers,
                data=body,
                stream=streaming,
                timeout=self.http_config.timeout_seconds,
            )
            try:
                code = http_response.status_code
                span.set_attribute("http.status_code", code)
                self._metrics.requests_total.labels(method=method, code=str(code)).inc()
                response_headers = Headers(http_response.headers.items())

                if not self.valid_response(expect, code):
                    self._metrics.failed_requests_total.labels(method=method).inc()
                    logger.warning(
                        "unexpected_response_code",
                        method=method,
                        uri=uri,
                        expected=str(expect),
                        code=code,
                    )
                    raise FailedRequest(
                        method, expect, code, response_headers, http_response.content
                    )

                response = Response(code=code, headers=response_headers)
                if streaming and method != "head":
                    for chunk in http_response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            stream(chunk)
                elif self.return_body(method, code, streaming):
                    response.body = http_response.content
                return response
            finally:
                http_response.close()
                self._metrics.request_latency_seconds.labels(method=method).observe(
                    time.perf_counter() - start
                )

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()
