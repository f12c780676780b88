"""Unit tests for the requests-based executor."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode
from requests.structures import CaseInsensitiveDict

from kv_client.adapters.outbound.http_transport import FailedRequest
from kv_client.adapters.outbound.requests_transport import RequestsTransport
from kv_client.infrastructure.config import ClientConfig, HTTPConfig
from kv_client.infrastructure.metrics import MetricsRegistry


def make_http_response(
    status: int = 200,
    content: bytes = b"",
    headers: dict[str, str] | None = None,
    chunks: list[bytes] | None = None,
) -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.content = content
    response.headers = CaseInsensitiveDict(headers or {})
    response.iter_content.return_value = iter(chunks or [])
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def transport(session: MagicMock, metrics: MetricsRegistry) -> RequestsTransport:
    return RequestsTransport(
        HTTPConfig(host="kv.example.com", http_port=8098, timeout_seconds=5),
        ClientConfig(client_id="tester"),
        session=session,
        metrics=metrics,
    )


@pytest.mark.unit
class TestRequestsTransport:
    """Tests for RequestsTransport.perform."""

    def test_get(self, transport: RequestsTransport, session: MagicMock, metrics) -> None:
        session.request.return_value = make_http_response(
            200, b"hello", {"Content-Type": "text/plain"}
        )

        response = transport.get(200, "riak", "users", "alice")

        assert response.code == 200
        assert response.body == b"hello"
        assert response.headers.get("content-type") == "text/plain"
        args, kwargs = session.request.call_args
        assert args == ("GET", "http://kv.example.com:8098/riak/users/alice")
        assert kwargs["headers"]["X-Riak-ClientId"] == "tester"
        assert kwargs["stream"] is False
        assert kwargs["timeout"] == 5
        assert metrics.requests_total.labels(method="get", code="200")._value.get() == 1

    def test_head_has_no_body(self, transport: RequestsTransport, session: MagicMock) -> None:
        session.request.return_value = make_http_response(200, b"ignored")

        response = transport.head(200, "riak", "users", "alice")

        assert response.body is None

    def test_no_content(self, transport: RequestsTransport, session: MagicMock) -> None:
        session.request.return_value = make_http_response(204)

        response = transport.put([200, 204], "riak", "users", "alice", b"data")

        assert response.body is None
        assert session.request.call_args.kwargs["data"] == b"data"

    def test_text_body_encoded(self, transport: RequestsTransport, session: MagicMock) -> None:
        session.request.return_value = make_http_response(204)

        transport.put(204, "riak", "users", "alice", "grüß")

        assert session.request.call_args.kwargs["data"] == "grüß".encode("utf-8")

    def test_unexpected_code(self, transport: RequestsTransport, session: MagicMock, metrics) -> None:
        http_response = make_http_response(404, b"not found")
        session.request.return_value = http_response

        with pytest.raises(FailedRequest) as exc_info:
            transport.get(200, "riak", "users", "missing")

        error = exc_info.value
        assert error.code == 404
        assert error.not_found
        assert error.body == b"not found"
        assert metrics.failed_requests_total.labels(method="get")._value.get() == 1
        http_response.close.assert_called_once()

    def test_streaming(self, transport: RequestsTransport, session: MagicMock) -> None:
        session.request.return_value = make_http_response(
            200, chunks=[b"chunk-1", b"", b"chunk-2"]
        )
        received: list[bytes] = []

        response = transport.get(200, "riak", "users", {"keys": "stream"}, stream=received.append)

        assert received == [b"chunk-1", b"chunk-2"]
        assert response.body is None
        assert session.request.call_args.kwargs["stream"] is True

    def test_transport_errors_propagate(self, transport: RequestsTransport, session: MagicMock) -> None:
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(requests.ConnectionError):
            transport.get(200, "riak", "users", "alice")

    def test_close(self, transport: RequestsTransport, session: MagicMock) -> None:
        transport.close()

        session.close.assert_called_once()


@pytest.mark.unit
class TestRequestSpans:
    """Tests for request tracing."""

    @pytest.fixture
    def exporter(self) -> InMemorySpanExporter:
        return InMemorySpanExporter()

    @pytest.fixture
    def traced(self, session: MagicMock, metrics, exporter) -> RequestsTransport:
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        return RequestsTransport(
            HTTPConfig(host="kv.example.com", http_port=8098),
            session=session,
            metrics=metrics,
            tracer=provider.get_tracer("kv_client.test"),
        )

    def test_client_span(self, traced: RequestsTransport, session: MagicMock, exporter) -> None:
        session.request.return_value = make_http_response(200, b"ok")

        traced.get(200, "riak", "users", "alice")

        (span,) = exporter.get_finished_spans()
        assert span.name == "kv_client.http.get"
        assert span.kind == SpanKind.CLIENT
        assert span.attributes["http.method"] == "GET"
        assert span.attributes["http.status_code"] == 200

    def test_failed_span(self, traced: RequestsTransport, session: MagicMock, exporter) -> None:
        session.request.return_value = make_http_response(404, b"")

        with pytest.raises(FailedRequest):
            traced.get(200, "riak", "users", "missing")

        (span,) = exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR
        assert span.events[0].name == "exception"
