"""Unit tests for kv_client configuration and wiring."""

from __future__ import annotations

import pytest

from kv_client.adapters.outbound import HTTPTransport, RequestsTransport
from kv_client.domain.services import BinaryObjectMapper, HttpObjectMapper, KeepSiblings
from kv_client.infrastructure.config import ClientConfig, Config, HTTPConfig
from kv_client.infrastructure.container import Container, build_container
from kv_client.infrastructure.metrics import MetricsRegistry
from kv_client.ports.outbound import ConflictResolver


@pytest.mark.unit
class TestConfig:
    """Test configuration loading and validation."""

    def test_default_config(self) -> None:
        config = Config()

        assert config.http.host == "127.0.0.1"
        assert config.http.http_port == 8098
        assert config.http.ssl_enabled is False
        assert config.http.prefix == "/riak"
        assert config.http.mapred == "/mapred"
        assert config.http.basic_auth is None
        assert config.client.client_id is None
        assert config.observability.log_format == "json"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KV_CLIENT_HTTP__HOST", "kv.internal")
        monkeypatch.setenv("KV_CLIENT_HTTP__SSL_ENABLED", "true")
        monkeypatch.setenv("KV_CLIENT_CLIENT__CLIENT_ID", "worker-1")

        config = Config()

        assert config.http.host == "kv.internal"
        assert config.http.ssl_enabled is True
        assert config.client.client_id == "worker-1"

    def test_client_id_types(self) -> None:
        assert ClientConfig(client_id=7).client_id == 7
        assert ClientConfig(client_id="abc").client_id == "abc"

    def test_invalid_port(self) -> None:
        with pytest.raises(ValueError):
            HTTPConfig(http_port=0)

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError):
            Config(observability={"log_level": "CHATTY"})


@pytest.mark.unit
class TestContainer:
    """Test dependency wiring."""

    def test_build_container(self, test_config: Config, metrics: MetricsRegistry) -> None:
        container = build_container(test_config, metrics)

        transport = container.resolve(HTTPTransport)
        assert isinstance(transport, RequestsTransport)
        assert transport.root_uri() == "http://kv.example.com:8098/"
        assert transport.client_id() == "test-client"
        assert isinstance(container.resolve(BinaryObjectMapper), BinaryObjectMapper)
        assert isinstance(container.resolve(HttpObjectMapper), HttpObjectMapper)
        assert isinstance(container.resolve(ConflictResolver), KeepSiblings)
        assert container.resolve(Config) is test_config

    def test_factories_are_lazy_singletons(self, test_config: Config, metrics) -> None:
        container = build_container(test_config, metrics)

        assert container.resolve(HTTPTransport) is container.resolve(HTTPTransport)

    def test_override_resolver(self, test_config: Config, metrics) -> None:
        container = build_container(test_config, metrics)
        custom = KeepSiblings()
        container.register_singleton(ConflictResolver, custom)

        assert container.resolve(ConflictResolver) is custom

    def test_unknown_interface(self) -> None:
        with pytest.raises(KeyError):
            Container().resolve(int)

    def test_clear(self, test_config: Config, metrics) -> None:
        container = build_container(test_config, metrics)
        container.clear()

        assert not container.has(Config)


@pytest.mark.unit
class TestObservability:
    """Test logging, metrics and tracing setup."""

    def test_setup_metrics(self) -> None:
        from prometheus_client import CollectorRegistry

        from kv_client.infrastructure.metrics import setup_metrics

        registry = CollectorRegistry()
        metrics = setup_metrics(registry)

        assert registry.get_sample_value(
            "kv_client_info", {"version": "0.1.0", "component": "kv_client"}
        ) == 1.0
        metrics.requests_total.labels(method="get", code="200").inc()
        assert registry.get_sample_value(
            "kv_client_http_requests_total", {"method": "get", "code": "200"}
        ) == 1.0

    def test_setup_logging(self) -> None:
        from kv_client.infrastructure.logging import setup_logging

        logger = setup_logging("INFO", "json")

        logger.info("logging_configured")

    def test_trace_span(self) -> None:
        from kv_client.infrastructure.tracing import trace_span

        with trace_span("kv_client.test", {"bucket": "users"}) as span:
            span.set_attribute("key", "alice")
