"""Pytest configuration and shared fixtures for kv_client tests."""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from kv_client.domain.entities import Link, RContent, RObject
from kv_client.infrastructure.config import ClientConfig, Config, HTTPConfig
from kv_client.infrastructure.container import reset_container
from kv_client.infrastructure.metrics import MetricsRegistry


@pytest.fixture(autouse=True)
def clean_container() -> Generator[None, None, None]:
    """Reset the DI container around each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def metrics() -> MetricsRegistry:
    """Provide a metrics registry isolated from the global one."""
    return MetricsRegistry(CollectorRegistry())


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration."""
    return Config(
        http=HTTPConfig(host="kv.example.com", http_port=8098),
        client=ClientConfig(client_id="test-client"),
    )


class FixedKeyGenerator:
    """Key generator returning a known key."""

    def __init__(self, key: str = "generated-key") -> None:
        self.key = key
        self.calls = 0

    def generate(self) -> str:
        self.calls += 1
        return self.key


@pytest.fixture
def key_generator() -> FixedKeyGenerator:
    return FixedKeyGenerator()


@pytest.fixture
def sample_content() -> RContent:
    """Provide a fully populated content version."""
    return RContent(
        raw_data=b'{"name": "alice"}',
        content_type="application/json",
        charset="utf-8",
        etag="5bnavU3rrubcxLI8EvFXhB",
        last_modified=datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
        links=[Link("friends", "bob", "friend"), Link("friends", "carol", "friend")],
        meta={"author": "alice", "source": "signup"},
        indexes={"email_bin": "alice@example.com", "age_int": "30"},
    )


@pytest.fixture
def sample_object(sample_content: RContent) -> RObject:
    """Provide an object with a vector clock and content."""
    return RObject(
        bucket="users",
        key="alice",
        vclock=base64.b64encode(b"\x6b\xce\x61\x60\x60\x60vclock").decode("ascii"),
        content=sample_content,
    )


# Pytest markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
