"""Dependency injection container."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from kv_client.infrastructure.config import Config, get_config
from kv_client.infrastructure.logging import setup_logging
from kv_client.infrastructure.metrics import MetricsRegistry, get_metrics
from kv_client.infrastructure.tracing import setup_tracing

T = TypeVar("T")


class Container:
    """
    Simple dependency injection container.

    Supports singleton and factory registrations with lazy initialization.
    """

    def __init__(self) -> None:
        """Initialize the container."""
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """
        Register a singleton instance.

        Args:
            interface: The interface/type to register
            instance: The singleton instance
        """
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
    ) -> None:
        """
        Register a factory function for lazy instantiation.

        Args:
            interface: The interface/type to register
            factory: Factory function that takes the container and returns an instance
        """
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a dependency.

        Raises:
            KeyError: If no registration exists for the interface
        """
        if interface in self._instances:
            return self._instances[interface]

        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance

        raise KeyError(f"No registration found for {interface}")

    def has(self, interface: type) -> bool:
        """Check if an interface is registered."""
        return interface in self._factories or interface in self._instances

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._factories.clear()
        self._instances.clear()


def build_container(
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
) -> Container:
    """
    Wire the client's components.

    Args:
        config: Configuration; loaded from the environment when omitted
        metrics: Metrics registry; the global one when omitted

    Returns:
        A container resolving config, metrics, conflict policy, key
        generator, both object mappers and the HTTP transport
    """
    from kv_client.adapters.outbound.http_transport import HTTPTransport
    from kv_client.adapters.outbound.requests_transport import RequestsTransport
    from kv_client.domain.services.binary_codec import BinaryObjectMapper
    from kv_client.domain.services.conflict import KeepSiblings
    from kv_client.domain.services.http_codec import HttpObjectMapper
    from kv_client.domain.services.keygen import UUIDKeyGenerator
    from kv_client.ports.outbound import ConflictResolver, KeyGenerator

    container = Container()
    container.register_singleton(Config, config or get_config())
    container.register_singleton(MetricsRegistry, metrics or get_metrics())
    container.register_factory(ConflictResolver, lambda c: KeepSiblings())
    container.register_factory(KeyGenerator, lambda c: UUIDKeyGenerator())
    container.register_factory(
        BinaryObjectMapper,
        lambda c: BinaryObjectMapper(
            key_generator=c.resolve(KeyGenerator),
            resolver=c.resolve(ConflictResolver),
            return_body=c.resolve(Config).client.return_body,
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    container.register_factory(
        HttpObjectMapper,
        lambda c: HttpObjectMapper(
            prefix=c.resolve(Config).http.prefix,
            resolver=c.resolve(ConflictResolver),
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    container.register_factory(
        HTTPTransport,
        lambda c: RequestsTransport(
            http_config=c.resolve(Config).http,
            client_config=c.resolve(Config).client,
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    return container


# Global container instance
_container: Container | None = None


def init_observability(config: Config) -> None:
    """Configure logging and tracing from the observability settings."""
    observability = config.observability
    logger = setup_logging(observability.log_level, observability.log_format)
    setup_tracing(
        service_name=observability.otel_service_name,
        otlp_endpoint=observability.otel_endpoint,
        environment=observability.environment,
    )
    logger.info(
        "kv_client_container_initialized",
        environment=observability.environment,
        host=config.http.host,
        http_port=config.http.http_port,
        ssl_enabled=config.http.ssl_enabled,
    )


def get_container() -> Container:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = build_container()
        init_observability(_container.resolve(Config))
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    if _container is not None:
        _container.clear()
    _container = None
