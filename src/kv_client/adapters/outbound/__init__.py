"""Outbound adapters - HTTP transport contract and executors."""

from kv_client.adapters.outbound.http_transport import FailedRequest, HTTPTransport
from kv_client.adapters.outbound.requests_transport import RequestsTransport

__all__ = [
    "FailedRequest",
    "HTTPTransport",
    "RequestsTransport",
]
