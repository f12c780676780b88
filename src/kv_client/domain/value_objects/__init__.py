"""Value objects - wire messages, headers and responses."""

from kv_client.domain.value_objects.headers import Headers
from kv_client.domain.value_objects.messages import (
    GetResponse,
    PutRequest,
    WireContent,
    WireLink,
    WirePair,
)
from kv_client.domain.value_objects.response import RequestContext, Response

__all__ = [
    "GetResponse",
    "Headers",
    "PutRequest",
    "RequestContext",
    "Response",
    "WireContent",
    "WireLink",
    "WirePair",
]
