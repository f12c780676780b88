"""Domain entities."""

from kv_client.domain.entities.link import Link
from kv_client.domain.entities.robject import DEFAULT_CONTENT_TYPE, RContent, RObject

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "Link",
    "RContent",
    "RObject",
]
