"""Domain services - codecs, object mappers and conflict policies."""

from kv_client.domain.services.binary_codec import BinaryObjectMapper
from kv_client.domain.services.conflict import HookChainResolver, KeepSiblings, LastWriteWins
from kv_client.domain.services.http_codec import HttpObjectMapper
from kv_client.domain.services.keygen import UUIDKeyGenerator

__all__ = [
    "BinaryObjectMapper",
    "HookChainResolver",
    "HttpObjectMapper",
    "KeepSiblings",
    "LastWriteWins",
    "UUIDKeyGenerator",
]
