"""Binary message codec for objects.

Maps ``RObject``/``RContent`` onto the store's binary message shapes
(``PutRequest``, ``GetResponse``, ``WireContent``, ``WireLink``,
``WirePair``). All text is carried as UTF-8 bytes; payloads are passed
through untouched.

Encoding rules:
    - links without a key and pairs without a value are dropped
    - usermeta/indexes are only set when non-empty
    - vtag is only set when the etag is non-blank
    - charset is set whenever the content declares one

Decoding tolerates charset labels Python does not know: the payload is
kept as opaque bytes and the condition is logged.
"""

from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from kv_client.domain.entities.link import Link
from kv_client.domain.entities.robject import RContent, RObject
from kv_client.domain.services.charset import is_known_charset
from kv_client.domain.services.conflict import KeepSiblings
from kv_client.domain.services.keygen import UUIDKeyGenerator
from kv_client.domain.services.object_mapper import load_siblings
from kv_client.domain.value_objects.messages import (
    GetResponse,
    PutRequest,
    WireContent,
    WireLink,
    WirePair,
)
from kv_client.infrastructure.logging import get_logger
from kv_client.ports.outbound import ConflictResolver, KeyGenerator

if TYPE_CHECKING:
    from kv_client.infrastructure.metrics import MetricsRegistry


logger = get_logger(__name__)


def to_binary(value: str | bytes) -> bytes:
    """Convert a text field to its wire byte form."""
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


def from_binary(value: bytes | None) -> str | None:
    """Convert a wire byte field back to text."""
    if value is None:
        return None
    return value.decode("utf-8")


def _present(value: bytes | str | None) -> bool:
    return value is not None and bool(value.strip())


# =============================================================================
# Pairs and links
# =============================================================================


def encode_pair(key: str, value: str | None) -> WirePair | None:
    """Encode a metadata or index entry.

    Returns:
        The wire pair, or None when the value is blank or absent.
    """
    if value is None or not str(value).strip():
        return None
    return WirePair(key=to_binary(key), value=to_binary(value))


def decode_pair(pair: WirePair, target: dict[str, str]) -> None:
    """Insert a wire pair into a mapping, replacing any existing entry."""
    target[from_binary(pair.key)] = from_binary(pair.value) or ""


def encode_link(link: Link) -> WireLink | None:
    """Encode a link; keyless links yield None."""
    if not link.key:
        return None
    return WireLink(
        bucket=to_binary(link.bucket or ""),
        key=to_binary(link.key),
        tag=to_binary(link.tag or ""),
    )


def decode_link(wire: WireLink) -> Link:
    return Link(from_binary(wire.bucket), from_binary(wire.key), from_binary(wire.tag))


# =============================================================================
# Content
# =============================================================================


def encode_content(content: RContent) -> WireContent:
    """Encode one content version.

    Args:
        content: Content version to encode.

    Returns:
        Wire content with only the populated optional fields set.
    """
    links = [wire for wire in (encode_link(link) for link in content.links) if wire]
    wire = WireContent(
        value=content.raw_data,
        content_type=to_binary(content.content_type),
        links=links,
    )

    if content.meta:
        wire.usermeta = [
            pair for pair in (encode_pair(k, v) for k, v in content.meta.items()) if pair
        ]
    if content.indexes:
        wire.indexes = [
            pair for pair in (encode_pair(k, v) for k, v in content.indexes.items()) if pair
        ]
    if _present(content.etag):
        wire.vtag = to_binary(content.etag)
    if content.charset:
        wire.charset = to_binary(content.charset)

    return wire


def decode_content(
    wire: WireContent,
    content: RContent,
    metrics: MetricsRegistry | None = None,
) -> RContent:
    """Decode one content version onto an ``RContent``.

    Args:
        wire: Wire content from the store.
        content: Target content version, updated in place.
        metrics: Optional metrics registry.

    Returns:
        The updated content.
    """
    content.charset = None
    if _present(wire.charset):
        label = from_binary(wire.charset)
        if is_known_charset(label):
            content.charset = label
        else:
            logger.warning("charset_unrecognized", charset=label)
            if metrics is not None:
                metrics.charset_unrecognized_total.inc()

    content.raw_data = wire.value
    if _present(wire.vtag):
        content.etag = from_binary(wire.vtag)
    if _present(wire.content_type):
        content.content_type = from_binary(wire.content_type)
    if wire.links:
        content.links = [decode_link(link) for link in wire.links]

    content.meta = {}
    for pair in wire.usermeta:
        decode_pair(pair, content.meta)
    content.indexes = {}
    for pair in wire.indexes:
        decode_pair(pair, content.indexes)

    if wire.last_mod is not None:
        content.last_modified = datetime.fromtimestamp(
            wire.last_mod, tz=timezone.utc
        ) + timedelta(microseconds=wire.last_mod_usecs or 0)

    return content


# =============================================================================
# Objects
# =============================================================================


class BinaryObjectMapper:
    """Dumps objects to ``PutRequest`` and loads them from ``GetResponse``.

    Args:
        key_generator: Supplies keys for objects stored without one.
        resolver: Conflict policy applied when a response has siblings.
        return_body: Value for ``PutRequest.return_body``, if any.
        metrics: Optional metrics registry.
    """

    def __init__(
        self,
        key_generator: KeyGenerator | None = None,
        resolver: ConflictResolver | None = None,
        return_body: bool | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._key_generator = key_generator or UUIDKeyGenerator()
        self._resolver = resolver or KeepSiblings()
        self._return_body = return_body
        self._metrics = metrics

    def dump(self, robject: RObject) -> PutRequest:
        """Build a store request for an object.

        When the object has no key, a generated key is assigned to
        ``robject.key`` before encoding.
        """
        if not robject.key:
            robject.key = self._key_generator.generate()
            logger.debug("key_generated", bucket=robject.bucket, key=robject.key)

        request = PutRequest(
            bucket=to_binary(robject.bucket),
            key=to_binary(robject.key),
            content=encode_content(robject.content),
            return_body=self._return_body,
        )
        if robject.vclock:
            request.vclock = base64.b64decode(robject.vclock)

        if self._metrics is not None:
            self._metrics.objects_dumped_total.labels(encoding="binary").inc()
        return request

    def load(self, response: GetResponse, robject: RObject) -> RObject:
        """Populate an object from a fetch response.

        ``response.content`` must hold at least one entry. With more than
        one, the object becomes conflicted and the resolver decides what
        is returned.
        """
        if response.vclock:
            robject.vclock = base64.b64encode(response.vclock).decode("ascii")

        if self._metrics is not None:
            self._metrics.objects_loaded_total.labels(encoding="binary").inc()

        if len(response.content) > 1:
            logger.info(
                "siblings_detected",
                bucket=robject.bucket,
                key=robject.key,
                count=len(response.content),
            )
            if self._metrics is not None:
                self._metrics.siblings_detected_total.labels(encoding="binary").inc(
                    len(response.content)
                )
            return load_siblings(
                robject, response.content, self._load_content, self._resolver
            )

        self._load_content(response.content[0], robject.content)
        return robject

    def _load_content(self, wire: WireContent, content: RContent) -> RContent:
        return decode_content(wire, content, self._metrics)
