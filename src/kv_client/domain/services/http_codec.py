"""HTTP/MIME codec for objects.

Objects travel over HTTP as a body plus headers:

    Header            | Field
    ------------------|------------------------------------------
    Content-Type      | content_type, charset parameter
    X-Riak-Vclock     | vclock (base64 text, as held in memory)
    ETag              | etag
    Last-Modified     | last_modified (HTTP date)
    Link              | links, as </prefix/bucket/key>; riaktag="tag"
    X-Riak-Meta-*     | meta
    X-Riak-Index-*    | indexes

A fetch of a key with siblings answers ``300 Multiple Choices`` with a
``multipart/mixed`` body, one part per sibling. Siblings are resolved
through the same conflict policy as the binary codec.
"""

from __future__ import annotations

import re
from datetime import timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote, urlsplit

from kv_client.domain.entities.link import Link
from kv_client.domain.entities.robject import RContent, RObject
from kv_client.domain.services import multipart
from kv_client.domain.services.charset import is_known_charset
from kv_client.domain.services.conflict import KeepSiblings
from kv_client.domain.services.object_mapper import load_siblings
from kv_client.domain.value_objects.headers import Headers
from kv_client.domain.value_objects.response import Response
from kv_client.infrastructure.logging import get_logger
from kv_client.ports.outbound import ConflictResolver

if TYPE_CHECKING:
    from kv_client.infrastructure.metrics import MetricsRegistry


logger = get_logger(__name__)

VCLOCK_HEADER = "X-Riak-Vclock"
META_PREFIX = "X-Riak-Meta-"
INDEX_PREFIX = "X-Riak-Index-"

_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*(rel|riaktag)="([^"]*)"')


def escape(segment: str) -> str:
    """Escape a bucket or key for use as one path segment."""
    return quote(segment, safe="")


def parse_content_type(value: str) -> tuple[str, str | None]:
    """Split a Content-Type header into media type and charset."""
    media_type, _, params = value.partition(";")
    charset = None
    for param in params.split(";"):
        name, _, param_value = param.strip().partition("=")
        if name.lower() == "charset" and param_value:
            charset = param_value.strip('"')
    return media_type.strip(), charset


def format_link(link: Link, prefix: str) -> str:
    """Render a link as a Link header entry."""
    segments = (prefix.strip("/"), escape(link.bucket or ""), escape(link.key or ""))
    path = "/".join(segment for segment in segments if segment)
    return f'</{path}>; riaktag="{link.tag or ""}"'


def parse_links(value: str, prefix: str) -> list[Link]:
    """Parse object links out of a Link header.

    Entries with ``rel`` (such as the bucket's ``rel="up"``) name no
    object and are skipped. An empty ``riaktag`` loads as a tagless link.
    """
    prefix_segments = [s for s in prefix.split("/") if s]
    links = []
    for url, kind, tag in _LINK_PATTERN.findall(value):
        if kind != "riaktag":
            continue
        segments = [unquote(s) for s in urlsplit(url).path.split("/") if s]
        if segments[: len(prefix_segments)] == prefix_segments:
            segments = segments[len(prefix_segments):]
        if len(segments) == 2:
            links.append(Link(segments[0], segments[1], tag or None))
    return links


class HttpObjectMapper:
    """Dumps objects to HTTP headers and body, and loads them back.

    Args:
        prefix: Resource prefix of the key/value endpoint (e.g. "/riak").
        resolver: Conflict policy applied when a response has siblings.
        metrics: Optional metrics registry.
    """

    def __init__(
        self,
        prefix: str = "/riak",
        resolver: ConflictResolver | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._prefix = prefix
        self._resolver = resolver or KeepSiblings()
        self._metrics = metrics

    def object_path(
        self,
        bucket: str,
        key: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> list[Any]:
        """Build the path segments for an object (or its bucket).

        Returns:
            Segments suitable for the transport verbs, with the query
            mapping last when ``params`` is given.
        """
        segments: list[Any] = [self._prefix, escape(bucket)]
        if key:
            segments.append(escape(key))
        if params:
            segments.append(params)
        return segments

    def store_headers(self, robject: RObject, conditional: bool = False) -> dict[str, str]:
        """Headers describing an object for a PUT or POST.

        Args:
            robject: Object being stored.
            conditional: Send ``If-Match`` with the current etag.
        """
        content = robject.content
        content_type = content.content_type
        if content.charset:
            content_type = f"{content_type}; charset={content.charset}"

        headers = {"Content-Type": content_type}
        if robject.vclock:
            headers[VCLOCK_HEADER] = robject.vclock
        if conditional and content.etag:
            headers["If-Match"] = f'"{content.etag}"'

        links = [format_link(link, self._prefix) for link in content.links if link.is_complete()]
        if links:
            headers["Link"] = ", ".join(links)

        for key, value in content.meta.items():
            if value is not None and str(value).strip():
                headers[f"{META_PREFIX}{key}"] = str(value)
        for key, value in content.indexes.items():
            if value is not None and str(value).strip():
                headers[f"{INDEX_PREFIX}{key}"] = str(value)
        return headers

    def reload_headers(self, robject: RObject) -> dict[str, str]:
        """Conditional-GET headers for refreshing an object."""
        headers = {}
        content = robject.content
        if content.etag:
            headers["If-None-Match"] = f'"{content.etag}"'
        if content.last_modified is not None:
            headers["If-Modified-Since"] = format_datetime(
                content.last_modified.astimezone(timezone.utc), usegmt=True
            )
        return headers

    def dump(self, robject: RObject, conditional: bool = False) -> tuple[dict[str, str], bytes]:
        """Serialize an object to request headers and body.

        Objects without a key are left keyless; POSTing them to the bucket
        path lets the store assign one.
        """
        if self._metrics is not None:
            self._metrics.objects_dumped_total.labels(encoding="http").inc()
        return self.store_headers(robject, conditional), robject.content.raw_data

    def load(self, response: Response, robject: RObject) -> RObject:
        """Populate an object from a fetch or store response."""
        headers = response.headers

        location = headers.get("location")
        if location and not robject.key:
            robject.key = unquote(urlsplit(location).path.rstrip("/").rsplit("/", 1)[-1])

        vclock = headers.get(VCLOCK_HEADER)
        if vclock:
            robject.vclock = vclock

        if self._metrics is not None:
            self._metrics.objects_loaded_total.labels(encoding="http").inc()

        content_type = headers.get("content-type", "")
        if response.code == 300 and content_type.lower().startswith("multipart/mixed"):
            boundary = multipart.extract_boundary(content_type)
            parts = multipart.parse(response.body or b"", boundary) if boundary else []
            if len(parts) > 1:
                logger.info(
                    "siblings_detected",
                    bucket=robject.bucket,
                    key=robject.key,
                    count=len(parts),
                )
                if self._metrics is not None:
                    self._metrics.siblings_detected_total.labels(encoding="http").inc(len(parts))
                return load_siblings(robject, parts, self._load_part, self._resolver)
            if parts:
                self._load_part(parts[0], robject.content)
            return robject

        self._load_content(headers, response.body, robject.content)
        return robject

    def _load_part(self, part: multipart.MultipartPart, content: RContent) -> RContent:
        return self._load_content(part.headers, part.body, content)

    def _load_content(self, headers: Headers, body: bytes | None, content: RContent) -> RContent:
        media_type, charset = parse_content_type(headers.get("content-type", ""))
        if media_type:
            content.content_type = media_type
        content.charset = None
        if charset:
            if is_known_charset(charset):
                content.charset = charset
            else:
                logger.warning("charset_unrecognized", charset=charset)
                if self._metrics is not None:
                    self._metrics.charset_unrecognized_total.inc()

        content.raw_data = body or b""

        etag = headers.get("etag")
        if etag and etag.strip():
            content.etag = etag.strip().strip('"')

        last_modified = headers.get("last-modified")
        if last_modified:
            content.last_modified = parsedate_to_datetime(last_modified)

        link_values = headers.get_all("link")
        if link_values:
            content.links = parse_links(", ".join(link_values), self._prefix)

        content.meta = {
            name[len(META_PREFIX):]: value for name, value in headers.startswith(META_PREFIX)
        }
        content.indexes = {
            name[len(INDEX_PREFIX):]: value for name, value in headers.startswith(INDEX_PREFIX)
        }
        return content
