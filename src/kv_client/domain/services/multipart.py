"""Parser for ``multipart/mixed`` response bodies.

The store answers a fetch of a conflicted key with ``300 Multiple
Choices`` and one MIME part per sibling:

    \\r\\n--BOUNDARY\\r\\n
    Content-Type: text/plain\\r\\n
    \\r\\n
    first sibling\\r\\n
    --BOUNDARY\\r\\n
    ...
    \\r\\n--BOUNDARY--\\r\\n

Parts whose own content type is ``multipart/mixed`` are parsed
recursively into ``parts``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from kv_client.domain.value_objects.headers import Headers


_BOUNDARY_PARAM = re.compile(r"""boundary=["']?([^"';]+)["']?""", re.IGNORECASE)
_HEADER_END = re.compile(rb"\r?\n\r?\n")
_LINE_END = re.compile(rb"\r?\n")


@dataclass
class MultipartPart:
    """One section of a multipart body."""

    headers: Headers
    body: bytes = b""
    parts: list[MultipartPart] = field(default_factory=list)


def extract_boundary(content_type: str) -> str | None:
    """Get the boundary parameter from a Content-Type value."""
    match = _BOUNDARY_PARAM.search(content_type)
    return match.group(1) if match else None


def parse(data: bytes, boundary: str) -> list[MultipartPart]:
    """Split a multipart body into its parts.

    Args:
        data: Raw response body.
        boundary: Boundary from the Content-Type header.

    Returns:
        Parsed parts in body order. A body without a closing boundary
        yields no parts.
    """
    marker = re.escape(boundary.encode("utf-8"))
    if data.startswith(b"--"):
        data = b"\r\n" + data
    end = re.search(rb"\r?\n--" + marker + rb"--\r?\n?", data)
    if end is None:
        return []

    contents = data[: end.start()]
    sections = re.split(rb"\r?\n--" + marker + rb"\r?\n", contents)

    parts = []
    for section in sections:
        if not section.strip():
            continue
        parts.append(_parse_section(section))
    return parts


def _parse_section(section: bytes) -> MultipartPart:
    split = _HEADER_END.search(section)
    if split is None:
        # headers only, empty body
        head, body = section, b""
    else:
        head, body = section[: split.start()], section[split.end():]

    headers = Headers()
    for line in _LINE_END.split(head):
        if line:
            headers.parse(line.decode("latin-1"))

    content_type = headers.get("content-type", "")
    if content_type.lower().startswith("multipart/mixed"):
        nested = extract_boundary(content_type)
        if nested:
            return MultipartPart(headers=headers, parts=parse(body, nested))
    return MultipartPart(headers=headers, body=body)
