"""Binary wire message shapes.

These mirror the store's protocol-buffer messages field for field. Every
string-valued field holds raw ``bytes``; no text encoding is applied on
the way to or from the socket. Framing of these messages (varints,
length prefixes) belongs to the connection layer.

    Message      | Fields
    -------------|------------------------------------------------------
    PutRequest   | bucket, key, vclock, content, return_body
    GetResponse  | content[], vclock, unchanged
    WireContent  | value, content_type, charset, content_encoding, vtag,
                 | links[], last_mod, last_mod_usecs, usermeta[],
                 | indexes[], deleted
    WireLink     | bucket, key, tag
    WirePair     | key, value
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class WirePair:
    """Flat key/value pair used for user metadata and indexes."""

    key: bytes
    value: bytes | None = None


@dataclass
class WireLink:
    """Relationship to another object."""

    bucket: bytes | None = None
    key: bytes | None = None
    tag: bytes | None = None


@dataclass
class WireContent:
    """One content version of an object."""

    value: bytes
    content_type: bytes | None = None
    charset: bytes | None = None
    content_encoding: bytes | None = None
    vtag: bytes | None = None
    links: list[WireLink] = field(default_factory=list)
    last_mod: int | None = None
    last_mod_usecs: int | None = None
    usermeta: list[WirePair] = field(default_factory=list)
    indexes: list[WirePair] = field(default_factory=list)
    deleted: bool | None = None


@dataclass
class PutRequest:
    """Store request for a single object."""

    bucket: bytes
    key: bytes | None = None
    vclock: bytes | None = None
    content: WireContent | None = None
    return_body: bool | None = None


@dataclass
class GetResponse:
    """Fetch (or return-body store) response.

    More than one ``content`` entry means the store holds siblings.
    """

    content: list[WireContent] = field(default_factory=list)
    vclock: bytes | None = None
    unchanged: bool | None = None
