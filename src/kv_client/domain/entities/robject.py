"""Object and content-version entities.

An ``RObject`` is identified by its bucket and key. It carries the vector
clock handed out by the store and either one authoritative ``RContent``
or, after a read returned concurrent writes, a list of sibling objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from kv_client.domain.entities.link import Link


DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class RContent:
    """One concrete state of an object's body."""

    raw_data: bytes = b""
    content_type: str = DEFAULT_CONTENT_TYPE
    charset: str | None = None
    etag: str | None = None
    last_modified: datetime | None = None
    links: list[Link] = field(default_factory=list)
    meta: dict[str, str] = field(default_factory=dict)
    indexes: dict[str, str] = field(default_factory=dict)

    @property
    def data(self) -> bytes | str:
        """The payload, decoded to text when a charset is declared.

        Returns:
            Decoded text, or the raw bytes when no charset is set or the
            payload does not decode with it.
        """
        if self.charset:
            try:
                return self.raw_data.decode(self.charset)
            except (LookupError, UnicodeDecodeError):
                return self.raw_data
        return self.raw_data

    @data.setter
    def data(self, value: bytes | str) -> None:
        if isinstance(value, str):
            self.charset = self.charset or "utf-8"
            self.raw_data = value.encode(self.charset)
        else:
            self.raw_data = bytes(value)


@dataclass
class RObject:
    """An object in a bucket of the key-value store."""

    bucket: str
    key: str | None = None
    vclock: str | None = None  # base64 text
    content: RContent = field(default_factory=RContent)
    conflict: bool = False
    siblings: list[RObject] = field(default_factory=list)

    def get_full_path(self) -> str:
        """Get bucket/key path."""
        return f"{self.bucket}/{self.key}"

    def is_conflicted(self) -> bool:
        """Check whether the store returned concurrent versions."""
        return self.conflict

    def new_sibling(self) -> RObject:
        """Create an empty sibling sharing this object's identity and clock."""
        return RObject(bucket=self.bucket, key=self.key, vclock=self.vclock)

    def resolve_with(self, sibling: RObject) -> RObject:
        """Adopt a sibling's content as the single authoritative version.

        Args:
            sibling: One of this object's siblings.

        Returns:
            This object, no longer in conflict.
        """
        self.content = sibling.content
        self.conflict = False
        self.siblings = []
        return self
