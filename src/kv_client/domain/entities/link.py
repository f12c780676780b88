"""Link entity - a typed relationship between two objects."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Link:
    """A tagged pointer from one object to another.

    A link without a key only names a bucket. Such links are kept in
    memory but never written to the wire.
    """

    bucket: str | None
    key: str | None
    tag: str | None

    def is_complete(self) -> bool:
        """Check whether the link points at a concrete object."""
        return bool(self.key)

    def __str__(self) -> str:
        return f"{self.bucket}/{self.key} [{self.tag}]"
