"""Sibling handling shared by the binary and HTTP object mappers."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

from kv_client.domain.entities.robject import RContent, RObject
from kv_client.ports.outbound import ConflictResolver

E = TypeVar("E")


def load_siblings(
    robject: RObject,
    entries: Sequence[E],
    load_content: Callable[[E, RContent], RContent],
    resolver: ConflictResolver,
) -> RObject:
    """Turn several content entries into siblings and resolve them.

    Each entry is decoded into a fresh sibling carrying the parent's
    bucket, key and vector clock. The resolver's answer is returned as-is,
    which may be the still-conflicted parent.

    Args:
        robject: Parent object; its vclock must already be loaded.
        entries: Wire content entries, at least two.
        load_content: Decoder filling an ``RContent`` from one entry.
        resolver: Conflict resolution policy.

    Returns:
        Whatever the resolver yields.
    """
    robject.conflict = True
    siblings = []
    for entry in entries:
        sibling = robject.new_sibling()
        load_content(entry, sibling.content)
        siblings.append(sibling)
    robject.siblings = siblings
    return resolver.resolve(robject)
