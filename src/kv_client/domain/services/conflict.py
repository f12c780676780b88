"""Sibling conflict resolution policies."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from kv_client.domain.entities.robject import RObject


ConflictHook = Callable[[RObject], RObject | None]

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class KeepSiblings:
    """Default policy: leave the conflict for the application to handle."""

    def resolve(self, robject: RObject) -> RObject:
        return robject


class HookChainResolver:
    """Runs ``on_conflict`` hooks in registration order.

    The first hook returning an object wins. A hook returns None to pass
    the conflict to the next hook. When no hook resolves, the conflicted
    object is returned unchanged.
    """

    def __init__(self, hooks: Iterable[ConflictHook] = ()) -> None:
        self._hooks: list[ConflictHook] = list(hooks)

    def on_conflict(self, hook: ConflictHook) -> ConflictHook:
        """Register a hook. Usable as a decorator."""
        self._hooks.append(hook)
        return hook

    def resolve(self, robject: RObject) -> RObject:
        if not robject.conflict:
            return robject
        for hook in self._hooks:
            result = hook(robject)
            if isinstance(result, RObject):
                return result
        return robject


class LastWriteWins:
    """Keeps the sibling with the newest last-modified timestamp.

    Siblings without a timestamp sort oldest. Ties go to the sibling the
    store listed first.
    """

    def resolve(self, robject: RObject) -> RObject:
        if not robject.conflict or not robject.siblings:
            return robject
        newest = max(
            robject.siblings,
            key=lambda sibling: sibling.content.last_modified or _EPOCH,
        )
        return robject.resolve_with(newest)
