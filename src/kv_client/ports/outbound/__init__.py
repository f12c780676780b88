"""Outbound ports - collaborators the object mappers depend on.

The mappers never decide how keys are generated or how siblings are
reconciled. Both are injected through these protocols so applications
can plug in their own policy and tests can substitute fakes.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol

from kv_client.domain.entities.robject import RObject


class KeyGenerator(Protocol):
    """Protocol for producing keys for objects stored without one."""

    @abstractmethod
    def generate(self) -> str:
        """Return a new, unique key."""
        ...


class ConflictResolver(Protocol):
    """Protocol for reconciling sibling versions.

    Resolvers receive an object with ``conflict`` set and its siblings
    populated. They may return a resolved object (typically via
    ``RObject.resolve_with``) or the conflicted object unchanged.
    """

    @abstractmethod
    def resolve(self, robject: RObject) -> RObject:
        """Resolve (or decline to resolve) a conflicted object.

        Args:
            robject: Object whose siblings were just loaded.

        Returns:
            The object the caller should see.
        """
        ...


class ObjectMapper(Protocol):
    """Protocol for one wire encoding of ``RObject``.

    Implementations exist for the binary message format and for the
    HTTP/MIME representation. Both share the in-memory object model.
    """

    @abstractmethod
    def dump(self, robject: RObject) -> Any:
        """Serialize an object for a store request."""
        ...

    @abstractmethod
    def load(self, response: Any, robject: RObject) -> RObject:
        """Populate an object from a fetch response.

        Returns:
            The populated object, or whatever the conflict resolver
            yields when the response carried siblings.
        """
        ...


__all__ = [
    "ConflictResolver",
    "KeyGenerator",
    "ObjectMapper",
]
