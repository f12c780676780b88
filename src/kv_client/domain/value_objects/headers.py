"""Case-insensitive, multi-valued HTTP header collection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Headers:
    """HTTP headers keyed case-insensitively.

    Each name may carry several values, kept in arrival order. Names are
    stored lowercased.

    Example:
        >>> headers = Headers({"Content-Type": "text/plain"})
        >>> headers.add("Link", "</riak/b/k>; riaktag=\\"x\\"")
        >>> headers.get("content-type")
        'text/plain'
    """

    def __init__(
        self,
        initial: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._values: dict[str, list[str]] = {}
        if initial is None:
            return
        items = initial.items() if isinstance(initial, Mapping) else initial
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        """Append a value for a header name."""
        self._values.setdefault(name.lower(), []).append(value)

    def parse(self, line: str) -> None:
        """Add a raw ``Name: value`` header line."""
        name, sep, value = line.partition(":")
        if sep and name.strip():
            self.add(name.strip(), value.strip())

    def get(self, name: str, default: str | None = None) -> str | None:
        """Get the first value for a header name."""
        values = self._values.get(name.lower())
        return values[0] if values else default

    def get_all(self, name: str) -> list[str]:
        """Get every value for a header name."""
        return list(self._values.get(name.lower(), []))

    def startswith(self, prefix: str) -> Iterator[tuple[str, str]]:
        """Iterate over (name, value) for names beginning with a prefix."""
        prefix = prefix.lower()
        for name, values in self._values.items():
            if name.startswith(prefix):
                for value in values:
                    yield name, value

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._values.items()}

    def __setitem__(self, name: str, value: str) -> None:
        self._values[name.lower()] = [value]

    def __getitem__(self, name: str) -> list[str]:
        return self._values[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"
