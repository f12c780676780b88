"""Character-encoding registry lookup."""

from __future__ import annotations

import codecs


def is_known_charset(label: str | None) -> bool:
    """Check whether Python's codec registry recognizes a charset label.

    Args:
        label: Charset name as sent by the store (e.g. "UTF-8").

    Returns:
        True if the label names an encoding Python can decode.
    """
    if not label:
        return False
    try:
        codecs.lookup(label)
    except LookupError:
        return False
    return True
