"""Key generation for objects stored without a key."""

from __future__ import annotations

import uuid


class UUIDKeyGenerator:
    """Generates random 32-character hex keys."""

    def generate(self) -> str:
        return uuid.uuid4().hex
