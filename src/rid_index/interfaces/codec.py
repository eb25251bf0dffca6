"""Protocol definition for index serialization."""

from __future__ import annotations

from typing import Protocol

from ..core.types import Index


class IndexCodec(Protocol):
    """Turns an Index into an opaque byte blob and back."""

    def encode(self, index: Index) -> bytes:
        """Serialize ``index``."""
        ...

    def decode(self, blob: bytes) -> Index:
        """Rebuild an Index; raises IndexCorruptError on malformed input."""
        ...
