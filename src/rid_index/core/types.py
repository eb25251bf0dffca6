"""Common type definitions for rid_index.

Defines fundamental types used across all components.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Core primitive types
Key = str
Offset = int


@dataclass(frozen=True)
class Record:
    """A single record read from a record stream.

    Attributes:
        key: Sort/lookup key (e.g. a read ID)
        offset: Byte offset at which the record begins in its stream
        payload: Opaque record body
    """

    key: Key
    offset: Offset
    payload: bytes = b""


@dataclass(frozen=True)
class Index:
    """Sparse positional index over a key-sorted record stream.

    Attributes:
        chunk_size: Sampling interval (every Nth record is sampled)
        start_offset: Byte offset of the first record in the stream
        sample_ids: Sampled keys, strictly increasing under compare_keys
        sample_offsets: Sampled key -> offset of the sampled record

    Invariants:
        - len(sample_ids) == len(sample_offsets)
        - The last sample is the key of the last record in the stream
        - Immutable once built; a data change requires a rebuild
    """

    chunk_size: int
    start_offset: Offset
    sample_ids: tuple[Key, ...] = ()
    sample_offsets: Mapping[Key, Offset] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "sample_ids", tuple(self.sample_ids))
        object.__setattr__(self, "sample_offsets", MappingProxyType(dict(self.sample_offsets)))

        missing = [k for k in self.sample_ids if k not in self.sample_offsets]
        if missing:
            raise ValueError(f"Sample ids without an offset: {missing!r}")
        if len(self.sample_ids) != len(self.sample_offsets):
            raise ValueError(
                f"{len(self.sample_ids)} sample ids but {len(self.sample_offsets)} sample offsets"
            )

    def __len__(self) -> int:
        return len(self.sample_ids)

    @property
    def is_empty(self) -> bool:
        """True when the index was built from an empty stream."""
        return not self.sample_ids

    def offset_at(self, position: int) -> Offset:
        """Return the stream offset of the sample at ``position``."""
        return self.sample_offsets[self.sample_ids[position]]
