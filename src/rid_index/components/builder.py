"""Sparse index builder.

Streams a key-sorted record stream once and samples every Nth record.
"""

from __future__ import annotations

import logging

from ..core.errors import UnsortedInputError
from ..core.ordering import compare_keys
from ..core.types import Index, Key, Offset
from ..interfaces.stream import RecordStream

logger = logging.getLogger(__name__)


class SparseIndexBuilder:
    """Accumulate samples from records fed in stream order.

    Args:
        chunk_size: Sample every N records
        start_offset: Offset of the first record in the stream

    Invariants:
        - Records must be added in non-decreasing key order
        - Record 0, every chunk_size-th record and the last record are sampled
        - A sample equal to the previous sample is not added twice
        - The last sample's offset is where the last record begins
    """

    def __init__(self, chunk_size: int, start_offset: Offset):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.start_offset = start_offset
        self.count = 0

        self._ids: list[Key] = []
        self._offsets: dict[Key, Offset] = {}
        self._last_key: Key | None = None
        self._last_offset: Offset | None = None

    def _sample(self, key: Key, offset: Offset) -> None:
        if self._ids and compare_keys(self._ids[-1], key) == 0:
            return
        self._ids.append(key)
        self._offsets[key] = offset

    def add(self, key: Key, offset: Offset) -> None:
        """Register the record that begins at ``offset``."""
        if self._last_key is not None and compare_keys(self._last_key, key) > 0:
            raise UnsortedInputError(
                f"Records are unsorted: {self._last_key!r} precedes {key!r} "
                f"(record {self.count} at offset {offset})"
            )

        if self.count % self.chunk_size == 0:
            self._sample(key, offset)

        self._last_key = key
        self._last_offset = offset
        self.count += 1

    def finalize(self) -> Index:
        """Sample the last record and return the finished Index."""
        if self._last_key is not None:
            if self._ids and compare_keys(self._ids[-1], self._last_key) == 0:
                # Trailing run: move the final sample onto the last record
                self._offsets[self._ids[-1]] = self._last_offset
            else:
                self._sample(self._last_key, self._last_offset)
        return Index(
            chunk_size=self.chunk_size,
            start_offset=self.start_offset,
            sample_ids=self._ids,
            sample_offsets=self._offsets,
        )


def build_index(stream: RecordStream, chunk_size: int) -> Index:
    """Build a sparse Index by reading ``stream`` to completion.

    Raises:
        UnsortedInputError: two consecutive records are out of order
    """
    stream.seek(stream.start_offset)
    builder = SparseIndexBuilder(chunk_size, stream.start_offset)

    while True:
        offset = stream.tell()
        record = stream.read_record()
        if record is None:
            break
        builder.add(record.key, offset)

    index = builder.finalize()
    logger.info(f"Indexed {builder.count} records into {len(index)} samples (chunk_size={chunk_size})")
    return index
