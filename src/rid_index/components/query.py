"""Key lookups over a sparse index.

Resolves a key to every record carrying it by bracketing the key between two
samples and scanning only the stream region they bound.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterator, Sequence

from ..core.errors import IndexMismatchError
from ..core.ordering import compare_keys, sort_key
from ..core.types import Index, Key, Offset, Record
from ..interfaces.stream import RecordStream

logger = logging.getLogger(__name__)


def find_bracket(key: Key, sample_ids: Sequence[Key]) -> tuple[int, int] | None:
    """Binary search sample_ids for the samples bounding ``key``.

    Returns (i, i) when ``key`` is a sample, (i, i + 1) when it falls strictly
    between two adjacent samples, or None when it lies outside the samples.
    """
    lo, hi = 0, len(sample_ids) - 1
    while lo <= hi:
        mid = (lo + hi) // 2
        cmp = compare_keys(key, sample_ids[mid])
        if cmp == 0:
            return mid, mid
        if cmp < 0:
            if mid > 0 and compare_keys(key, sample_ids[mid - 1]) > 0:
                return mid - 1, mid
            hi = mid - 1
        else:
            if mid < len(sample_ids) - 1 and compare_keys(key, sample_ids[mid + 1]) < 0:
                return mid, mid + 1
            lo = mid + 1
    return None


def iter_region(stream: RecordStream, start: Offset, stop: Offset | None) -> Iterator[Record]:
    """Yield the records whose offsets lie in [start, stop).

    The first record is read unconditionally. A stop of None scans to the end
    of the stream.
    """
    stream.seek(start)
    record = stream.read_record()
    while record is not None:
        yield record
        if stop is not None and stream.tell() >= stop:
            break
        record = stream.read_record()


def read_region(stream: RecordStream, start: Offset, stop: Offset | None) -> list[Record]:
    return list(iter_region(stream, start, stop))


def _same_key(records: Sequence[Record], key: Key) -> list[Record]:
    return [r for r in records if r.key == key]


class QueryEngine:
    """Resolve keys against one Index and one record stream.

    Args:
        index: Loaded index for the stream
        stream: Seekable stream the index was built from
        strict: Raise IndexMismatchError instead of logging when the stream
            does not hold the record a sample points at

    Not safe for concurrent use: lookups move the stream cursor.
    """

    def __init__(self, index: Index, stream: RecordStream, strict: bool = False):
        self.index = index
        self.stream = stream
        self.strict = strict

    def lookup(self, key: Key) -> list[Record]:
        """Return every record whose key is ``key``, in stream order."""
        ids = self.index.sample_ids
        if not ids:
            logger.debug("Lookup against an empty index")
            return []

        # Outside the sampled range: nothing to read
        if compare_keys(key, ids[0]) < 0 or compare_keys(key, ids[-1]) > 0:
            return []

        bracket = find_bracket(key, ids)
        if bracket is None:
            return []

        before, after = bracket
        logger.debug(f"Key {key!r} bracketed by samples {before}..{after}")
        if before == after:
            return self._expand_sample(key, before)
        return self._scan_between(key, before, after)

    def _mismatch(self, message: str) -> list[Record]:
        if self.strict:
            raise IndexMismatchError(message)
        logger.warning(message)
        return []

    def _expand_sample(self, key: Key, i: int) -> list[Record]:
        index = self.index
        last = len(index.sample_ids) - 1

        # Records equal to key just before the sample, nearest first. A stream
        # holding a single key run has its only sample past start_offset.
        preceding: list[Record] = []
        prev = index.offset_at(i - 1) if i > 0 else index.start_offset
        if prev < index.offset_at(i):
            region = read_region(self.stream, prev, index.offset_at(i))
            for record in reversed(region):
                if compare_keys(record.key, key) != 0:
                    break
                preceding.append(record)
            preceding.reverse()

        stop = index.offset_at(i + 1) if i < last else None
        region = iter_region(self.stream, index.offset_at(i), stop)
        hit = next(region, None)
        if hit is None or compare_keys(hit.key, key) != 0:
            found = "end of stream" if hit is None else repr(hit.key)
            return self._mismatch(
                f"Index sample {index.sample_ids[i]!r} points at {found} "
                f"(offset {index.offset_at(i)}); index does not match stream"
            )

        following: list[Record] = []
        for record in region:
            if compare_keys(record.key, key) != 0:
                break
            following.append(record)

        return _same_key(preceding + [hit] + following, key)

    def _scan_between(self, key: Key, before: int, after: int) -> list[Record]:
        index = self.index
        records = read_region(self.stream, index.offset_at(before), index.offset_at(after))

        probe = sort_key(key)
        lo = bisect.bisect_left(records, probe, key=lambda r: sort_key(r.key))
        hi = bisect.bisect_right(records, probe, lo=lo, key=lambda r: sort_key(r.key))
        if lo == hi:
            return []
        return _same_key(records[lo:hi], key)


def lookup(stream: RecordStream, key: Key, index: Index, strict: bool = False) -> list[Record]:
    """Return all records in ``stream`` whose key is ``key``, in stream order."""
    return QueryEngine(index, stream, strict=strict).lookup(key)
