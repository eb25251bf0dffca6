"""Unit tests for the sparse index builder."""

import math

import pytest

from rid_index.components.builder import SparseIndexBuilder, build_index
from rid_index.components.recordfile import RecordFileReader
from rid_index.core.errors import UnsortedInputError
from rid_index.core.types import Index


def unique_keys(n):
    return [f"read.{i}" for i in range(n)]


def build_from(path, chunk_size):
    with RecordFileReader(path) as reader:
        records = list(reader)
        index = build_index(reader, chunk_size)
    return index, records


def test_sampling_1010_records_chunk_100(make_records):
    path = make_records(unique_keys(1010))
    index, records = build_from(path, 100)

    ordinals = list(range(0, 1010, 100)) + [1009]
    assert len(index.sample_ids) == 12
    assert list(index.sample_ids) == [records[n].key for n in ordinals]
    for n in ordinals:
        assert index.sample_offsets[records[n].key] == records[n].offset


@pytest.mark.parametrize(
    "m,c",
    [(1, 1), (1, 10), (10, 1), (10, 3), (99, 100), (100, 100), (101, 100), (1001, 100), (1010, 100)],
)
def test_sample_count_formula(make_records, m, c):
    path = make_records(unique_keys(m))
    index, _ = build_from(path, c)

    extra = 1 if (m - 1) % c else 0
    assert len(index.sample_ids) == math.ceil(m / c) + extra
    assert len(index.sample_offsets) == len(index.sample_ids)


def test_last_record_on_boundary_sampled_once(make_records):
    path = make_records(unique_keys(1001))
    index, records = build_from(path, 100)

    assert len(index.sample_ids) == 11
    assert index.sample_ids[-1] == records[-1].key
    assert index.sample_offsets[records[-1].key] == records[-1].offset


def test_last_sample_points_at_last_record_not_eof(make_records):
    path = make_records(unique_keys(37))
    index, records = build_from(path, 10)

    assert index.sample_ids[-1] == "read.36"
    assert index.offset_at(-1) == records[-1].offset


def test_start_offset_and_chunk_size_recorded(make_records):
    path = make_records(unique_keys(5))
    index, records = build_from(path, 2)

    assert index.chunk_size == 2
    assert index.start_offset == records[0].offset
    assert index.offset_at(0) == index.start_offset


def test_unsorted_input_rejected(make_records):
    path = make_records(["read.1", "read.3", "read.2"])
    with RecordFileReader(path) as reader:
        with pytest.raises(UnsortedInputError, match="read.3"):
            build_index(reader, 100)


def test_single_inverted_pair_rejected(make_records):
    path = make_records(["B", "A"])
    with RecordFileReader(path) as reader:
        with pytest.raises(UnsortedInputError):
            build_index(reader, 1)


def test_numeric_order_is_sorted(make_records):
    # Lexically unsorted, numerically sorted
    path = make_records(["read.9", "read.10", "read.100"])
    index, _ = build_from(path, 1)
    assert index.sample_ids == ("read.9", "read.10", "read.100")


def test_empty_stream_gives_empty_index(make_records):
    path = make_records([])
    index, _ = build_from(path, 10)

    assert index.is_empty
    assert len(index) == 0
    assert dict(index.sample_offsets) == {}


def test_duplicate_keys_sampled_once(make_records):
    keys = ["read.1", "read.1", "read.2", "read.2", "read.3", "read.3"]
    path = make_records(keys)
    index, records = build_from(path, 1)

    assert index.sample_ids == ("read.1", "read.2", "read.3")
    # Inner samples point at the first record of their run
    assert index.sample_offsets["read.1"] == records[0].offset
    assert index.sample_offsets["read.2"] == records[2].offset
    # The final sample points at the last record
    assert index.sample_offsets["read.3"] == records[5].offset


def test_trailing_run_moves_last_sample_to_last_record(make_records):
    path = make_records(["read.1", "read.2", "read.2"])
    index, records = build_from(path, 1)

    assert index.sample_ids == ("read.1", "read.2")
    assert index.offset_at(0) == records[0].offset
    assert index.offset_at(-1) == records[-1].offset


def test_single_key_stream(make_records):
    path = make_records(["read.1"] * 4)
    index, records = build_from(path, 2)

    assert index.sample_ids == ("read.1",)
    assert index.offset_at(0) == records[-1].offset
    assert index.start_offset == records[0].offset


def test_builder_rejects_bad_chunk_size():
    with pytest.raises(ValueError):
        SparseIndexBuilder(0, 0)


def test_builder_used_directly():
    builder = SparseIndexBuilder(chunk_size=2, start_offset=0)
    for offset, key in enumerate(["a", "b", "c", "d"]):
        builder.add(key, offset * 10)
    index = builder.finalize()

    assert index.sample_ids == ("a", "c", "d")
    assert dict(index.sample_offsets) == {"a": 0, "c": 20, "d": 30}


def test_index_is_immutable(make_records):
    path = make_records(unique_keys(3))
    index, _ = build_from(path, 1)

    with pytest.raises(TypeError):
        index.sample_offsets["read.0"] = 1
    with pytest.raises(AttributeError):
        index.chunk_size = 5


def test_index_rejects_sample_without_offset():
    with pytest.raises(ValueError, match="without an offset"):
        Index(chunk_size=1, start_offset=0, sample_ids=("a", "b"), sample_offsets={"a": 0})


def test_index_rejects_extra_offsets():
    with pytest.raises(ValueError):
        Index(chunk_size=1, start_offset=0, sample_ids=("a",), sample_offsets={"a": 0, "b": 9})
