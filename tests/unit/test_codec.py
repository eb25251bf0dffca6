"""Unit tests for the binary index codec."""

import struct
import zlib

import pytest

from rid_index.components.builder import build_index
from rid_index.components.codec import HEADER, BinaryIndexCodec, decode, encode
from rid_index.components.recordfile import RecordFileReader
from rid_index.core.errors import IndexCorruptError
from rid_index.core.types import Index


@pytest.fixture
def index(make_records):
    path = make_records([f"SRR42.{i}" for i in range(250)])
    with RecordFileReader(path) as reader:
        return build_index(reader, 16)


def reseal(payload):
    """Append a valid CRC so only the structural checks can fail."""
    return payload + struct.pack("<I", zlib.crc32(payload))


def test_round_trip_preserves_every_field(index):
    restored = decode(encode(index))

    assert restored == index
    assert restored.chunk_size == index.chunk_size
    assert restored.start_offset == index.start_offset
    assert restored.sample_ids == index.sample_ids
    assert dict(restored.sample_offsets) == dict(index.sample_offsets)


def test_round_trip_empty_index():
    empty = Index(chunk_size=100, start_offset=5)
    assert decode(encode(empty)) == empty


def test_round_trip_unicode_and_large_offsets():
    ix = Index(
        chunk_size=3,
        start_offset=2**40,
        sample_ids=("lé:1", "lé:2"),
        sample_offsets={"lé:1": 2**40, "lé:2": 2**62},
    )
    assert BinaryIndexCodec().decode(BinaryIndexCodec().encode(ix)) == ix


def test_truncated_blob_rejected(index):
    blob = encode(index)
    for cut in (0, 3, HEADER.size, len(blob) // 2, len(blob) - 1):
        with pytest.raises(IndexCorruptError):
            decode(blob[:cut])


def test_bit_flip_rejected(index):
    blob = bytearray(encode(index))
    blob[HEADER.size + 2] ^= 0x40
    with pytest.raises(IndexCorruptError, match="CRC"):
        decode(bytes(blob))


def test_trailing_garbage_rejected(index):
    payload = encode(index)[:-4]
    with pytest.raises(IndexCorruptError, match="trailing"):
        decode(reseal(payload + b"\x00\x00"))


def test_bad_magic_rejected(index):
    payload = b"XXXX" + encode(index)[4:-4]
    with pytest.raises(IndexCorruptError, match="magic"):
        decode(reseal(payload))


def test_unknown_version_rejected(index):
    payload = bytearray(encode(index)[:-4])
    payload[4] = 99
    with pytest.raises(IndexCorruptError, match="version"):
        decode(reseal(bytes(payload)))


def test_sample_count_beyond_data_rejected():
    payload = HEADER.pack(b"RIDX", 1, 10, 5, 3)
    with pytest.raises(IndexCorruptError):
        decode(reseal(payload))


def test_out_of_order_samples_rejected():
    ix = Index(chunk_size=1, start_offset=0, sample_ids=("b", "a"), sample_offsets={"a": 1, "b": 0})
    with pytest.raises(IndexCorruptError, match="order"):
        decode(encode(ix))


def test_not_executable_text():
    # A textual dump of a structure is never evaluated
    with pytest.raises(IndexCorruptError):
        decode(b"{'chunk_size': 1, 'ids': [], 'pos': {}}")
