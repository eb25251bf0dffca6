"""Binary index codec.

Serializes an Index to a versioned, checksummed byte blob and back.
"""

from __future__ import annotations

import struct
import zlib

from ..core.errors import IndexCorruptError
from ..core.ordering import compare_keys
from ..core.types import Index

# Blob format:
# [magic (4B)] [version (1B)] [chunk_size (8B)] [start_offset (8B)] [n_samples (8B)]
# n_samples x { [key_len (4B)] [key utf-8] [offset (8B)] }
# [crc32 of everything above (4B)]
MAGIC = b"RIDX"
VERSION = 1
HEADER = struct.Struct("<4sBQQQ")
KEY_LEN = struct.Struct("<I")
OFFSET = struct.Struct("<Q")
CRC = struct.Struct("<I")


class BinaryIndexCodec:
    """Length-prefixed binary encoding of an Index.

    Invariants:
        - decode(encode(ix)) == ix
        - Any truncation, bit flip or trailing garbage raises IndexCorruptError
    """

    def encode(self, index: Index) -> bytes:
        parts = [HEADER.pack(MAGIC, VERSION, index.chunk_size, index.start_offset, len(index.sample_ids))]
        for key in index.sample_ids:
            key_bytes = key.encode("utf-8")
            parts.append(KEY_LEN.pack(len(key_bytes)))
            parts.append(key_bytes)
            parts.append(OFFSET.pack(index.sample_offsets[key]))
        payload = b"".join(parts)
        return payload + CRC.pack(zlib.crc32(payload))

    def decode(self, blob: bytes) -> Index:
        if len(blob) < HEADER.size + CRC.size:
            raise IndexCorruptError(f"Index blob too short ({len(blob)} bytes)")

        payload, crc_bytes = blob[:-CRC.size], blob[-CRC.size:]
        stored_crc = CRC.unpack(crc_bytes)[0]
        computed_crc = zlib.crc32(payload)
        if stored_crc != computed_crc:
            raise IndexCorruptError(f"CRC mismatch: expected {computed_crc:x}, got {stored_crc:x}")

        magic, version, chunk_size, start_offset, count = HEADER.unpack_from(payload, 0)
        if magic != MAGIC:
            raise IndexCorruptError(f"Invalid magic: {magic!r}")
        if version != VERSION:
            raise IndexCorruptError(f"Unsupported index version: {version}")
        if chunk_size == 0:
            raise IndexCorruptError("chunk_size must be positive")

        pos = HEADER.size
        ids = []
        offsets = {}
        try:
            for _ in range(count):
                key_len = KEY_LEN.unpack_from(payload, pos)[0]
                pos += KEY_LEN.size
                key_bytes = payload[pos:pos + key_len]
                if len(key_bytes) < key_len:
                    raise IndexCorruptError(f"Truncated key at byte {pos}")
                pos += key_len
                offset = OFFSET.unpack_from(payload, pos)[0]
                pos += OFFSET.size

                key = key_bytes.decode("utf-8")
                if ids and compare_keys(ids[-1], key) >= 0:
                    raise IndexCorruptError(f"Sample keys out of order at {key!r}")
                ids.append(key)
                offsets[key] = offset
        except (struct.error, UnicodeDecodeError) as e:
            raise IndexCorruptError(f"Malformed sample table: {e}") from e

        if pos != len(payload):
            raise IndexCorruptError(f"{len(payload) - pos} trailing bytes after sample table")

        return Index(
            chunk_size=chunk_size,
            start_offset=start_offset,
            sample_ids=ids,
            sample_offsets=offsets,
        )


_default_codec = BinaryIndexCodec()


def encode(index: Index) -> bytes:
    """Serialize ``index`` with the default codec."""
    return _default_codec.encode(index)


def decode(blob: bytes) -> Index:
    """Deserialize a blob produced by encode()."""
    return _default_codec.decode(blob)
