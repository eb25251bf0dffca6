"""Binary record file with seek/tell support.

Provides the concrete record stream used by the index builder and lookups.
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterable, Iterator
from pathlib import Path

from ..core.errors import RecordFormatError
from ..core.types import Key, Offset, Record

logger = logging.getLogger(__name__)

# File format: [magic(4B)][version(1B)] then records
# Record format: [key_len(4B)][key utf-8][payload_len(8B)][payload]
MAGIC = b"RREC"
VERSION = 1
HEADER = struct.Struct("<4sB")
KEY_LEN = struct.Struct("<I")
PAYLOAD_LEN = struct.Struct("<Q")


class RecordFileWriter:
    """Append records to a new record file.

    Args:
        path: Destination file (truncated if it exists)

    Invariants:
        - Records are written in the order they are added
        - No ordering is enforced here; see sort_records
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fd = open(self.path, "wb")
        self._fd.write(HEADER.pack(MAGIC, VERSION))
        self.count = 0

    def add(self, key: Key, payload: bytes = b"") -> Offset:
        """Append one record and return the offset it was written at."""
        if self._fd is None:
            raise RuntimeError("Writer is closed")

        offset = self._fd.tell()
        key_bytes = key.encode("utf-8")
        self._fd.write(KEY_LEN.pack(len(key_bytes)))
        self._fd.write(key_bytes)
        self._fd.write(PAYLOAD_LEN.pack(len(payload)))
        self._fd.write(payload)
        self.count += 1
        return offset

    def add_record(self, record: Record) -> Offset:
        return self.add(record.key, record.payload)

    def close(self) -> None:
        """Flush and close the file."""
        if self._fd:
            self._fd.close()
            self._fd = None
            logger.debug(f"Closed record file {self.path} ({self.count} records)")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class RecordFileReader:
    """Random-access reader over a record file.

    Args:
        path: Record file to open

    Implements the RecordStream protocol: offsets are plain byte offsets.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._fd = open(self.path, "rb")
        try:
            header = self._fd.read(HEADER.size)
            if len(header) < HEADER.size:
                raise RecordFormatError(f"{self.path}: file too short for header")
            magic, version = HEADER.unpack(header)
            if magic != MAGIC:
                raise RecordFormatError(f"{self.path}: invalid magic {magic!r}")
            if version != VERSION:
                raise RecordFormatError(f"{self.path}: unsupported version {version}")
        except BaseException:
            self._fd.close()
            raise
        self.start_offset: Offset = HEADER.size

    def seek(self, offset: Offset) -> None:
        self._fd.seek(offset)

    def tell(self) -> Offset:
        return self._fd.tell()

    def _read_exact(self, size: int, offset: Offset, what: str) -> bytes:
        data = self._fd.read(size)
        if len(data) < size:
            raise RecordFormatError(f"{self.path}: truncated {what} in record at offset {offset}")
        return data

    def read_record(self) -> Record | None:
        """Read the record at the cursor, or None at end of file."""
        offset = self._fd.tell()
        key_len_bytes = self._fd.read(KEY_LEN.size)
        if not key_len_bytes:
            return None  # EOF
        if len(key_len_bytes) < KEY_LEN.size:
            raise RecordFormatError(f"{self.path}: truncated key length at offset {offset}")

        key_len = KEY_LEN.unpack(key_len_bytes)[0]
        key_bytes = self._read_exact(key_len, offset, "key")
        payload_len = PAYLOAD_LEN.unpack(self._read_exact(PAYLOAD_LEN.size, offset, "payload length"))[0]
        payload = self._read_exact(payload_len, offset, "payload")

        try:
            key = key_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RecordFormatError(f"{self.path}: undecodable key at offset {offset}") from e
        return Record(key, offset, payload)

    def __iter__(self) -> Iterator[Record]:
        """Iterate all records from the start of the file."""
        self.seek(self.start_offset)
        while True:
            record = self.read_record()
            if record is None:
                break
            yield record

    def close(self) -> None:
        """Release the file descriptor."""
        if self._fd:
            self._fd.close()
            self._fd = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def write_records(path: str | Path, records: Iterable[tuple[Key, bytes]]) -> int:
    """Write (key, payload) pairs to a new record file; return the count."""
    with RecordFileWriter(path) as writer:
        for key, payload in records:
            writer.add(key, payload)
        return writer.count
