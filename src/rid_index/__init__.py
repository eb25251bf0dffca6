"""rid_index - sparse on-disk index for key-sorted record files."""

from .components.builder import SparseIndexBuilder, build_index
from .components.codec import BinaryIndexCodec, decode, encode
from .components.index_file import index_records, load_index, read_index, write_index
from .components.query import QueryEngine, lookup
from .components.recordfile import RecordFileReader, RecordFileWriter
from .components.sorter import sort_records
from .core.config import IndexConfig, load_config
from .core.errors import (
    IndexCorruptError,
    IndexMismatchError,
    RecordFormatError,
    RidIndexError,
    StaleIndexError,
    StaleIndexWarning,
    UnsortedInputError,
)
from .core.ordering import compare_keys, sort_key
from .core.store import IndexedRecordStore
from .core.types import Index, Key, Offset, Record

__all__ = [
    "BinaryIndexCodec",
    "Index",
    "IndexConfig",
    "IndexCorruptError",
    "IndexMismatchError",
    "IndexedRecordStore",
    "Key",
    "Offset",
    "QueryEngine",
    "Record",
    "RecordFileReader",
    "RecordFileWriter",
    "RecordFormatError",
    "RidIndexError",
    "SparseIndexBuilder",
    "StaleIndexError",
    "StaleIndexWarning",
    "UnsortedInputError",
    "build_index",
    "compare_keys",
    "decode",
    "encode",
    "index_records",
    "load_config",
    "load_index",
    "lookup",
    "read_index",
    "sort_key",
    "sort_records",
    "write_index",
]
