"""Index file persistence.

Stores encoded indices as zlib-compressed files written via temp-then-rename.
"""

from __future__ import annotations

import logging
import os
import tempfile
import warnings
import zlib
from pathlib import Path

from ..core.config import STALENESS_POLICIES
from ..core.errors import IndexCorruptError, StaleIndexError, StaleIndexWarning
from ..core.types import Index
from ..interfaces.codec import IndexCodec
from .builder import build_index
from .codec import BinaryIndexCodec
from .recordfile import RecordFileReader

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".ridx"
DEFAULT_CHUNK_SIZE = 50_000


def index_path_for(data_path: str | Path, suffix: str = DEFAULT_SUFFIX) -> Path:
    """Default index location: the data file name plus ``suffix``."""
    data_path = Path(data_path)
    return data_path.with_name(data_path.name + suffix)


def write_index(
    index: Index,
    path: str | Path,
    compress_level: int = 6,
    codec: IndexCodec | None = None,
) -> Path:
    """Atomically write ``index`` to ``path``.

    The blob is written to a temp file in the target directory, fsynced and
    renamed over ``path``; on failure the temp file is removed and any
    existing index is left untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    codec = codec or BinaryIndexCodec()
    data = zlib.compress(codec.encode(index), compress_level)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Wrote index {path} ({len(index)} samples, {len(data)} bytes)")
    return path


def read_index(path: str | Path, codec: IndexCodec | None = None) -> Index:
    """Read and decode an index file.

    Raises:
        FileNotFoundError: ``path`` does not exist
        IndexCorruptError: the file is not a valid index
    """
    path = Path(path)
    raw = path.read_bytes()
    try:
        blob = zlib.decompress(raw)
    except zlib.error as e:
        raise IndexCorruptError(f"{path}: cannot decompress index: {e}") from e
    try:
        return (codec or BinaryIndexCodec()).decode(blob)
    except IndexCorruptError as e:
        raise IndexCorruptError(f"{path}: {e}") from e


def index_records(
    data_path: str | Path,
    index_path: str | Path | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    compress_level: int = 6,
) -> Path:
    """Build an index over a sorted record file and persist it.

    Returns the path of the written index. Nothing is written if the data is
    unsorted.
    """
    if index_path is None:
        index_path = index_path_for(data_path)
    with RecordFileReader(data_path) as reader:
        index = build_index(reader, chunk_size)
    return write_index(index, index_path, compress_level)


def is_stale(data_path: str | Path, index_path: str | Path) -> bool:
    """True if the data file was modified after the index was written."""
    return Path(data_path).stat().st_mtime > Path(index_path).stat().st_mtime


def load_index(
    data_path: str | Path | None = None,
    index_path: str | Path | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    staleness: str = "warn",
    suffix: str = DEFAULT_SUFFIX,
    compress_level: int = 6,
) -> Index:
    """Load the index for a record file, building it if it does not exist.

    Args:
        data_path: Sorted record file; used to derive index_path, to build a
            missing index and to check staleness
        index_path: Explicit index location
        chunk_size: Used only when a missing index has to be built; a stale
            index is rebuilt with its own chunk_size
        staleness: One of 'warn', 'rebuild', 'error', 'ignore'
    """
    if data_path is None and index_path is None:
        raise ValueError("Either data_path or index_path is required")
    if staleness not in STALENESS_POLICIES:
        raise ValueError(f"Unknown staleness policy {staleness!r}")

    if index_path is None:
        index_path = index_path_for(data_path, suffix)
    index_path = Path(index_path)

    if not index_path.exists():
        if data_path is None:
            raise FileNotFoundError(f"Index not found: {index_path}")
        logger.info(f"No index at {index_path}, building one")
        index_records(data_path, index_path, chunk_size, compress_level)
    elif data_path is not None and staleness != "ignore" and is_stale(data_path, index_path):
        message = f"Index {index_path} is older than {data_path}"
        if staleness == "error":
            raise StaleIndexError(message)
        if staleness == "rebuild":
            previous = read_index(index_path).chunk_size
            logger.info(f"{message}, rebuilding (chunk_size={previous})")
            index_records(data_path, index_path, previous, compress_level)
        else:
            logger.warning(message)
            warnings.warn(message, StaleIndexWarning, stacklevel=2)

    return read_index(index_path)
