"""Indexed record store - main public API.

Ties together index loading and key lookups over one record file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..components.index_file import load_index
from ..components.query import QueryEngine
from ..components.recordfile import RecordFileReader
from .config import IndexConfig
from .types import Index, Key, Record

logger = logging.getLogger(__name__)


class IndexedRecordStore:
    """Key lookups over a sorted record file.

    Args:
        data_path: Record file sorted by key
        config: Index configuration
        index_path: Explicit index location (derived from data_path if None)

    Public API:
        - get(key): All records with this key, in file order
        - key in store: Whether any record has this key

    Invariants:
        - The index is loaded (or built) once on open
        - Each store owns one file handle; do not share a store across threads
    """

    def __init__(
        self,
        data_path: str | Path,
        config: IndexConfig | None = None,
        index_path: str | Path | None = None,
    ):
        self.config = config or IndexConfig()
        self.config.validate()
        self.data_path = Path(data_path)

        self.index: Index = load_index(
            data_path=self.data_path,
            index_path=index_path,
            chunk_size=self.config.chunk_size,
            staleness=self.config.staleness,
            suffix=self.config.index_suffix,
            compress_level=self.config.compress_level,
        )
        self._reader = RecordFileReader(self.data_path)
        self._engine = QueryEngine(self.index, self._reader, strict=self.config.strict_lookup)

        logger.info(f"Opened {self.data_path} ({len(self.index)} index samples)")

    def get(self, key: Key) -> list[Record]:
        """Return every record with ``key``; empty if there is none."""
        return self._engine.lookup(key)

    def __contains__(self, key: Key) -> bool:
        return bool(self.get(key))

    def close(self) -> None:
        """Release the data file handle."""
        self._reader.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
