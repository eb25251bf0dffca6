"""Configuration for rid_index.

Defines all tunable parameters for building, persisting and querying indices.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

STALENESS_POLICIES = ("warn", "rebuild", "error", "ignore")


@dataclass
class IndexConfig:
    """Configuration parameters for the sparse read index.

    Attributes:
        chunk_size: Number of records spanning each indexed segment
        index_suffix: Suffix appended to a data file name to locate its index
        sort_buffer_records: Records held in memory before spilling a sort run
        compress_level: zlib level used for index files
        staleness: What to do when the data file is newer than its index
        strict_lookup: Raise instead of warn when the index mismatches the data
    """

    chunk_size: int = 50_000
    index_suffix: str = ".ridx"
    sort_buffer_records: int = 500_000
    compress_level: int = 6
    staleness: str = "warn"
    strict_lookup: bool = False

    def validate(self) -> None:
        """Raise ValueError if any parameter is out of range."""
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.sort_buffer_records <= 0:
            raise ValueError(
                f"sort_buffer_records must be positive, got {self.sort_buffer_records}"
            )
        if not 0 <= self.compress_level <= 9:
            raise ValueError(f"compress_level must be 0-9, got {self.compress_level}")
        if self.staleness not in STALENESS_POLICIES:
            raise ValueError(
                f"Unknown staleness policy {self.staleness!r}, expected one of {STALENESS_POLICIES}"
            )
        if not self.index_suffix:
            raise ValueError("index_suffix must not be empty")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexConfig:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        config = cls(**data)
        config.validate()
        return config


def load_config(path: str | Path) -> IndexConfig:
    """Load an IndexConfig from the ``[rid_index]`` table of a TOML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    return IndexConfig.from_dict(data.get("rid_index", {}))
