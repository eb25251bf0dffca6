"""External merge sort for record files.

Orders a record file by key so it can be indexed.
"""

from __future__ import annotations

import heapq
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator, Sequence
from pathlib import Path

from sortedcontainers import SortedKeyList

from ..core.ordering import sort_key
from ..core.types import Record
from .recordfile import RecordFileReader, RecordFileWriter

logger = logging.getLogger(__name__)


def sorted_path_for(path: str | Path) -> Path:
    """Default output name: ``reads.rec`` -> ``reads_rid_sorted.rec``."""
    path = Path(path)
    return path.with_name(f"{path.stem}_rid_sorted{path.suffix}")


class ExternalSorter:
    """Sort records that may not fit in memory.

    Args:
        buffer_records: Records held in memory before a run is spilled
        tmp_dir: Parent directory for spill files (system default if None)

    Invariants:
        - Output is ordered by compare_keys
        - Records with equal keys keep their input order
        - Spill files are removed on every exit path
    """

    def __init__(self, buffer_records: int = 500_000, tmp_dir: str | Path | None = None):
        if buffer_records <= 0:
            raise ValueError(f"buffer_records must be positive, got {buffer_records}")
        self.buffer_records = buffer_records
        self.tmp_dir = tmp_dir

    def sort(self, src: str | Path, dest: str | Path) -> Path:
        """Sort ``src`` into ``dest`` and return ``dest``."""
        src = Path(src)
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)

        work_dir = Path(tempfile.mkdtemp(prefix="rid_sort_", dir=self.tmp_dir))
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
        os.close(fd)
        tmp_out = Path(tmp_name)
        try:
            with RecordFileReader(src) as reader:
                runs = self._spill_runs(reader, work_dir)

            count = self._merge_runs(runs, tmp_out)
            os.replace(tmp_out, dest)
            logger.info(f"Sorted {count} records from {src} into {dest} ({len(runs)} runs)")
            return dest
        finally:
            tmp_out.unlink(missing_ok=True)
            shutil.rmtree(work_dir, ignore_errors=True)

    def _spill_runs(self, reader: RecordFileReader, work_dir: Path) -> list[Path]:
        """Write sorted runs of at most buffer_records records each."""
        runs: list[Path] = []
        # (key, sequence) keeps equal keys in arrival order within a run
        buffer = SortedKeyList(key=lambda item: (sort_key(item[0].key), item[1]))
        seq = 0

        for record in reader:
            buffer.add((record, seq))
            seq += 1
            if len(buffer) >= self.buffer_records:
                runs.append(self._write_run(buffer, work_dir, len(runs)))
                buffer.clear()

        if buffer or not runs:
            runs.append(self._write_run(buffer, work_dir, len(runs)))
        return runs

    def _write_run(self, buffer: SortedKeyList, work_dir: Path, n: int) -> Path:
        path = work_dir / f"run-{n:05d}.rec"
        with RecordFileWriter(path) as writer:
            for record, _seq in buffer:
                writer.add_record(record)
        logger.debug(f"Spilled run {path.name} ({len(buffer)} records)")
        return path

    def _merge_runs(self, runs: Sequence[Path], out: Path) -> int:
        """k-way merge of sorted runs into ``out``; returns the record count."""
        readers: list[RecordFileReader] = []
        try:
            for path in runs:
                readers.append(RecordFileReader(path))
            # heapq.merge is stable across inputs: earlier runs win ties
            merged: Iterator[Record] = heapq.merge(*readers, key=lambda r: sort_key(r.key))
            with RecordFileWriter(out) as writer:
                for record in merged:
                    writer.add_record(record)
                return writer.count
        finally:
            for reader in readers:
                reader.close()


def sort_records(
    src: str | Path,
    dest: str | Path | None = None,
    buffer_records: int = 500_000,
    tmp_dir: str | Path | None = None,
) -> Path:
    """Sort a record file by key; returns the path of the sorted file."""
    if dest is None:
        dest = sorted_path_for(src)
    return ExternalSorter(buffer_records, tmp_dir).sort(src, dest)
