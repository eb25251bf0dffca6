"""Protocol definition for seekable record streams."""

from __future__ import annotations

from typing import Protocol

from ..core.types import Offset, Record


class RecordStream(Protocol):
    """Sequential reader over records sorted by key.

    Offsets are opaque positions understood only by the stream itself; they
    must be usable with seek() and increase as records are read.
    """

    start_offset: Offset

    def seek(self, offset: Offset) -> None:
        """Position the cursor so the next read starts at ``offset``."""
        ...

    def tell(self) -> Offset:
        """Return the offset at which the next record begins."""
        ...

    def read_record(self) -> Record | None:
        """Read the record at the cursor and advance; None at end of data."""
        ...
