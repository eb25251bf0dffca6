"""Protocols for the collaborators the index core depends on."""

from .codec import IndexCodec
from .stream import RecordStream

__all__ = ["IndexCodec", "RecordStream"]
