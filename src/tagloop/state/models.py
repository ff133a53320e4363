"""Data models for tagloop state storage."""

from dataclasses import dataclass
from enum import Enum


class StorageType(Enum):
    """Access discipline of a storage, fixed at construction."""

    # a list indexed by element position
    UNTAGGED = "untagged"
    # a key=value store
    TAGGED = "tagged"
    # a positional list where each element can be marked as completed
    COMPLETION = "completion"
    # a single state with an optional previous state
    CURRENT_PREVIOUS = "current_previous"


@dataclass
class Entry:
    """A value held by a storage."""

    data: str
    complete: bool = False
