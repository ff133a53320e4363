"""tagloop state layer: typed storages for agent working memory."""

from tagloop.state.models import Entry, StorageType
from tagloop.state.storage import Storage

__all__ = [
    "Entry",
    "Storage",
    "StorageType",
]
