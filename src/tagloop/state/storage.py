"""Thread-safe named storage for agent working memory.

A Storage holds the values an agent accumulates across loop iterations
(goals, memories, plans, the current step) and is rendered back into the
prompt on every iteration. Each storage has a fixed access discipline
(see StorageType); calling an operation that belongs to another discipline
raises StorageTypeError.

Every operation, read or write, holds the storage's lock for its whole
duration, so concurrent callers observe each operation as one step.
"""

import logging
import threading
from typing import Optional

from rich.console import Console
from rich.markup import escape

from tagloop.constants import CURRENT_TAG, PREVIOUS_TAG
from tagloop.errors import StorageTypeError
from tagloop.state.models import Entry, StorageType

logger = logging.getLogger(__name__)

# Shared console for mutation echo
console = Console()


class Storage:
    """A named, typed, lock-protected mapping from string key to entry.

    Positional disciplines (UNTAGGED, COMPLETION) key their entries by
    decimal positions starting at 1. Positions are never reused after a
    removal: deleting position 2 leaves every other entry under its
    original key.

    Example:
        memories = Storage("memories", StorageType.UNTAGGED)
        memories.add_untagged("the server runs on port 8080")
        memories.del_untagged(1)

    Attributes:
        name: Storage name, also used as its tag name when rendered.
        type: The storage's access discipline.
        verbose: Whether mutations are echoed to the console.
    """

    def __init__(self, name: str, type: StorageType, verbose: bool = False):
        """Initialize an empty storage.

        Args:
            name: Storage name.
            type: Access discipline, fixed for the storage's lifetime.
            verbose: Echo mutations to the console.
        """
        self.name = name
        self._type = type
        self.verbose = verbose
        self._lock = threading.Lock()
        self._entries: dict[str, Entry] = {}
        self._last_position = 0

    @property
    def type(self) -> StorageType:
        """The storage's access discipline, fixed at construction."""
        return self._type

    def __repr__(self) -> str:
        return f"Storage(name={self.name!r}, type={self.type.value})"

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_empty(self) -> bool:
        """Return True if the storage holds no entries."""
        return len(self) == 0

    def snapshot(self) -> list[tuple[str, str, bool]]:
        """Return a copy of the entries as (key, data, complete) tuples.

        Entries are returned in insertion order.
        """
        with self._lock:
            return [(key, e.data, e.complete) for key, e in self._entries.items()]

    def to_structured_string(self) -> str:
        """Render the storage in prompt notation."""
        from tagloop.serialization import serialize_storage

        return serialize_storage(self)

    # -------------------------------------------------------------------------
    # TAGGED
    # -------------------------------------------------------------------------

    def add_tagged(self, key: str, data: str) -> None:
        """Set key to data, keeping the key's position if it already exists."""
        with self._lock:
            self._require(StorageType.TAGGED)
            self._entries[key] = Entry(data)
        self._echo(f"{key}={data}", highlight=data)

    def get_tagged(self, key: str) -> Optional[str]:
        """Return the data stored under key, or None."""
        with self._lock:
            self._require(StorageType.TAGGED)
            entry = self._entries.get(key)
            return entry.data if entry is not None else None

    def del_tagged(self, key: str) -> Optional[str]:
        """Remove key.

        Returns:
            The removed data, or None if the key did not exist.
        """
        with self._lock:
            self._require(StorageType.TAGGED)
            old = self._entries.pop(key, None)
        if old is None:
            return None
        self._echo(f"{key} removed")
        return old.data

    # -------------------------------------------------------------------------
    # UNTAGGED
    # -------------------------------------------------------------------------

    def add_untagged(self, data: str) -> int:
        """Append data at the next free position.

        Returns:
            The position the data was stored at.
        """
        with self._lock:
            self._require(StorageType.UNTAGGED)
            position = self._append(Entry(data))
        self._echo(data, highlight=data)
        return position

    def del_untagged(self, position: int) -> Optional[str]:
        """Remove the entry stored at position, without renumbering.

        Returns:
            The removed data, or None if nothing is stored at position.
        """
        with self._lock:
            self._require(StorageType.UNTAGGED)
            old = self._entries.pop(str(position), None)
        if old is None:
            return None
        self._echo(f"element {position} removed")
        return old.data

    # -------------------------------------------------------------------------
    # COMPLETION
    # -------------------------------------------------------------------------

    def add_completion(self, data: str) -> int:
        """Append a not-yet-completed entry at the next free position.

        Returns:
            The position the data was stored at.
        """
        with self._lock:
            self._require(StorageType.COMPLETION)
            position = self._append(Entry(data, complete=False))
        self._echo(data, highlight=data)
        return position

    def set_complete(self, position: int) -> bool:
        """Mark the entry at position as completed.

        Returns:
            True if an entry exists at position.
        """
        return self._set_completion_flag(position, True)

    def set_incomplete(self, position: int) -> bool:
        """Mark the entry at position as not completed.

        Returns:
            True if an entry exists at position.
        """
        return self._set_completion_flag(position, False)

    def del_completion(self, position: int) -> Optional[str]:
        """Remove the entry stored at position, without renumbering."""
        with self._lock:
            self._require(StorageType.COMPLETION)
            old = self._entries.pop(str(position), None)
        if old is None:
            return None
        self._echo(f"element {position} removed")
        return old.data

    # -------------------------------------------------------------------------
    # CURRENT_PREVIOUS
    # -------------------------------------------------------------------------

    def set_current(self, data: str) -> None:
        """Install data as current, demoting the old current to previous.

        Any earlier previous value is discarded.
        """
        with self._lock:
            self._require(StorageType.CURRENT_PREVIOUS)
            old_current = self._entries.pop(CURRENT_TAG, None)
            self._entries.pop(PREVIOUS_TAG, None)
            self._entries[CURRENT_TAG] = Entry(data)
            if old_current is not None:
                self._entries[PREVIOUS_TAG] = old_current
        self._echo(f"current={data}", highlight=data)

    def get_current(self) -> Optional[str]:
        with self._lock:
            self._require(StorageType.CURRENT_PREVIOUS)
            entry = self._entries.get(CURRENT_TAG)
            return entry.data if entry is not None else None

    def get_previous(self) -> Optional[str]:
        with self._lock:
            self._require(StorageType.CURRENT_PREVIOUS)
            entry = self._entries.get(PREVIOUS_TAG)
            return entry.data if entry is not None else None

    # -------------------------------------------------------------------------
    # Any discipline
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Remove every entry and restart positions from 1."""
        with self._lock:
            self._entries.clear()
            self._last_position = 0
        self._echo("cleared")

    # -------------------------------------------------------------------------
    # Internals (callers must hold self._lock)
    # -------------------------------------------------------------------------

    def _require(self, expected: StorageType) -> None:
        if self.type is not expected:
            raise StorageTypeError(self.name, expected, self.type)

    def _append(self, entry: Entry) -> int:
        self._last_position += 1
        self._entries[str(self._last_position)] = entry
        return self._last_position

    def _set_completion_flag(self, position: int, complete: bool) -> bool:
        with self._lock:
            self._require(StorageType.COMPLETION)
            entry = self._entries.get(str(position))
            if entry is None:
                return False
            entry.complete = complete
        self._echo(f"element {position} complete={complete}")
        return True

    def _echo(self, message: str, highlight: Optional[str] = None) -> None:
        logger.debug("<%s> %s", self.name, message)
        if not self.verbose:
            return
        if highlight is not None and message.endswith(highlight):
            prefix = message[: len(message) - len(highlight)]
            rendered = f"{escape(prefix)}[yellow]{escape(highlight)}[/yellow]"
        else:
            rendered = escape(message)
        console.print(f"<[bold]{escape(self.name)}[/bold]> {rendered}")
