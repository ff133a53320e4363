"""Registry of the named storages owned by an agent session."""

import logging
import threading
from typing import Optional

from tagloop.config import StateConfig
from tagloop.constants import STATE_SEPARATOR
from tagloop.errors import DuplicateStorageError, UnknownStorageError
from tagloop.serialization import serialize_storage
from tagloop.state.models import StorageType
from tagloop.state.storage import Storage

logger = logging.getLogger(__name__)


class State:
    """Holds one Storage per named slot for the lifetime of a session.

    Storages are created once, at initialization or through add_storage,
    and are only ever cleared, never removed. The registry's own lock
    guards the name map and is never held while a storage is being
    accessed, so it never nests with a storage lock.

    Example:
        state = State(StateConfig.model_validate({
            "storages": [
                {"name": "memories", "type": "untagged"},
                {"name": "step", "type": "current_previous"},
            ]
        }))
        state.get_storage("memories").add_untagged("port is 8080")
        prompt_section = state.render()
    """

    def __init__(self, config: Optional[StateConfig] = None):
        self._lock = threading.Lock()
        self._storages: dict[str, Storage] = {}
        self.verbose = False

        if config is not None:
            self.verbose = config.verbose
            for storage_config in config.storages:
                self.add_storage(
                    storage_config.name,
                    storage_config.type,
                    verbose=storage_config.verbose,
                )

    def add_storage(
        self, name: str, type: StorageType, verbose: bool = False
    ) -> Storage:
        """Create and register a new storage.

        Raises:
            DuplicateStorageError: If a storage with this name exists.
        """
        storage = Storage(name, type, verbose=verbose or self.verbose)
        with self._lock:
            if name in self._storages:
                raise DuplicateStorageError(name)
            self._storages[name] = storage
        logger.debug("created storage <%s> (%s)", name, type.value)
        return storage

    def get_storage(self, name: str) -> Storage:
        """Return the storage registered under name.

        Raises:
            UnknownStorageError: If no storage has this name.
        """
        with self._lock:
            storage = self._storages.get(name)
        if storage is None:
            raise UnknownStorageError(name)
        return storage

    def storages(self) -> list[Storage]:
        """Return all storages in creation order."""
        with self._lock:
            return list(self._storages.values())

    def clear(self) -> None:
        """Clear every storage, keeping the storages themselves."""
        for storage in self.storages():
            storage.clear()

    def render(self) -> str:
        """Render every non-empty storage, separated by a blank line."""
        rendered = (serialize_storage(storage) for storage in self.storages())
        return STATE_SEPARATOR.join(part for part in rendered if part)
