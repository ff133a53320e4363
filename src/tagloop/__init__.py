"""tagloop: tag-notation protocol between model output and an agent runtime.

tagloop provides:
- Parsing: extract <action attr="value">payload</action> invocations from model text
- Serialization: render invocations, action examples and storages back to tags
- State: thread-safe typed storages holding agent working memory between iterations
"""

__version__ = "0.1.0"

from tagloop.config import StateConfig, StorageConfig
from tagloop.errors import (
    DuplicateStorageError,
    FatalError,
    StorageTypeError,
    TagloopError,
    UnknownStorageError,
    is_fatal_error,
)
from tagloop.parsing import parse_model_response
from tagloop.serialization import (
    serialize_action,
    serialize_actions,
    serialize_invocation,
    serialize_storage,
)
from tagloop.state import Storage, StorageType
from tagloop.state.registry import State
from tagloop.types import Action, Invocation

__all__ = [
    "Action",
    "DuplicateStorageError",
    "FatalError",
    "Invocation",
    "State",
    "StateConfig",
    "Storage",
    "StorageConfig",
    "StorageType",
    "StorageTypeError",
    "TagloopError",
    "UnknownStorageError",
    "is_fatal_error",
    "parse_model_response",
    "serialize_action",
    "serialize_actions",
    "serialize_invocation",
    "serialize_storage",
]
