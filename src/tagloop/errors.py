"""Error types for tagloop.

Parsing never raises: malformed model output is skipped, not reported.
The only hard failures are contract violations, such as calling a storage
operation that does not match the storage's declared type. Those are
fatal and meant to be caught during development, not handled at runtime.
"""

from typing import Optional


# =============================================================================
# Exception Classes
# =============================================================================


class TagloopError(Exception):
    """Base exception for all tagloop errors."""

    pass


class FatalError(TagloopError):
    """Error that signals a broken contract and should halt immediately."""

    pass


class StorageTypeError(FatalError):
    """Raised when an operation does not match a storage's declared type.

    Attributes:
        storage_name: Name of the storage the operation was invoked on.
        expected: The storage type the operation requires.
        actual: The storage type the storage was created with.
    """

    def __init__(self, storage_name: str, expected, actual):
        super().__init__(
            f"storage <{storage_name}> is {actual.value}, "
            f"operation requires {expected.value}"
        )
        self.storage_name = storage_name
        self.expected = expected
        self.actual = actual


class UnknownStorageError(TagloopError, KeyError):
    """Raised when a storage name is not registered in a State."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"no storage named '{self.name}'"


class DuplicateStorageError(TagloopError):
    """Raised when a storage name is registered twice in a State."""

    def __init__(self, name: str):
        super().__init__(f"storage '{name}' already exists")
        self.name = name


# =============================================================================
# Error Classification
# =============================================================================


def is_fatal_error(error: Optional[BaseException]) -> bool:
    """Classify an error as fatal (halt) or recoverable.

    Args:
        error: The exception to classify.

    Returns:
        True for FatalError and its subclasses, False otherwise.
    """
    return isinstance(error, FatalError)
