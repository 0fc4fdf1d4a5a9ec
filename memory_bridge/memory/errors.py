"""
Error taxonomy for the memory store.

Absent input (no transcript, no prior sessions) and per-line parse failures
are normal outcomes and are not represented here.
"""

from pathlib import Path
from typing import Union


class MemoryBridgeError(Exception):
    """Base class for memory-bridge failures."""


class StorageUnavailable(MemoryBridgeError):
    """The backing database could not be created or opened."""
    
    def __init__(self, path: Union[str, Path], cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"storage unavailable at {self.path}: {cause}")


class StoreOperationFailed(MemoryBridgeError):
    """A specific operation failed against an open store."""
    
    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
