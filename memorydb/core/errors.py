"""
Exception hierarchy for memorydb.

Filesystem, JSON and pydantic errors are never wrapped; they reach the
caller unchanged.
"""


class MemoryDBError(Exception):
    """Base exception for memorydb operations."""
    pass


class TableNotFoundError(MemoryDBError, KeyError):
    """Raised when querying a table that was never inserted into."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"{table} not found")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return f"{self.table} not found"


class DimensionMismatchError(MemoryDBError, ValueError):
    """Raised when two vectors of different length are compared."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(
            f"Vectors must be of the same length (got {left} and {right})"
        )


class FileNotConfiguredError(MemoryDBError):
    """Raised when save/load is called with no snapshot path known."""

    def __init__(self, operation: str = "save"):
        self.operation = operation
        super().__init__(f"Snapshot filename not set for {operation}")
