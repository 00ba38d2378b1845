"""
memorydb - embedded vector-similarity store.

Named tables of records (optional vector + opaque metadata), brute-force
cosine nearest-neighbor queries and JSON snapshot persistence.
"""

from .core.errors import (
    MemoryDBError,
    TableNotFoundError,
    DimensionMismatchError,
    FileNotConfiguredError,
)
from .core.memory_db import MemoryDB
from .core.persistence import FlushMode, LoadMode
from .vector.types import VectorRecord, Match
from .vector.distance import cosine_distance

from .core.config import VERSION as __version__

__all__ = [
    'MemoryDB',
    'FlushMode',
    'LoadMode',
    'VectorRecord',
    'Match',
    'cosine_distance',
    'MemoryDBError',
    'TableNotFoundError',
    'DimensionMismatchError',
    'FileNotConfiguredError',
]
