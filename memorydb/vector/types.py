"""
Record and match types held by the table store.
"""

from typing import Any, Dict, Optional, Sequence
from dataclasses import dataclass, field
import numpy as np


def as_vector(values: Optional[Sequence[float]]) -> Optional[np.ndarray]:
    """Convert a sequence of numbers to a float64 vector, keeping None."""
    if values is None:
        return None
    return np.asarray(values, dtype=np.float64).reshape(-1)


@dataclass
class VectorRecord:
    """A record stored under its id in exactly one table."""

    id: str
    """Identifier, unique within the table"""

    table: str
    """Name of the owning table"""

    values: Optional[np.ndarray] = None
    """The vector; records without one are skipped by queries"""

    metadata: Optional[Dict[str, Any]] = None
    """Opaque caller data, never interpreted by the store"""

    def __post_init__(self):
        self.values = as_vector(self.values)

    @property
    def has_vector(self) -> bool:
        return self.values is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to a JSON-ready dict, omitting absent fields."""
        data: Dict[str, Any] = {"id": self.id, "table": self.table}
        if self.values is not None:
            data["values"] = self.values.tolist()
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data


@dataclass
class Match:
    """A query hit. Lower score means closer."""

    id: str
    score: float
    metadata: Optional[Dict[str, Any]] = field(default=None)
