"""
Request/response models for the public operation surface, plus the
record shape stored in snapshot files.
"""

from pydantic import BaseModel, JsonValue, field_validator
from typing import Optional, List, Dict


class UpsertRequest(BaseModel):
    table: str
    id: str
    values: Optional[List[float]] = None
    # Must be JSON-representable; contents are otherwise opaque
    metadata: Optional[Dict[str, JsonValue]] = None

    @field_validator('table')
    @classmethod
    def table_must_not_be_empty(cls, v):
        if not v:
            raise ValueError('table cannot be empty')
        return v


class UpsertResponse(BaseModel):
    ids: List[str]


class QueryRequest(BaseModel):
    table: str
    values: List[float]
    limit: Optional[int] = None

    @field_validator('limit')
    @classmethod
    def limit_must_not_be_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError('limit must be >= 0')
        return v


class MatchModel(BaseModel):
    id: str
    score: float
    metadata: Optional[Dict[str, JsonValue]] = None


class QueryResponse(BaseModel):
    matches: List[MatchModel]


class SnapshotRecord(BaseModel):
    """One record as written to a snapshot file."""
    id: str
    table: str
    values: Optional[List[float]] = None
    metadata: Optional[Dict[str, JsonValue]] = None


# Whole snapshot file: table name -> record id -> record
SnapshotTables = Dict[str, Dict[str, SnapshotRecord]]
