"""
Vector layer: record types, cosine distance, the table store and the
brute-force query executor.
"""

# Package initialization for vector module
from .index import IVectorStore, TableStore
from .types import VectorRecord, Match
from .distance import cosine_distance
from .query import execute_query, rank_matches

__all__ = [
    'IVectorStore',
    'TableStore',
    'VectorRecord',
    'Match',
    'cosine_distance',
    'execute_query',
    'rank_matches',
]
