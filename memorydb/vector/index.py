"""
Table store: the in-memory mapping of table name -> {record id -> record}.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from .types import VectorRecord

Table = Dict[str, VectorRecord]


class IVectorStore(ABC):
    """Abstract interface for the store operations consumed by callers."""

    @abstractmethod
    def upsert(self, request=None, **fields) -> Any:
        """Insert or overwrite a single record."""
        pass

    @abstractmethod
    def batch_upsert(self, requests: Iterable[Any]) -> Any:
        """Insert or overwrite records in input order (not atomic)."""
        pass

    @abstractmethod
    def query(self, request=None, **fields) -> Any:
        """Return the nearest records to a query vector."""
        pass


class TableStore:
    """
    Owns every table and its records.

    Tables are created on first insertion and never deleted. Inserting an
    id that already exists in the table replaces the previous record
    wholesale (last-write-wins). No locking happens here; the owner is
    responsible for serializing access.
    """

    def __init__(self, tables: Optional[Dict[str, Table]] = None):
        self._tables: Dict[str, Table] = {}
        if tables:
            self.replace_tables(tables)

    def upsert(self, record: VectorRecord) -> str:
        """Insert or overwrite ``record`` in its table and return its id."""
        table = self._tables.get(record.table)
        if table is None:
            table = self._tables[record.table] = {}
        table[record.id] = record
        return record.id

    def batch_upsert(self, records: Iterable[VectorRecord]) -> List[str]:
        """
        Apply ``upsert`` to each record in order.

        Not atomic: records applied before a failure remain in the store.
        """
        return [self.upsert(record) for record in records]

    def has_table(self, name: str) -> bool:
        return name in self._tables

    def get_table(self, name: str) -> Optional[Table]:
        """Return the live table mapping, or None if it does not exist."""
        return self._tables.get(name)

    def table_names(self) -> List[str]:
        return sorted(self._tables)

    def count(self, name: Optional[str] = None) -> int:
        """Record count for one table, or across all tables."""
        if name is not None:
            return len(self._tables.get(name, {}))
        return sum(len(table) for table in self._tables.values())

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: str) -> bool:
        return self.has_table(name)

    def replace_tables(self, tables: Dict[str, Table]) -> None:
        """Replace each named table wholesale; other tables are untouched."""
        for name, records in tables.items():
            self._tables[name] = dict(records)

    def clear_and_replace(self, tables: Dict[str, Table]) -> None:
        """Make the store hold exactly ``tables``."""
        self._tables = {}
        self.replace_tables(tables)

    def snapshot(self) -> Dict[str, Table]:
        """Shallow copy of all tables, safe to iterate outside a lock."""
        return {name: dict(table) for name, table in self._tables.items()}
