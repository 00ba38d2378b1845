"""
MemoryDB: the public face of the store.

Wires the table store, the query executor and snapshot persistence
together behind a reader/writer lock and applies the configured flush
policy after every mutation.
"""

import os
import threading
import time
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from ..api.schemas import (
    MatchModel,
    QueryRequest,
    QueryResponse,
    UpsertRequest,
    UpsertResponse,
)
from ..util.logging import logger
from ..vector.index import IVectorStore, TableStore
from ..vector.query import execute_query
from ..vector.types import VectorRecord
from .errors import FileNotConfiguredError, MemoryDBError, TableNotFoundError
from .locking import ReadWriteLock
from .persistence import (
    Checkpointer,
    FlushMode,
    LoadMode,
    PathLike,
    apply_snapshot,
    read_snapshot,
    write_snapshot,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model: Type[ModelT], request: Any, fields: Dict[str, Any]) -> ModelT:
    """Accept a model instance, a plain mapping, or keyword fields."""
    if request is None:
        return model.model_validate(fields)
    if fields:
        raise TypeError(f"Pass either a {model.__name__} or keyword fields, not both")
    if isinstance(request, model):
        return request
    return model.model_validate(request)


class MemoryDB(IVectorStore):
    """
    Embedded vector-similarity store.

    Args:
        filename: Snapshot file. Loaded on construction if it exists, and
            the target of write-through saves and checkpoints.
        flush_mode: When mutations are persisted (default write-through).
        flush_interval_sec: Checkpoint period for ``FlushMode.INTERVAL``.
        load_mode: Default strategy for ``load()`` (default merge).

    ``batch_upsert`` is not atomic: if a record fails validation partway,
    the records before it stay committed (and persisted under
    write-through). Re-query to find out what was applied.
    """

    def __init__(
        self,
        filename: Optional[PathLike] = None,
        flush_mode: FlushMode = FlushMode.WRITE_THROUGH,
        flush_interval_sec: float = 5.0,
        load_mode: LoadMode = LoadMode.MERGE,
    ):
        self.filename = os.fspath(filename) if filename else None
        self.flush_mode = FlushMode(flush_mode)
        self.load_mode = LoadMode(load_mode)

        self._store = TableStore()
        self._lock = ReadWriteLock()
        self._io_lock = threading.Lock()
        self._dirty = False
        self._closed = False
        self._checkpointer: Optional[Checkpointer] = None

        if self.filename and os.path.exists(self.filename):
            self.load()

        if self.flush_mode is FlushMode.INTERVAL:
            if not self.filename:
                raise FileNotConfiguredError("interval checkpoint")
            self._checkpointer = Checkpointer(self.checkpoint, flush_interval_sec)
            self._checkpointer.start()

    # Mutations

    def upsert(self, request=None, **fields) -> UpsertResponse:
        """
        Insert or overwrite one record.

        Accepts an ``UpsertRequest``, a mapping, or keyword fields
        (``table``, ``id``, ``values``, ``metadata``).
        """
        req = _coerce(UpsertRequest, request, fields)

        with self._lock.write_locked():
            record_id = self._apply(req)
            if self._writes_through():
                self._write(self.filename, "write_through")

        logger.log_vector_operation("upsert", req.table, [record_id])
        return UpsertResponse(ids=[record_id])

    def batch_upsert(self, requests: Iterable[Any]) -> UpsertResponse:
        """
        Insert or overwrite records in input order.

        Items may be ``UpsertRequest`` instances or mappings; each is
        validated just before it is applied.
        """
        ids: List[str] = []
        tables = set()

        with self._lock.write_locked():
            try:
                for item in requests:
                    req = _coerce(UpsertRequest, item, {})
                    ids.append(self._apply(req))
                    tables.add(req.table)
            except Exception as e:
                logger.log_operation("vector.batch_upsert", "failed",
                                     {"applied": len(ids), "error": str(e)})
                # Applied records are committed; persist them, then surface the original error
                if ids and self._writes_through():
                    try:
                        self._write(self.filename, "write_through")
                    except Exception as write_error:
                        raise e from write_error
                raise

            if ids and self._writes_through():
                self._write(self.filename, "write_through")

        logger.log_vector_operation("batch_upsert", ",".join(sorted(tables)), ids)
        return UpsertResponse(ids=ids)

    def _apply(self, req: UpsertRequest) -> str:
        record = VectorRecord(id=req.id, table=req.table, values=req.values, metadata=req.metadata)
        record_id = self._store.upsert(record)
        self._dirty = True
        return record_id

    def _writes_through(self) -> bool:
        return self.flush_mode is FlushMode.WRITE_THROUGH and self.filename is not None

    # Queries

    def query(self, request=None, **fields) -> QueryResponse:
        """
        Return the records closest to the query vector, nearest first.

        Accepts a ``QueryRequest``, a mapping, or keyword fields
        (``table``, ``values``, ``limit``).

        Raises:
            TableNotFoundError: If the table has never been inserted into
            DimensionMismatchError: If any vector in the table differs in
                length from the query vector
        """
        req = _coerce(QueryRequest, request, fields)
        start_time = time.monotonic()

        try:
            with self._lock.read_locked():
                table = self._store.get_table(req.table)
                if table is None:
                    raise TableNotFoundError(req.table)
                matches = execute_query(table.values(), req.values, req.limit)
        except MemoryDBError:
            duration_ms = (time.monotonic() - start_time) * 1000
            logger.log_query(req.table, len(req.values), req.limit, 0, duration_ms, status="failed")
            raise

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.log_query(req.table, len(req.values), req.limit, len(matches), duration_ms)

        return QueryResponse(matches=[
            MatchModel(id=match.id, score=match.score, metadata=match.metadata)
            for match in matches
        ])

    def tables(self) -> List[str]:
        """Names of all tables, sorted."""
        with self._lock.read_locked():
            return self._store.table_names()

    def count(self, table: Optional[str] = None) -> int:
        """Record count for ``table``, or across all tables."""
        with self._lock.read_locked():
            return self._store.count(table)

    # Persistence

    def save(self, path: Optional[PathLike] = None) -> None:
        """
        Write the whole store to ``path`` (default: the configured filename).

        Raises:
            FileNotConfiguredError: If no path is given or configured
        """
        target = os.fspath(path) if path else self.filename
        if not target:
            raise FileNotConfiguredError("save")

        with self._lock.read_locked():
            self._write(target, "save")

    def load(self, path: Optional[PathLike] = None, mode: Optional[LoadMode] = None) -> None:
        """
        Read a snapshot and apply it to the store.

        The default merge mode replaces each table present in the file and
        leaves other in-memory tables untouched; ``LoadMode.REPLACE`` makes
        the store hold exactly the file's contents. Filesystem and parse
        errors propagate and leave the store unchanged.

        Raises:
            FileNotConfiguredError: If no path is given or configured
        """
        target = os.fspath(path) if path else self.filename
        if not target:
            raise FileNotConfiguredError("load")
        load_mode = LoadMode(mode) if mode is not None else self.load_mode

        try:
            tables = read_snapshot(target)
        except Exception as e:
            logger.log_snapshot("load", target, status="failed", details={"error": str(e)})
            raise

        with self._lock.write_locked():
            extra_tables = set(self._store.table_names()) - set(tables)
            apply_snapshot(self._store, tables, load_mode)
            # In sync only when the configured file was loaded and nothing else remains beside it
            in_sync = self._is_own_file(target) and (load_mode is LoadMode.REPLACE or not extra_tables)
            self._dirty = not in_sync

        logger.log_snapshot("load", target, details={
            "mode": load_mode.value,
            "tables": len(tables),
            "records": sum(len(records) for records in tables.values()),
        })

    def checkpoint(self) -> bool:
        """
        Save to the configured filename if there are unsaved changes.

        Returns:
            True if a snapshot was written
        """
        if not self.filename:
            raise FileNotConfiguredError("checkpoint")

        with self._lock.read_locked():
            if not self._dirty:
                return False
            self._write(self.filename, "checkpoint")
            return True

    def _write(self, target: str, reason: str) -> None:
        """Write a snapshot. Caller holds the read or write lock."""
        with self._io_lock:
            try:
                size = write_snapshot(self._store.snapshot(), target)
            except Exception as e:
                logger.log_snapshot(reason, target, status="failed", details={"error": str(e)})
                raise
            if self._is_own_file(target):
                self._dirty = False

        logger.log_snapshot(reason, target, details={
            "bytes": size,
            "tables": len(self._store.table_names()),
        })

    def _is_own_file(self, target: PathLike) -> bool:
        return self.filename is not None and os.path.abspath(target) == os.path.abspath(self.filename)

    @property
    def dirty(self) -> bool:
        """True when the store holds changes not yet in the snapshot file."""
        return self._dirty

    # Lifecycle

    def close(self) -> None:
        """Stop the checkpointer and flush what it had not written yet."""
        if self._closed:
            return
        self._closed = True

        if self._checkpointer is not None:
            self._checkpointer.stop()
            self._checkpointer = None
            self.checkpoint()

    def __enter__(self) -> "MemoryDB":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
