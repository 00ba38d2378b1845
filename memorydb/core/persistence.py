"""
Snapshot persistence for the table store.

A snapshot is a single JSON object holding every table and record; it is
always written whole, never appended to. This module also carries the
flush policies that decide when mutations reach the snapshot file and the
background checkpointer behind the interval policy.
"""

import json
import os
import tempfile
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from pydantic import TypeAdapter

from ..api.schemas import SnapshotTables
from ..util.logging import logger
from ..vector.index import Table, TableStore
from ..vector.types import VectorRecord

PathLike = Union[str, os.PathLike]

_snapshot_adapter = TypeAdapter(SnapshotTables)


class FlushMode(str, Enum):
    """When mutations are persisted."""
    WRITE_THROUGH = "write_through"  # full save after every applied record
    INTERVAL = "interval"            # background checkpoint when dirty
    MANUAL = "manual"                # only on save()/checkpoint()


class LoadMode(str, Enum):
    """How a loaded snapshot is applied to the in-memory store."""
    MERGE = "merge"      # replace-by-table merge, other tables untouched
    REPLACE = "replace"  # store becomes exactly the snapshot


def serialize_tables(tables: Dict[str, Table]) -> Dict[str, Dict[str, dict]]:
    """Convert tables to the JSON-ready snapshot shape."""
    return {
        name: {record_id: record.to_dict() for record_id, record in records.items()}
        for name, records in tables.items()
    }


def write_snapshot(tables: Dict[str, Table], path: PathLike) -> int:
    """
    Write ``tables`` to ``path``, replacing any existing file.

    The data goes to a temporary file beside the target which is then
    renamed over it, so a crash mid-write leaves the old snapshot intact.

    Returns:
        Number of bytes written
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(serialize_tables(tables)).encode("utf-8")

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as tmp_file:
            tmp_file.write(payload)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    return len(payload)


def read_snapshot(path: PathLike) -> Dict[str, Table]:
    """
    Read and validate a snapshot file.

    The mapping key is authoritative for a record's id and the outer key for
    its table. OSError, json.JSONDecodeError and pydantic.ValidationError
    propagate unchanged; nothing is returned for a malformed file.
    """
    with open(path, "r", encoding="utf-8") as snapshot_file:
        raw = json.load(snapshot_file)

    parsed = _snapshot_adapter.validate_python(raw)

    return {
        name: {
            record_id: VectorRecord(
                id=record_id,
                table=name,
                values=record.values,
                metadata=record.metadata,
            )
            for record_id, record in records.items()
        }
        for name, records in parsed.items()
    }


def apply_snapshot(store: TableStore, tables: Dict[str, Table], mode: LoadMode = LoadMode.MERGE) -> None:
    """Apply loaded tables to ``store`` using the given load mode."""
    mode = LoadMode(mode)
    if mode is LoadMode.REPLACE:
        store.clear_and_replace(tables)
    else:
        store.replace_tables(tables)


class Checkpointer:
    """
    Background thread that calls ``flush`` every ``interval_sec`` seconds.

    A failing flush is logged and retried on the next tick; it never stops
    the loop.
    """

    def __init__(self, flush: Callable[[], bool], interval_sec: float, name: str = "memorydb-checkpoint"):
        if not callable(flush):
            raise ValueError(f"Checkpoint flush must be callable: {flush}")
        if interval_sec <= 0:
            raise ValueError(f"Interval must be > 0 seconds: {interval_sec}")

        self.flush = flush
        self.interval_sec = interval_sec
        self.name = name
        self._shutdown_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Checkpointer already running")
        self._shutdown_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to exit and wait for the thread."""
        if self._thread is None:
            return
        self._shutdown_event.set()
        self._thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._shutdown_event.wait(self.interval_sec):
            try:
                self.flush()
            except Exception as e:
                # Error isolation - log error but keep checkpointing
                logger.error(f"Checkpoint flush failed: {e}")
