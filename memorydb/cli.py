#!/usr/bin/env python3
"""
Command-line inspection of memorydb snapshot files.

Opens snapshots read-only (manual flush mode), so nothing is written back.
"""

import argparse
import json
import sys

from .core.errors import MemoryDBError
from .core.memory_db import MemoryDB
from .core.persistence import FlushMode


def _parse_values(raw: str):
    try:
        return [float(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"values must be comma-separated numbers: {raw!r}")


def _open(path: str) -> MemoryDB:
    db = MemoryDB(flush_mode=FlushMode.MANUAL)
    db.load(path)
    return db


def cmd_info(args) -> int:
    db = _open(args.snapshot)
    tables = db.tables()
    print(f"Snapshot: {args.snapshot}")
    print(f"Tables: {len(tables)}, records: {db.count()}")
    for name in tables:
        print(f"  {name}: {db.count(name)}")
    return 0


def cmd_query(args) -> int:
    db = _open(args.snapshot)
    response = db.query(table=args.table, values=args.values, limit=args.limit)
    print(json.dumps(response.model_dump(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memorydb",
        description="Inspect and query memorydb snapshot files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s info store.json                          # List tables and record counts
  %(prog)s query store.json -t docs -V 1,0 -k 3     # Three nearest records in 'docs'
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Show tables and record counts")
    info.add_argument("snapshot", help="Path to the snapshot file")
    info.set_defaults(func=cmd_info)

    query = subparsers.add_parser("query", help="Run a nearest-neighbor query")
    query.add_argument("snapshot", help="Path to the snapshot file")
    query.add_argument("--table", "-t", required=True, help="Table to query")
    query.add_argument("--values", "-V", required=True, type=_parse_values,
                       help="Query vector as comma-separated numbers")
    query.add_argument("--limit", "-k", type=int, default=None,
                       help="Maximum number of matches")
    query.set_defaults(func=cmd_query)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except (MemoryDBError, OSError, ValueError) as e:
        # JSONDecodeError and pydantic ValidationError are ValueErrors
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
