"""
Environment-driven configuration for memorydb.

A local .env file is loaded at import; the getter functions read the
environment on every call.
"""

import os

from dotenv import load_dotenv

load_dotenv()

VALID_FLUSH_MODES = ["write_through", "interval", "manual"]
VALID_LOAD_MODES = ["merge", "replace"]

# Version string
VERSION = "1.0.0"


def get_snapshot_path():
    """Get the configured snapshot path, or None."""
    return os.getenv("MEMORYDB_SNAPSHOT_PATH") or None


def get_flush_mode():
    """Get flush mode (write_through|interval|manual)."""
    return os.getenv("MEMORYDB_FLUSH_MODE", "write_through").lower()


def get_flush_interval():
    """Get checkpoint interval in seconds for interval flush mode."""
    return float(os.getenv("MEMORYDB_FLUSH_INTERVAL_SEC", "5"))


def get_load_mode():
    """Get load mode (merge|replace)."""
    return os.getenv("MEMORYDB_LOAD_MODE", "merge").lower()


def get_log_level():
    """Get log level name."""
    return os.getenv("MEMORYDB_LOG_LEVEL", "INFO").upper()


def validate_config():
    """Validate memorydb configuration and return any issues."""
    issues = []

    flush_mode = get_flush_mode()
    if flush_mode not in VALID_FLUSH_MODES:
        issues.append(f"Invalid MEMORYDB_FLUSH_MODE: {flush_mode}")

    if get_load_mode() not in VALID_LOAD_MODES:
        issues.append(f"Invalid MEMORYDB_LOAD_MODE: {get_load_mode()}")

    try:
        interval = get_flush_interval()
    except ValueError:
        issues.append("MEMORYDB_FLUSH_INTERVAL_SEC must be a number")
    else:
        if interval <= 0:
            issues.append("MEMORYDB_FLUSH_INTERVAL_SEC must be > 0")

    if flush_mode == "interval" and not get_snapshot_path():
        issues.append(f"MEMORYDB_FLUSH_MODE={flush_mode} requires MEMORYDB_SNAPSHOT_PATH")

    return issues


def get_memory_db():
    """Build a MemoryDB from the environment. Raises ValueError on bad config."""
    issues = validate_config()
    if issues:
        raise ValueError(f"memorydb configuration invalid: {issues}")

    from .memory_db import MemoryDB
    from .persistence import FlushMode, LoadMode

    return MemoryDB(
        filename=get_snapshot_path(),
        flush_mode=FlushMode(get_flush_mode()),
        flush_interval_sec=get_flush_interval(),
        load_mode=LoadMode(get_load_mode()),
    )
