"""
Structured logging for memorydb operations.
"""

import logging
from typing import Any, Dict, List, Optional


class StructuredLogger:
    """Structured logger for store, query and snapshot operations."""

    def __init__(self, name: str = "memorydb", level: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.set_level(level or "INFO")

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_level(self, level: str) -> None:
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status == "failed":
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_vector_operation(self, operation: str, table: str, record_ids: List[str],
                             details: Dict[str, Any] = None, status: str = "success"):
        """Log an upsert-style operation against a table."""
        log_details: Dict[str, Any] = {"table": table, "count": len(record_ids)}
        # Keep single-record lines readable, large batches short
        if len(record_ids) <= 5:
            log_details["record_ids"] = list(record_ids)
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_query(self, table: str, dimension: int, limit: Optional[int], match_count: int,
                  duration_ms: float, status: str = "success"):
        """Log a similarity query. Debug level on success; queries are frequent."""
        log_details = {
            "table": table,
            "dimension": dimension,
            "limit": limit,
            "matches": match_count,
            "duration_ms": round(duration_ms, 2),
        }
        if status == "success":
            self.logger.debug(f"Operation: vector.query, Status: {status}, Details: {log_details}")
        else:
            self.log_operation("vector.query", status, log_details)

    def log_snapshot(self, operation: str, path: str, status: str = "success",
                     details: Dict[str, Any] = None):
        """Log a snapshot save/load/checkpoint."""
        log_details: Dict[str, Any] = {"path": str(path)}
        if details:
            log_details.update(details)

        self.log_operation(f"snapshot.{operation}", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def _configured_level() -> str:
    from ..core.config import get_log_level
    return get_log_level()


# Global logger instance
logger = StructuredLogger(level=_configured_level())
