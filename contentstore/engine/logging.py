"""
ContentStore Logging — Logger setup plus a structured JSON operation log.

Implements:
- configure_logging(): level for the "contentstore" logger tree
- FileLogger: Per-category JSONL files (daily rotation)
- Log entry builders for store operations, read-only rejections and
  best-effort item failures

Operation log layout: {log_dir}/{category}/{YYYY-MM-DD}.jsonl
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("contentstore.engine.logging")

ROOT_LOGGER_NAME = "contentstore"

CATEGORIES = ("documents", "artifacts", "assembly", "security")

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", debug: bool = False) -> logging.Logger:
    """
    Set the level of the package logger tree and attach a stream handler
    once. Debug mode forces DEBUG.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO))
    if not any(getattr(h, "_contentstore_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        handler._contentstore_handler = True
        root.addHandler(handler)
    return root


class LogEntry:
    """A structured log entry destined for a category file."""

    __slots__ = ("category", "data")

    def __init__(self, category: str, data: Dict[str, Any]):
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-category files.
    Files rotate daily: {log_dir}/{category}/{YYYY-MM-DD}.jsonl

    Thread-safe — uses a lock per file path.
    """

    def __init__(self, log_dir: str = "logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        for category in CATEGORIES:
            (self._log_dir / category).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to the appropriate file."""
        file_path = self._resolve_path(entry.category)
        key = str(file_path)

        with self._file_locks[key]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def _resolve_path(self, category: str) -> Path:
        """Resolve the log file path for today's date."""
        if category not in CATEGORIES:
            category = "documents"
        return self._log_dir / category / f"{date.today().isoformat()}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def query(
        self,
        category: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Query log entries for a category.

        Args:
            category: One of CATEGORIES.
            start_date: Earliest date to include (defaults to 7 days ago).
            end_date: Latest date to include (defaults to today).
            filters: Only entries matching ALL key/value pairs are returned.
            limit: Max number of entries to return.

        Returns:
            List of parsed log-entry dicts, newest first.
        """
        if end_date is None:
            end_date = date.today()
        if start_date is None:
            start_date = end_date - timedelta(days=7)

        base = self._log_dir / category
        if not base.exists():
            return []

        results: List[Dict[str, Any]] = []
        current = end_date
        while current >= start_date and len(results) < limit:
            file_path = base / f"{current.isoformat()}.jsonl"
            if file_path.exists():
                day = self._read_jsonl(file_path, filters)
                day.reverse()
                results.extend(day[: limit - len(results)])
            current -= timedelta(days=1)
        return results

    @staticmethod
    def _read_jsonl(path: Path, filters: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Read matching entries from a .jsonl file, in file order."""
        entries: List[Dict[str, Any]] = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if filters and not all(data.get(k) == v for k, v in filters.items()):
                        continue
                    entries.append(data)
        except OSError as exc:
            logger.warning("Could not read log file %s: %s", path, exc)
        return entries


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, key: Optional[str], **extra: Any) -> Dict[str, Any]:
    """Build a base log entry with common fields."""
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
    }
    if key is not None:
        entry["key"] = key
    entry.update({k: v for k, v in extra.items() if v is not None})
    return entry


def log_store_operation(
    category: str,
    operation: str,
    key: Optional[str],
    document_id: Optional[str] = None,
    size_bytes: Optional[int] = None,
    success: bool = True,
    error: Optional[str] = None,
) -> LogEntry:
    """Build a store operation entry (get/save/create/delete/list)."""
    data = _base_entry(
        event=f"{operation}",
        level="INFO" if success else "ERROR",
        key=key,
        document_id=document_id,
        size_bytes=size_bytes,
        success=success,
        error=error,
    )
    return LogEntry(category, data)


def log_read_only_rejection(operation: str, document_id: Optional[str]) -> LogEntry:
    """Build a security entry for a mutation refused by read-only mode."""
    data = _base_entry(
        event="read_only_rejected",
        level="WARNING",
        key=None,
        operation=operation,
        document_id=document_id,
    )
    return LogEntry("security", data)


def log_partial_failure(
    category: str,
    operation: str,
    key: str,
    error_type: str,
    message: str,
) -> LogEntry:
    """Build an entry for one item skipped by a best-effort operation."""
    data = _base_entry(
        event="partial_failure",
        level="WARNING",
        key=key,
        operation=operation,
        error_type=error_type,
        message=message,
    )
    return LogEntry(category, data)
