"""Logger service handed to steps through the context."""
from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from threading import Lock
from typing import Any, Deque, Dict, List, Optional

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LogSink:
    """Collects step log entries and forwards them to stdlib logging.

    Registered as the ``Logger`` service. The most recent ``max_entries``
    entries are kept for inspection by the host.
    """

    def __init__(self, logger_name: str = "content_workflows.steps", max_entries: int = 1000):
        self._logger = logging.getLogger(logger_name)
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=max_entries)
        self._lock = Lock()

    def log(self, message: str, level: str = "info", context: Optional[Dict[str, Any]] = None) -> None:
        """Record one entry.

        Args:
            message: Log message
            level: One of debug, info, warning, error
            context: Extra structured data (step id, record id, ...)
        """
        level = level.lower()
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "message": message,
            "context": dict(context or {}),
        }
        with self._lock:
            self._entries.append(entry)

        self._logger.log(LEVELS.get(level, logging.INFO), message)

    def get_entries(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._lock:
            entries = list(self._entries)
        if level:
            entries = [e for e in entries if e["level"] == level.lower()]
        return entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
