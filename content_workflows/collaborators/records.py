"""Content record access for database-backed contexts."""
from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional, Set

from ..exceptions import RecordStoreError

logger = logging.getLogger(__name__)

RECORD_FIELDS = (
    "id",
    "title",
    "content",
    "summary",
    "status",
    "type",
    "author",
    "created_at",
    "modified_at",
    "slug",
    "parent_id",
)


class RecordAccessor(ABC):
    """Abstract access to content records, their metadata and terms."""

    @abstractmethod
    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        """Load a record.

        Args:
            record_id: Record identifier

        Returns:
            Dict with the keys in RECORD_FIELDS, or None if not found
        """
        pass

    @abstractmethod
    def get_metadata(self, record_id: int) -> Dict[str, Any]:
        """Return every metadata entry of a record, internal keys included."""
        pass

    @abstractmethod
    def get_terms(self, record_id: int, taxonomy: str) -> List[Dict[str, Any]]:
        """Return the terms ``[{id, slug, name}]`` assigned in a taxonomy."""
        pass

    @abstractmethod
    def update_record(self, record_id: int, fields: Dict[str, Any]) -> bool:
        """Apply record field updates in one write.

        Args:
            record_id: Record identifier
            fields: Record field name to new value

        Returns:
            True if successful

        Raises:
            RecordStoreError: If the store rejects the write
        """
        pass

    @abstractmethod
    def update_metadata(self, record_id: int, key: str, value: Any) -> bool:
        """Write one metadata entry.

        Returns:
            True if successful

        Raises:
            RecordStoreError: If the store rejects the write
        """
        pass


class InMemoryRecordStore(RecordAccessor):
    """In-memory record store for standalone use and testing.

    Writes can be made to fail on purpose with ``fail_record_updates`` and
    ``fail_metadata_keys``.
    """

    def __init__(self):
        self._records: Dict[int, Dict[str, Any]] = {}
        self._metadata: Dict[int, Dict[str, Any]] = {}
        self._terms: Dict[int, Dict[str, List[Dict[str, Any]]]] = {}
        self._lock = Lock()

        self.fail_record_updates = False
        self.fail_metadata_keys: Set[str] = set()
        self.update_calls: List[Dict[str, Any]] = []

    def add_record(
        self,
        record_id: int,
        metadata: Optional[Dict[str, Any]] = None,
        categories: Optional[List[Dict[str, Any]]] = None,
        tags: Optional[List[Dict[str, Any]]] = None,
        **fields: Any,
    ) -> Dict[str, Any]:
        """Add a record; unspecified fields get empty defaults."""
        now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        record = {
            "id": record_id,
            "title": "",
            "content": "",
            "summary": "",
            "status": "draft",
            "type": "post",
            "author": 0,
            "created_at": now,
            "modified_at": now,
            "slug": "",
            "parent_id": 0,
        }
        record.update(fields)

        with self._lock:
            self._records[record_id] = record
            self._metadata[record_id] = dict(metadata or {})
            self._terms[record_id] = {
                "category": list(categories or []),
                "post_tag": list(tags or []),
            }
        return copy.deepcopy(record)

    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def get_metadata(self, record_id: int) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._metadata.get(record_id, {}))

    def get_terms(self, record_id: int, taxonomy: str) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._terms.get(record_id, {}).get(taxonomy, []))

    def update_record(self, record_id: int, fields: Dict[str, Any]) -> bool:
        with self._lock:
            self.update_calls.append({"record_id": record_id, "fields": dict(fields)})
            if self.fail_record_updates:
                raise RecordStoreError(f"Update of record {record_id} rejected")
            record = self._records.get(record_id)
            if record is None:
                return False
            unknown = set(fields) - set(RECORD_FIELDS)
            if unknown:
                raise RecordStoreError(f"Unknown record fields: {', '.join(sorted(unknown))}")
            record.update(fields)
            record["modified_at"] = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            logger.debug(f"Updated record {record_id}: {sorted(fields)}")
            return True

    def update_metadata(self, record_id: int, key: str, value: Any) -> bool:
        with self._lock:
            if key in self.fail_metadata_keys or record_id not in self._records:
                return False
            self._metadata.setdefault(record_id, {})[key] = copy.deepcopy(value)
            return True
