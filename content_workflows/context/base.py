"""Abstract workflow context.

A context is the state one workflow run operates on: a nested document
addressed by dot paths, the language pair of the run, and a set of named
service handles made available to steps.
"""
from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .paths import delete_path, get_path, has_path, set_path


class WorkflowContext(ABC):
    """Base class shared by the virtual and database-backed contexts."""

    def __init__(self, data: Dict[str, Any], source_language: str, target_language: str):
        """Initialize context state.

        Args:
            data: Initial document (deep-copied)
            source_language: Source language code
            target_language: Target language code
        """
        self._data: Dict[str, Any] = copy.deepcopy(data) if data else {}
        self._source_language = source_language
        self._target_language = target_language
        self._services: Dict[str, Any] = {}

    # ========== Data Access ==========

    def get(self, path: str) -> Any:
        """Return the value at path, or None if it does not resolve."""
        return get_path(self._data, path)

    def set(self, path: str, value: Any) -> None:
        """Assign value at path, creating intermediate containers."""
        set_path(self._data, path, value)

    def has(self, path: str) -> bool:
        """Return True if every segment of path exists."""
        return has_path(self._data, path)

    def delete(self, path: str) -> None:
        """Remove the value at path; missing paths are ignored."""
        delete_path(self._data, path)

    def export(self) -> Dict[str, Any]:
        """Return a snapshot of the full document."""
        return copy.deepcopy(self._data)

    # ========== Identity ==========

    @abstractmethod
    def is_virtual(self) -> bool:
        """Return True if the context has no persisted record behind it."""
        pass

    @abstractmethod
    def get_post_id(self) -> Optional[int]:
        """Return the backing record id, or None for virtual contexts."""
        pass

    def get_source_language(self) -> str:
        return self._source_language

    def get_target_language(self) -> str:
        return self._target_language

    # ========== Services ==========

    def register_service(self, name: str, service: Any) -> None:
        """Make a named service available to steps running on this context.

        Args:
            name: Service identifier (e.g. 'TaxonomyResolver')
            service: Service instance
        """
        self._services[name] = service

    def get_service(self, name: str) -> Any:
        return self._services.get(name)

    def has_service(self, name: str) -> bool:
        return name in self._services

    def get_services(self) -> Dict[str, Any]:
        return dict(self._services)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(post_id={self.get_post_id()!r}, "
            f"source={self._source_language!r}, target={self._target_language!r})"
        )
