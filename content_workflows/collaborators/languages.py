"""Language relationships between content records."""
from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, Optional


class LanguageRelations(ABC):
    """Abstract view of record languages and translation groups."""

    @abstractmethod
    def get_language(self, record_id: int) -> Optional[str]:
        """Return the language code assigned to a record, or None."""
        pass

    @abstractmethod
    def get_translations(self, record_id: int) -> Dict[str, int]:
        """Return the translation group of a record as language -> record id.

        The record itself is part of its group. Order is significant: it is
        the iteration order used when guessing a source language.
        """
        pass


class InMemoryLanguageRelations(LanguageRelations):
    """In-memory language assignments and translation groups."""

    def __init__(self):
        self._languages: Dict[int, str] = {}
        self._groups: Dict[int, Dict[str, int]] = {}
        self._lock = Lock()

    def set_language(self, record_id: int, language: str) -> None:
        with self._lock:
            self._languages[record_id] = language

    def link_translations(self, translations: Dict[str, int]) -> None:
        """Put records into one translation group.

        Args:
            translations: Language code -> record id, in group order
        """
        with self._lock:
            group = dict(translations)
            for language, record_id in group.items():
                self._languages.setdefault(record_id, language)
                self._groups[record_id] = group

    def get_language(self, record_id: int) -> Optional[str]:
        with self._lock:
            return self._languages.get(record_id)

    def get_translations(self, record_id: int) -> Dict[str, int]:
        with self._lock:
            return dict(self._groups.get(record_id, {}))
