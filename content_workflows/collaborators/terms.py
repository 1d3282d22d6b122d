"""Taxonomy term storage and term translation relationships."""
from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from itertools import count
from threading import Lock
from typing import Any, Dict, Optional, Set


class TermTranslations(ABC):
    """Abstract access to taxonomy terms and their cross-language links.

    Terms are plain dicts ``{id, slug, name, taxonomy}``.
    """

    @abstractmethod
    def is_translated_taxonomy(self, taxonomy: str) -> bool:
        """Return True if terms of this taxonomy have per-language versions."""
        pass

    @abstractmethod
    def get_term(self, term_id: int, taxonomy: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Load a term by id, optionally restricted to a taxonomy."""
        pass

    @abstractmethod
    def get_term_by(self, field: str, value: str, taxonomy: str) -> Optional[Dict[str, Any]]:
        """Find the first term whose ``field`` ('slug' or 'name') equals value."""
        pass

    @abstractmethod
    def get_term_language(self, term_id: int) -> Optional[str]:
        """Return the language code of a term, or None if unassigned."""
        pass

    @abstractmethod
    def get_term_translations(self, term_id: int) -> Dict[str, int]:
        """Return language -> term id for every translation of a term (itself included)."""
        pass


class InMemoryTermTranslations(TermTranslations):
    """In-memory term registry for standalone use and testing."""

    def __init__(self, translated_taxonomies: Optional[Set[str]] = None):
        self._terms: Dict[int, Dict[str, Any]] = {}
        self._languages: Dict[int, str] = {}
        self._groups: Dict[int, Dict[str, int]] = {}
        self._translated = set(translated_taxonomies or {"category", "post_tag"})
        self._ids = count(1)
        self._lock = Lock()

    def add_term(
        self,
        taxonomy: str,
        slug: str,
        name: str,
        language: Optional[str] = None,
        term_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Create a term and return it."""
        with self._lock:
            if term_id is None:
                term_id = next(self._ids)
                while term_id in self._terms:
                    term_id = next(self._ids)
            term = {"id": term_id, "slug": slug, "name": name, "taxonomy": taxonomy}
            self._terms[term_id] = term
            if language:
                self._languages[term_id] = language
            return dict(term)

    def link_translations(self, translations: Dict[str, int]) -> None:
        """Put terms into one translation group (language -> term id)."""
        with self._lock:
            group = dict(translations)
            for language, term_id in group.items():
                self._languages.setdefault(term_id, language)
                self._groups[term_id] = group

    def remove_term(self, term_id: int) -> None:
        """Delete a term but keep dangling references in translation groups."""
        with self._lock:
            self._terms.pop(term_id, None)

    def set_translated(self, taxonomy: str, translated: bool = True) -> None:
        with self._lock:
            if translated:
                self._translated.add(taxonomy)
            else:
                self._translated.discard(taxonomy)

    def is_translated_taxonomy(self, taxonomy: str) -> bool:
        with self._lock:
            return taxonomy in self._translated

    def get_term(self, term_id: int, taxonomy: Optional[str] = None) -> Optional[Dict[str, Any]]:
        with self._lock:
            term = self._terms.get(term_id)
            if term is None or (taxonomy is not None and term["taxonomy"] != taxonomy):
                return None
            return copy.deepcopy(term)

    def get_term_by(self, field: str, value: str, taxonomy: str) -> Optional[Dict[str, Any]]:
        if field not in ("slug", "name"):
            raise ValueError(f"Unsupported term lookup field: {field}")
        with self._lock:
            for term in self._terms.values():
                if term["taxonomy"] == taxonomy and term[field] == value:
                    return copy.deepcopy(term)
            return None

    def get_term_language(self, term_id: int) -> Optional[str]:
        with self._lock:
            return self._languages.get(term_id)

    def get_term_translations(self, term_id: int) -> Dict[str, int]:
        with self._lock:
            group = self._groups.get(term_id)
            if group is None:
                language = self._languages.get(term_id)
                return {language: term_id} if language else {}
            return dict(group)
