"""Taxonomy term resolution across languages.

Maps a category or tag from the source language of a run to its equivalent
in the target language, using the host's term translation relationships.
The resolver is read-only: it never creates or modifies terms.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any, Dict, List, Optional

from ..collaborators.terms import TermTranslations

logger = logging.getLogger(__name__)


def _as_term_id(value: Any) -> Optional[int]:
    """Convert a term id to int, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ResolutionStatus(Enum):
    """Outcome of one term lookup."""

    MATCHED = "matched"  # Found the target-language term
    UNRESOLVED = "unresolved"  # Term exists, no translation for target language
    UNKNOWN = "unknown"  # Term not found in system
    PASSTHROUGH = "passthrough"  # Resolution skipped


@dataclass(frozen=True)
class TaxonomyResolution:
    """Result of resolving a single term."""

    original: Dict[str, Any]
    resolved: Optional[Dict[str, Any]]
    status: ResolutionStatus
    message: Optional[str] = None

    @classmethod
    def matched(cls, original: Dict[str, Any], resolved: Dict[str, Any]) -> "TaxonomyResolution":
        return cls(original, resolved, ResolutionStatus.MATCHED)

    @classmethod
    def unresolved(
        cls, original: Dict[str, Any], message: Optional[str] = None
    ) -> "TaxonomyResolution":
        return cls(original, None, ResolutionStatus.UNRESOLVED, message)

    @classmethod
    def unknown(cls, original: Dict[str, Any]) -> "TaxonomyResolution":
        return cls(original, None, ResolutionStatus.UNKNOWN, "Term not found in system")

    @classmethod
    def passthrough(cls, original: Dict[str, Any]) -> "TaxonomyResolution":
        # The term is used as-is, so it is its own resolution
        return cls(original, original, ResolutionStatus.PASSTHROUGH)

    def is_resolved(self) -> bool:
        """Return True only for an actual target-language match."""
        return self.status is ResolutionStatus.MATCHED and self.resolved is not None

    @property
    def effective(self) -> Dict[str, Any]:
        """Resolved term if there is one, otherwise the original."""
        return self.resolved if self.resolved is not None else self.original

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "resolved": self.resolved,
            "status": self.status.value,
            "message": self.message,
        }


class BaseTaxonomyResolver(ABC):
    """Interface of services registered as ``TaxonomyResolver``."""

    @abstractmethod
    def resolve(
        self,
        taxonomy: str,
        term: Dict[str, Any],
        source_language: str,
        target_language: str,
    ) -> TaxonomyResolution:
        """Resolve one term.

        Args:
            taxonomy: Taxonomy name (e.g. 'category', 'post_tag')
            term: Term data with any of ``id``, ``slug``, ``name``
            source_language: Language the term is in
            target_language: Language to resolve to

        Returns:
            Resolution describing the outcome
        """
        pass

    def resolve_batch(
        self,
        taxonomy: str,
        terms: List[Dict[str, Any]],
        source_language: str,
        target_language: str,
    ) -> List[TaxonomyResolution]:
        """Resolve several terms of one taxonomy, preserving order."""
        return [
            self.resolve(taxonomy, term, source_language, target_language) for term in terms
        ]

    @abstractmethod
    def is_available(self, taxonomy: str) -> bool:
        """Return True if the resolver can translate terms of this taxonomy."""
        pass


class TaxonomyResolver(BaseTaxonomyResolver):
    """Resolver backed by a TermTranslations collaborator.

    Without a collaborator every resolution is a passthrough.
    """

    def __init__(self, terms: Optional[TermTranslations] = None):
        self._terms = terms
        self._translatable_cache: Dict[str, bool] = {}
        self._cache_lock = Lock()

    def resolve(
        self,
        taxonomy: str,
        term: Dict[str, Any],
        source_language: str,
        target_language: str,
    ) -> TaxonomyResolution:
        if self._terms is None or not self.is_available(taxonomy):
            return TaxonomyResolution.passthrough(term)

        if source_language == target_language:
            return TaxonomyResolution.passthrough(term)

        source_term = self._find_term(taxonomy, term, source_language)
        if source_term is None:
            return TaxonomyResolution.unknown(term)

        translations = self._terms.get_term_translations(source_term["id"])
        if target_language not in translations:
            label = term.get("slug") or term.get("name") or "unknown"
            return TaxonomyResolution.unresolved(
                term, f'No {target_language.upper()} translation for term "{label}"'
            )

        target_id = translations[target_language]
        target_term = self._terms.get_term(target_id, taxonomy)
        if target_term is None:
            return TaxonomyResolution.unresolved(term, f"Target term ID {target_id} not found")

        return TaxonomyResolution.matched(
            term,
            {
                "id": target_term["id"],
                "slug": target_term["slug"],
                "name": target_term["name"],
                "taxonomy": target_term["taxonomy"],
            },
        )

    def is_available(self, taxonomy: str) -> bool:
        if self._terms is None:
            return False

        with self._cache_lock:
            if taxonomy not in self._translatable_cache:
                self._translatable_cache[taxonomy] = bool(
                    self._terms.is_translated_taxonomy(taxonomy)
                )
            return self._translatable_cache[taxonomy]

    def _find_term(
        self, taxonomy: str, term: Dict[str, Any], language: str
    ) -> Optional[Dict[str, Any]]:
        """Locate the source-language term by id, then slug, then name."""
        term_id = _as_term_id(term.get("id"))
        if term_id:
            found = self._terms.get_term(term_id, taxonomy)
            if found is not None and self._terms.get_term_language(found["id"]) == language:
                return found

        for field in ("slug", "name"):
            if not term.get(field):
                continue
            found = self._terms.get_term_by(field, term[field], taxonomy)
            if found is None:
                continue
            if self._terms.get_term_language(found["id"]) == language:
                return found
            # Matched in another language; use its source-language sibling
            return self._find_term_in_language(found["id"], language)

        return None

    def _find_term_in_language(self, term_id: int, language: str) -> Optional[Dict[str, Any]]:
        translations = self._terms.get_term_translations(term_id)
        if language not in translations:
            logger.debug(f"Term {term_id} has no {language} version")
            return None
        return self._terms.get_term(translations[language])
