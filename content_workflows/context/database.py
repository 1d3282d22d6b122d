"""Record-backed workflow context with buffered writes.

Loads a content record into the ``{post, meta, taxonomy}`` document shape and
tracks every change made under ``post.*`` and ``meta.*`` so it can be written
back with :meth:`DatabaseWorkflowContext.commit`.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Optional

from ..collaborators.languages import LanguageRelations
from ..collaborators.records import RecordAccessor
from .base import WorkflowContext
from .paths import split_path

logger = logging.getLogger(__name__)

# Context field name -> record field name
FIELD_MAP = {
    "title": "title",
    "content": "content",
    "excerpt": "summary",
    "status": "status",
    "slug": "slug",
    "author": "author",
    "parent": "parent_id",
    "date": "created_at",
}

_MISSING = object()


class DatabaseWorkflowContext(WorkflowContext):
    """Context backed by a persisted record.

    Writes are buffered in two change sets (record fields and metadata
    entries) until :meth:`commit`, unless ``auto_commit`` is enabled.
    """

    def __init__(
        self,
        records: RecordAccessor,
        post_id: int,
        source_language: str,
        target_language: str,
        auto_commit: bool = False,
    ):
        self._records = records
        self._post_id = post_id
        self._auto_commit = auto_commit
        self._post_changes: Dict[str, Any] = {}
        self._meta_changes: Dict[str, Any] = {}

        super().__init__(self._load_record_data(), source_language, target_language)

    def is_virtual(self) -> bool:
        return False

    def get_post_id(self) -> Optional[int]:
        return self._post_id

    @property
    def auto_commit(self) -> bool:
        return self._auto_commit

    # ========== Change Tracking ==========

    def set(self, path: str, value: Any) -> None:
        super().set(path, value)
        self._track(path)

    def delete(self, path: str) -> None:
        super().delete(path)
        self._track(path)

    def _track(self, path: str) -> None:
        segments = split_path(path)
        if len(segments) < 2 or segments[0] not in ("post", "meta"):
            return

        namespace, field = segments[0], segments[1]
        changes = self._post_changes if namespace == "post" else self._meta_changes
        current = self._current_value(namespace, field)

        if current is _MISSING:
            changes.pop(field, None)
            return

        changes[field] = copy.deepcopy(current)
        if self._auto_commit:
            if namespace == "post":
                self._commit_post_fields({field: changes[field]})
            else:
                self._commit_meta_field(field)

    def _current_value(self, namespace: str, field: str) -> Any:
        section = self._data.get(namespace)
        if not isinstance(section, dict) or field not in section:
            return _MISSING
        return section[field]

    def has_changes(self) -> bool:
        """Return True if there are uncommitted changes."""
        return bool(self._post_changes) or bool(self._meta_changes)

    def get_pending_changes(self) -> Dict[str, Dict[str, Any]]:
        """Return the buffered changes as ``{"post": {...}, "meta": {...}}``."""
        return {
            "post": copy.deepcopy(self._post_changes),
            "meta": copy.deepcopy(self._meta_changes),
        }

    # ========== Commit / Rollback ==========

    def commit(self) -> bool:
        """Write buffered changes to the record store.

        Record fields go out in a single update; each metadata entry is
        written on its own. Entries are only cleared once their write
        succeeded, so after a failure :meth:`get_pending_changes` still
        holds what was not persisted. An accessor signals failure by
        returning False or raising.

        Post fields with no record counterpart are never written. They are
        cleared together with the mapped fields of a successful update and
        otherwise stay pending.

        Returns:
            True if no write failed
        """
        success = True

        if self._post_changes:
            if not self._commit_post_fields(dict(self._post_changes)):
                success = False

        for key in list(self._meta_changes):
            if not self._commit_meta_field(key):
                success = False

        if success:
            logger.debug(f"Committed all changes for record {self._post_id}")
        else:
            logger.warning(f"Commit for record {self._post_id} left pending changes")
        return success

    def rollback(self) -> None:
        """Discard uncommitted changes and reload from the record store."""
        self._post_changes = {}
        self._meta_changes = {}
        self._data = self._load_record_data()

    def _commit_post_fields(self, fields: Dict[str, Any]) -> bool:
        update = {}
        unmapped = []
        for field, value in fields.items():
            record_field = FIELD_MAP.get(field)
            if record_field:
                update[record_field] = value
            else:
                unmapped.append(field)

        if unmapped:
            logger.info(
                f"Record {self._post_id}: not persisting unmapped post fields {unmapped}"
            )

        # Only unmapped fields: nothing to write, they stay pending
        if not update:
            return True

        if not self._write(
            lambda: self._records.update_record(self._post_id, update), "record fields"
        ):
            return False

        for field in fields:
            self._post_changes.pop(field, None)
        return True

    def _commit_meta_field(self, key: str) -> bool:
        value = self._meta_changes[key]
        if not self._write(
            lambda: self._records.update_metadata(self._post_id, key, value),
            f"metadata '{key}'",
        ):
            return False
        del self._meta_changes[key]
        return True

    def _write(self, operation, label: str) -> bool:
        try:
            result = operation()
        except Exception as e:
            logger.error(f"Failed to write {label} of record {self._post_id}: {e}")
            return False
        if result is False:
            logger.error(f"Failed to write {label} of record {self._post_id}")
            return False
        return True

    # ========== Loading ==========

    def _load_record_data(self) -> Dict[str, Any]:
        record = self._records.get_record(self._post_id)
        if not record:
            return {}

        data: Dict[str, Any] = {
            "post": {
                "id": record.get("id"),
                "title": record.get("title"),
                "content": record.get("content"),
                "excerpt": record.get("summary"),
                "status": record.get("status"),
                "type": record.get("type"),
                "author": record.get("author"),
                "date": record.get("created_at"),
                "modified": record.get("modified_at"),
                "slug": record.get("slug"),
                "parent": record.get("parent_id"),
            },
            "meta": {},
            "taxonomy": {"categories": [], "tags": []},
        }

        for key, value in self._records.get_metadata(self._post_id).items():
            # Internal metadata
            if key.startswith("_"):
                continue
            data["meta"][key] = value

        for taxonomy, section in (("category", "categories"), ("post_tag", "tags")):
            for term in self._records.get_terms(self._post_id, taxonomy):
                data["taxonomy"][section].append(
                    {"id": term.get("id"), "slug": term.get("slug"), "name": term.get("name")}
                )

        return data

    @classmethod
    def from_record(
        cls,
        records: RecordAccessor,
        post_id: int,
        languages: Optional[LanguageRelations] = None,
        auto_commit: bool = False,
        default_source_language: str = "en",
        source_language_meta_key: str = "_polytrans_source_language",
    ) -> Optional["DatabaseWorkflowContext"]:
        """Create a context for a record, detecting its language pair.

        The target language is the record's own language. The source is the
        first other language in its translation group, then the language
        stored in ``source_language_meta_key``, then the default.

        Returns:
            Context, or None if the record does not exist
        """
        if records.get_record(post_id) is None:
            return None

        source_language = ""
        target_language = ""

        if languages is not None:
            target_language = languages.get_language(post_id) or ""
            candidates = [
                language
                for language, translation_id in languages.get_translations(post_id).items()
                if language != target_language and translation_id != post_id
            ]
            if candidates:
                source_language = candidates[0]
                if len(candidates) > 1:
                    logger.warning(
                        f"Record {post_id} has several candidate source languages "
                        f"{candidates}, using '{source_language}'"
                    )

        if not source_language:
            stored = records.get_metadata(post_id).get(source_language_meta_key)
            source_language = stored or default_source_language

        return cls(records, post_id, source_language, target_language, auto_commit)
