"""
Analysis history.

Keeps the most recent analyses, newest first, at most one entry per URL,
persisted as a versioned document under ``seocheck.seo.history``.
"""

import math
from typing import Any, Optional

from .audit_logger import AuditLogger
from .exceptions import ValidationError
from .models import AnalysisReport, HistoryEntry
from .persistence import VersionedStore, make_storage_key, require_type, schema_version
from .storage import KeyValueStore


MAX_HISTORY_ITEMS = 10
HISTORY_SCHEMA_VERSION = 1
HISTORY_KEY = make_storage_key("seo", "history")


def _score(value: Any) -> int:
    require_type(value, (int, float), "overallScore")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError(code="invalid_field", message="overallScore must be a whole number")
        value = int(value)
    return value


def validate_history_v1(value: Any) -> dict:
    """
    Validate a v1 history document.

    Returns:
        The normalized document

    Raises:
        ValidationError: If the document does not match the v1 shape
    """
    if not isinstance(value, dict) or schema_version(value) != 1:
        raise ValidationError(code="invalid_schema", message="Expected a schemaVersion 1 history document")
    items = require_type(value.get("history"), list, "history")

    history = []
    for item in items:
        require_type(item, dict, "history item")
        history.append({
            "url": require_type(item.get("url"), str, "url"),
            "analyzedAt": require_type(item.get("analyzedAt"), str, "analyzedAt"),
            "overallScore": _score(item.get("overallScore")),
        })
    return {"schemaVersion": 1, "history": history}


def coerce_history(value: Any) -> Optional[dict]:
    """Wrap a bare list of entries from older releases in a v1 envelope."""
    if isinstance(value, list):
        return {"schemaVersion": 1, "history": value}
    return None


def create_history_storage(backend: KeyValueStore, logger: Optional[AuditLogger] = None) -> VersionedStore:
    return VersionedStore(
        backend,
        key=HISTORY_KEY,
        latest_version=HISTORY_SCHEMA_VERSION,
        validators={1: validate_history_v1},
        coerce=coerce_history,
        logger=logger,
    )


class HistoryStore:
    """Most-recent-first list of analyzed URLs."""

    def __init__(
        self,
        backend: KeyValueStore,
        max_items: int = MAX_HISTORY_ITEMS,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._storage = create_history_storage(backend, logger)
        self._max_items = max_items

        persisted = self._storage.read()
        entries = [HistoryEntry.from_dict(item) for item in (persisted or {}).get("history", [])]
        self._entries: list[HistoryEntry] = self._normalize(entries)

    def add(self, entry: HistoryEntry) -> None:
        """
        Record an analysis.

        A URL already in the history moves to the front instead of being
        duplicated; the list is then cut to max_items.
        """
        self._entries = self._normalize([entry, *(e for e in self._entries if e.url != entry.url)])
        self._persist()

    def add_report(self, report: AnalysisReport) -> HistoryEntry:
        entry = HistoryEntry(
            url=report.url,
            analyzed_at=report.analyzed_at,
            overall_score=report.overall_score,
        )
        self.add(entry)
        return entry

    def clear(self) -> None:
        self._entries = []
        self._persist()

    def _normalize(self, entries: list[HistoryEntry]) -> list[HistoryEntry]:
        seen: set[str] = set()
        unique = []
        for entry in entries:
            if entry.url not in seen:
                seen.add(entry.url)
                unique.append(entry)
        return unique[: self._max_items]

    def _persist(self) -> None:
        self._storage.write({
            "schemaVersion": HISTORY_SCHEMA_VERSION,
            "history": [e.to_dict() for e in self._entries],
        })

    @property
    def entries(self) -> list[HistoryEntry]:
        """Get the history, newest first."""
        return list(self._entries)

    @property
    def max_items(self) -> int:
        return self._max_items
