"""
User preferences.

Stored under ``seocheck.app.preferences`` as schema version 2. Version 1
documents and the unversioned ``preferences`` key written by older
releases are migrated on first read.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .audit_logger import AuditLogger
from .exceptions import ValidationError
from .fetcher import DEFAULT_TIMEOUT_MS
from .persistence import VersionedStore, make_storage_key, require_type, schema_version
from .storage import KeyValueStore


PREFERENCES_SCHEMA_VERSION = 2
PREFERENCES_KEY = make_storage_key("app", "preferences")
LEGACY_PREFERENCES_KEY = "preferences"

OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class Preferences:
    """Saved user preferences."""

    fetch_timeout_ms: int = DEFAULT_TIMEOUT_MS
    output_format: str = "text"  # 'text' or 'json'
    background_checks: bool = True

    def to_dict(self) -> dict:
        return {
            "schemaVersion": PREFERENCES_SCHEMA_VERSION,
            "fetchTimeoutMs": self.fetch_timeout_ms,
            "outputFormat": self.output_format,
            "backgroundChecks": self.background_checks,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Preferences":
        return cls(
            fetch_timeout_ms=data["fetchTimeoutMs"],
            output_format=data["outputFormat"],
            background_checks=data["backgroundChecks"],
        )


def _positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    require_type(value, int, field_name)
    if value <= 0:
        raise ValidationError(code="invalid_field", message=f"{field_name} must be positive")
    return value


def validate_preferences_v1(value: Any) -> dict:
    if not isinstance(value, dict) or schema_version(value) != 1:
        raise ValidationError(code="invalid_schema", message="Expected a schemaVersion 1 preferences document")
    return {"schemaVersion": 1, "timeout": _positive_int(value.get("timeout"), "timeout")}


def validate_preferences_v2(value: Any) -> dict:
    if not isinstance(value, dict) or schema_version(value) != 2:
        raise ValidationError(code="invalid_schema", message="Expected a schemaVersion 2 preferences document")
    output_format = require_type(value.get("outputFormat"), str, "outputFormat")
    if output_format not in OUTPUT_FORMATS:
        raise ValidationError(code="invalid_field", message=f"Unknown output format: {output_format}")
    return {
        "schemaVersion": 2,
        "fetchTimeoutMs": _positive_int(value.get("fetchTimeoutMs"), "fetchTimeoutMs"),
        "outputFormat": output_format,
        "backgroundChecks": require_type(value.get("backgroundChecks"), bool, "backgroundChecks"),
    }


def migrate_preferences_v1_to_v2(value: dict) -> dict:
    defaults = Preferences()
    return {
        "schemaVersion": 2,
        "fetchTimeoutMs": value["timeout"],
        "outputFormat": defaults.output_format,
        "backgroundChecks": defaults.background_checks,
    }


def coerce_preferences(value: Any) -> Optional[dict]:
    """Treat an unversioned object with a timeout as a v1 document."""
    if isinstance(value, dict) and "schemaVersion" not in value and "timeout" in value:
        return {"schemaVersion": 1, "timeout": value["timeout"]}
    return None


def create_preferences_storage(backend: KeyValueStore, logger: Optional[AuditLogger] = None) -> VersionedStore:
    return VersionedStore(
        backend,
        key=PREFERENCES_KEY,
        latest_version=PREFERENCES_SCHEMA_VERSION,
        validators={1: validate_preferences_v1, 2: validate_preferences_v2},
        migrations={1: migrate_preferences_v1_to_v2},
        legacy_keys=(LEGACY_PREFERENCES_KEY,),
        coerce=coerce_preferences,
        logger=logger,
    )


class PreferencesStore:
    """Load and save Preferences; anything unreadable falls back to defaults."""

    def __init__(self, backend: KeyValueStore, logger: Optional[AuditLogger] = None) -> None:
        self._storage = create_preferences_storage(backend, logger)

    def load(self, defaults: Optional[Preferences] = None) -> Preferences:
        """
        Load the saved preferences.

        Args:
            defaults: Returned when nothing valid is stored (Preferences() when None)
        """
        document = self._storage.read()
        if document:
            return Preferences.from_dict(document)
        return defaults if defaults is not None else Preferences()

    def save(self, preferences: Preferences) -> bool:
        return self._storage.write(preferences.to_dict())

    def reset(self) -> None:
        self._storage.remove()
