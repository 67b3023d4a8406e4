"""
Versioned, migratable documents on top of a key/value backend.

Every persisted document is a JSON object carrying an integer
``schemaVersion``. Older versions are validated and migrated step by
step up to the latest version on read; documents from a newer version
are never guessed at. Reads that migrated or came from a legacy key
rewrite the primary key with the canonical latest document.
"""

import json
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .audit_logger import AuditLogger
from .enums import LogLevel
from .exceptions import PersistenceError, ValidationError
from .storage import KeyValueStore


STORAGE_NAMESPACE = "seocheck"

# Returns the normalized document or raises ValidationError
Validator = Callable[[Any], dict]
# Maps a validated document of version N to a document of a later version
Migration = Callable[[dict], Any]
# Maps legacy or untyped shapes into a versioned envelope; None keeps the input
Coercer = Callable[[Any], Any]


def make_storage_key(*parts: str) -> str:
    """Build a namespaced storage key such as ``seocheck.seo.history``."""
    return ".".join([STORAGE_NAMESPACE, *parts])


def schema_version(value: Any) -> Optional[int]:
    """Return the integer schemaVersion of a document, or None."""
    if not isinstance(value, dict):
        return None
    version = value.get("schemaVersion")
    if isinstance(version, bool):
        return None
    if isinstance(version, int):
        return version
    if isinstance(version, float) and version.is_integer():
        return int(version)
    return None


def parse_raw(raw: str) -> Any:
    """Parse stored JSON; a value that is not JSON is returned as the raw string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def require_type(value: Any, expected: Union[type, tuple[type, ...]], field_name: str) -> Any:
    """Return value if it has the expected type, else raise ValidationError. Booleans are not numbers here."""
    if isinstance(value, bool) and expected is not bool:
        raise ValidationError(code="invalid_field", message=f"{field_name} has the wrong type")
    if not isinstance(value, expected):
        raise ValidationError(code="invalid_field", message=f"{field_name} has the wrong type")
    return value


class VersionedStore:
    """
    A single versioned document stored under one key.

    read() returns the latest-version document or None; write() validates
    before persisting and silently drops invalid documents; remove()
    deletes the primary key.
    """

    COMPONENT = "VersionedStore"

    def __init__(
        self,
        backend: KeyValueStore,
        key: str,
        latest_version: int,
        validators: Mapping[int, Validator],
        migrations: Optional[Mapping[int, Migration]] = None,
        legacy_keys: Sequence[str] = (),
        coerce: Optional[Coercer] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            backend: Key/value backend
            key: Primary storage key
            latest_version: Current schema version
            validators: Validator per schema version
            migrations: Migration per source schema version
            legacy_keys: Keys consulted, in order, when the primary key is absent
            coerce: Optional mapping of legacy shapes into a versioned envelope
            logger: Optional audit logger

        Raises:
            PersistenceError: If no validator exists for latest_version
        """
        if latest_version not in validators:
            raise PersistenceError(
                code="missing_schema",
                message=f"Missing schema for version {latest_version}",
                details={"key": key},
            )
        self._backend = backend
        self._key = key
        self._latest_version = latest_version
        self._validators = dict(validators)
        self._migrations = dict(migrations or {})
        self._legacy_keys = tuple(legacy_keys)
        self._coerce = coerce
        self._logger = logger

    def read(self) -> Optional[dict]:
        """
        Read the document, migrating it to the latest version if needed.

        Returns:
            The latest-version document, or None when nothing usable is stored
        """
        found = self._read_raw()
        if found is None:
            return None
        raw, source_key = found

        parsed = parse_raw(raw)
        candidate = parsed
        if self._coerce is not None:
            coerced = self._coerce(parsed)
            if coerced is not None:
                candidate = coerced

        version = schema_version(candidate)
        if version is None or version > self._latest_version:
            self._log(LogLevel.DEBUG, "Ignoring document with unknown schema version", {
                "key": source_key,
                "schema_version": version,
            })
            return None

        current = candidate
        migrated = False
        while version != self._latest_version:
            validator = self._validators.get(version)
            migration = self._migrations.get(version)
            if validator is None or migration is None:
                self._log(LogLevel.WARN, "No migration path for document", {
                    "key": source_key,
                    "schema_version": version,
                })
                return None

            try:
                validated = validator(current)
            except ValidationError as e:
                self._log(LogLevel.WARN, "Stored document failed validation", {
                    "key": source_key,
                    "schema_version": version,
                    "error_message": e.message,
                })
                return None

            next_doc = migration(validated)
            next_version = schema_version(next_doc)
            if next_version is None or next_version <= version or next_version > self._latest_version:
                self._log(LogLevel.WARN, "Migration produced an invalid version", {
                    "key": source_key,
                    "from_version": version,
                    "to_version": next_version,
                })
                return None

            current = next_doc
            version = next_version
            migrated = True

        try:
            document = self._validators[self._latest_version](current)
        except ValidationError as e:
            self._log(LogLevel.WARN, "Stored document failed validation", {
                "key": source_key,
                "schema_version": version,
                "error_message": e.message,
            })
            return None

        if migrated or source_key != self._key:
            self._log(LogLevel.INFO, "Upgraded stored document", {
                "key": self._key,
                "source_key": source_key,
                "schema_version": self._latest_version,
            })
            self._backend.set(self._key, json.dumps(document))

        return document

    def write(self, value: dict) -> bool:
        """
        Validate and persist a latest-version document.

        Returns:
            True if the document was written, False if it failed validation
        """
        try:
            document = self._validators[self._latest_version](value)
        except ValidationError as e:
            self._log(LogLevel.WARN, "Refusing to write invalid document", {
                "key": self._key,
                "error_message": e.message,
            })
            return False
        self._backend.set(self._key, json.dumps(document))
        return True

    def remove(self) -> None:
        self._backend.remove(self._key)

    def _read_raw(self) -> Optional[tuple[str, str]]:
        value = self._backend.get(self._key)
        if value is not None:
            return value, self._key
        for legacy_key in self._legacy_keys:
            legacy_value = self._backend.get(legacy_key)
            if legacy_value is not None:
                return legacy_value, legacy_key
        return None

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    @property
    def key(self) -> str:
        """Get the primary storage key."""
        return self._key

    @property
    def latest_version(self) -> int:
        """Get the latest schema version."""
        return self._latest_version
