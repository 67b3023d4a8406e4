"""
Key/value storage backends.

Backends hold string values under string keys. They never raise: read
failures look like an empty store and write failures are logged and
dropped, so persistence can only ever degrade to "nothing saved".
"""

import hashlib
import hmac
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from .audit_logger import AuditLogger
from .enums import LogLevel


class KeyValueStore(Protocol):
    """Minimal string key/value storage."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """In-memory backend, used for tests and one-shot CLI runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    @property
    def items(self) -> dict[str, str]:
        """Get a copy of the stored items."""
        return dict(self._items)


class FileKeyValueStore:
    """
    JSON file backend with optional HMAC protection.

    The whole file is loaded once on first access and rewritten on every
    change through a temporary file and an atomic rename, so a reader
    never sees a partially written document. When an HMAC secret is set,
    a file whose seal does not verify is treated as empty.
    """

    COMPONENT = "FileKeyValueStore"
    VERSION = 1

    def __init__(
        self,
        file_path: Path,
        hmac_secret: Optional[str] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the file store.

        Args:
            file_path: Path to the storage file (JSON format)
            hmac_secret: Optional secret used to seal the file
            logger: Optional audit logger for read/write failures
        """
        self._file_path = Path(file_path)
        self._hmac_secret = hmac_secret.encode("utf-8") if hmac_secret else None
        self._logger = logger
        self._items: Optional[dict[str, str]] = None

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def compute_hmac(self, data: dict) -> str:
        """
        Compute HMAC-SHA256 over serialized data.

        Args:
            data: Dictionary to compute HMAC over

        Returns:
            Hexadecimal HMAC string
        """
        serialized = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hmac.new(
            self._hmac_secret or b"",
            serialized.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        self._items = {}
        if not self._file_path.exists():
            return self._items

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except (OSError, ValueError) as e:
            self._warn("Failed to read storage file", e)
            return self._items

        if not isinstance(raw_data, dict) or not isinstance(raw_data.get("items"), dict):
            self._warn("Ignoring storage file with unexpected shape")
            return self._items

        if self._hmac_secret is not None and not self._verify_seal(raw_data):
            self._warn("HMAC validation failed, ignoring storage file")
            return self._items

        self._items = {k: v for k, v in raw_data["items"].items() if isinstance(v, str)}
        return self._items

    def _verify_seal(self, raw_data: dict) -> bool:
        seal = raw_data.get("hmac")
        if not isinstance(seal, str):
            return False
        try:
            seal_bytes = seal.encode("utf-8")
        except UnicodeEncodeError:
            return False
        expected = self.compute_hmac({"version": raw_data.get("version"), "items": raw_data["items"]})
        return hmac.compare_digest(seal_bytes, expected.encode("ascii"))

    def _save(self, items: dict[str, str]) -> None:
        output_data: dict = {"version": self.VERSION, "items": items}
        if self._hmac_secret is not None:
            output_data["hmac"] = self.compute_hmac({"version": self.VERSION, "items": items})

        tmp_path = None
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._file_path.parent, prefix=".storage-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(output_data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self._file_path)
            tmp_path = None
        except OSError as e:
            self._warn("Failed to write storage file", e)
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def _warn(self, message: str, error: Optional[BaseException] = None) -> None:
        if self._logger:
            data = {"file_path": str(self._file_path)}
            if error is not None:
                data["error_message"] = str(error)
                data["error_type"] = type(error).__name__
            self._logger.log(LogLevel.WARN, self.COMPONENT, message, data)

    @property
    def file_path(self) -> Path:
        """Get the storage file path."""
        return self._file_path
