"""Key-value preference stores.

Preferences are plain strings keyed by name. ``put_string`` reports
success as a bool instead of raising so callers can treat persistence
as best-effort.
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class PreferenceStore(ABC):
    """Base class for string preference stores."""

    @abstractmethod
    def get_string(self, key: str, default: str = "") -> str:
        """Get a stored string, or ``default`` if unset."""
        pass

    @abstractmethod
    def put_string(self, key: str, value: str) -> bool:
        """Store a string.

        Returns:
            True if the value was written durably
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Remove a key. Removing a missing key succeeds."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List the stored keys."""
        pass

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Get a stored integer, or ``default`` if unset or malformed."""
        raw = self.get_string(key, "")
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring malformed integer preference {key}={raw!r}")
            return default

    def put_int(self, key: str, value: int) -> bool:
        return self.put_string(key, str(int(value)))


class MemoryPreferenceStore(PreferenceStore):
    """Preferences held in a dict; lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_string(self, key: str, default: str = "") -> str:
        with self._lock:
            return self._values.get(key, default)

    def put_string(self, key: str, value: str) -> bool:
        with self._lock:
            self._values[key] = value
        return True

    def remove(self, key: str) -> bool:
        with self._lock:
            self._values.pop(key, None)
        return True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._values)


class JsonPreferenceStore(PreferenceStore):
    """Preferences persisted to a JSON file.

    Every write rewrites the file through a temporary file and
    ``os.replace`` so a crash never leaves a half-written file behind.
    The file is re-read on every access, so separate instances (and
    separate processes) see each other's writes.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize the store.

        Args:
            path: JSON file to read and write (created on first write)
        """
        self.path = Path(path).expanduser()
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read preferences from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed preferences file {self.path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, values: Dict[str, str]) -> bool:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(values, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write preferences to {self.path}: {e}")
            return False
        return True

    def get_string(self, key: str, default: str = "") -> str:
        with self._lock:
            return self._load().get(key, default)

    def put_string(self, key: str, value: str) -> bool:
        with self._lock:
            values = self._load()
            values[key] = value
            return self._save(values)

    def remove(self, key: str) -> bool:
        with self._lock:
            values = self._load()
            if key not in values:
                return True
            del values[key]
            return self._save(values)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._load())

    def __repr__(self) -> str:
        return f"JsonPreferenceStore(path='{self.path}')"
