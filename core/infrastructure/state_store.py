"""Key-value state store backing the studio collections.

This module provides:
- StateStore: in-memory get/set/compare_and_set store
- JsonFileStateStore: same API, written through to a JSON file so the
  collections and the session slot survive a process restart

Collections are stored whole under a single key (e.g. "Businesses") and
replaced whole on every write. There is no partial-update API.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict

from core.logger import get_logger

logger = get_logger(__name__)


class StateStore:
    """
    In-memory key-value state store.

    Values are deep-copied on the way in and on the way out, so callers
    can never mutate stored state without going through set().

    Single-writer only. For multi-threaded use, add locking.

    Usage:
        store = StateStore()
        store.set("Businesses", [...])
        businesses = store.get("Businesses", [])
        store.compare_and_set("conversation:abc:in_flight", False, True)
    """

    def __init__(self) -> None:
        """Initialize empty state store."""
        self._data: Dict[str, Any] = {}
        logger.debug("StateStore initialized")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get value for a key.

        Args:
            key: State key to retrieve
            default: Value to return if key not found

        Returns:
            Copy of the stored value, or default
        """
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        """
        Set value for a key.

        Args:
            key: State key to set
            value: Value to store (replaces any previous value)
        """
        candidate = dict(self._data)
        candidate[key] = copy.deepcopy(value)
        self._commit(candidate)
        logger.debug(f"State set: {key}")

    def delete(self, key: str) -> bool:
        """
        Delete a key from the store.

        Args:
            key: State key to delete

        Returns:
            True if key existed and was deleted, False otherwise
        """
        if key in self._data:
            candidate = dict(self._data)
            del candidate[key]
            self._commit(candidate)
            logger.debug(f"State deleted: {key}")
            return True
        return False

    def exists(self, key: str) -> bool:
        """Check if a key exists."""
        return key in self._data

    def append(self, key: str, value: Any) -> int:
        """
        Append value to the list stored at key.

        Creates the list if the key doesn't exist.

        Args:
            key: State key for list
            value: Value to append

        Returns:
            New length of list

        Raises:
            TypeError: If existing value is not a list
        """
        current = self._data.get(key, [])
        if not isinstance(current, list):
            raise TypeError(f"Cannot append to non-list value at key '{key}'")

        candidate = dict(self._data)
        candidate[key] = current + [copy.deepcopy(value)]
        self._commit(candidate)
        logger.debug(f"State appended to: {key}")
        return len(candidate[key])

    def compare_and_set(
        self,
        key: str,
        expected: Any,
        new_value: Any,
    ) -> bool:
        """
        Set value only if current value matches expected.

        A missing key compares equal to None.

        Args:
            key: State key to update
            expected: Expected current value (or None if key should not exist)
            new_value: New value to set if expected matches

        Returns:
            True if update succeeded, False if current value != expected
        """
        current = self._data.get(key)

        if current != expected:
            logger.debug(
                f"CAS failed for {key}: expected={expected}, current={current}"
            )
            return False

        candidate = dict(self._data)
        candidate[key] = copy.deepcopy(new_value)
        self._commit(candidate)
        logger.debug(f"CAS succeeded for {key}: {expected} -> {new_value}")
        return True

    def _commit(self, candidate: Dict[str, Any]) -> None:
        """Persist ``candidate``, then make it the live state."""
        self._persist(candidate)
        self._data = candidate

    def _persist(self, data: Dict[str, Any]) -> None:
        """Hook for durable subclasses; the in-memory store keeps nothing."""


class JsonFileStateStore(StateStore):
    """
    StateStore written through to a JSON document on every mutation.

    Only JSON-serializable values may be stored. The file is rewritten
    atomically (temp file + rename) after each set/delete/CAS.
    """

    def __init__(self, path: str | Path) -> None:
        """
        Load existing state from ``path`` if present.

        Args:
            path: Location of the JSON document.

        Raises:
            ValueError: If the file exists but is not a JSON object.
        """
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            with open(self.path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ValueError(f"State file {self.path} must contain a JSON object")
            self._data = loaded
            logger.info(f"Loaded {len(self._data)} key(s) from {self.path}")

    def _persist(self, data: Dict[str, Any]) -> None:
        # Serialize before opening the file so a bad value leaves it untouched
        document = json.dumps(data, indent=2, sort_keys=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(document)
        tmp_path.replace(self.path)
