"""
Committed key/value storage for kvtx.

GlobalStore is the baseline every transaction commits into. It is owned
by a Session (or handed to a TxStack directly) rather than living at
module level, so independent sessions never share state unless they are
given the same store.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class GlobalStore:
    """
    Committed key -> value mapping.

    All mutations and snapshots run under a reentrant lock, so several
    TxStacks may commit into the same store from different threads.

    Usage:
        store = GlobalStore()
        store.set("a", "1")
        store.get("a")       # "1"
        store.delete("a")
        "a" in store         # False
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        """
        Read the committed value of a key.

        Args:
            key: Key to look up

        Returns:
            Committed value, or None if the key is not set
        """
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        """
        Remove a key. Absent keys are a no-op.

        Returns:
            True if the key was present
        """
        with self._lock:
            if key not in self._data:
                return False
            del self._data[key]
            return True

    def update(self, values: Dict[str, str]) -> None:
        """Write every pair in values as one locked step."""
        with self._lock:
            self._data.update(values)
        logger.debug("Applied %d writes to global store", len(values))

    def snapshot(self) -> Dict[str, str]:
        """Return a plain dict copy of the committed state."""
        with self._lock:
            return dict(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"GlobalStore({len(self)} keys)"
