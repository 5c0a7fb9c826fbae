from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple


class MemorySettingsStore:
    """In-process store used by tests and when no persistence is wanted."""

    def __init__(self):
        self._values: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def get(self, user: str, name: str) -> Optional[str]:
        with self._lock:
            return self._values.get((user, name))

    def put(self, user: str, name: str, value: str) -> None:
        with self._lock:
            self._values[(user, name)] = value

    def delete(self, user: str, name: str) -> None:
        with self._lock:
            self._values.pop((user, name), None)
