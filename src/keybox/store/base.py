from __future__ import annotations

from typing import Optional, Protocol


class SettingsStore(Protocol):
    """Per-user secure settings: one string value per (user, name)."""

    def get(self, user: str, name: str) -> Optional[str]:
        ...

    def put(self, user: str, name: str, value: str) -> None:
        ...

    def delete(self, user: str, name: str) -> None:
        ...
