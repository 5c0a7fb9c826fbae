from __future__ import annotations

from typing import Optional

from .config import KeyboxConfig, load_config
from .store.base import SettingsStore
from .utils.logging import get_logger

log = get_logger("persistence")


def open_store(cfg: Optional[KeyboxConfig] = None) -> SettingsStore:
    cfg = cfg or load_config()
    if cfg.store_backend == "sqlite":
        from .store.sqlite import SqliteSettingsStore
        return SqliteSettingsStore(cfg.data_dir)
    if cfg.store_backend == "redis":
        from .store.redis_store import RedisSettingsStore
        return RedisSettingsStore(cfg.redis_url)
    if cfg.store_backend == "memory":
        from .store.memory import MemorySettingsStore
        return MemorySettingsStore()
    raise ValueError(f"unsupported KEYBOX_STORE_BACKEND {cfg.store_backend}")


class BundlePersistence:
    """Owns the single persisted keybox value for one user scope.

    Never inspects content: whatever the acceptor approved is written whole.
    """

    def __init__(self, store: SettingsStore, user: str, setting_key: str):
        self.store = store
        self.user = user
        self.setting_key = setting_key

    def replace(self, text: str) -> None:
        self.store.put(self.user, self.setting_key, text)
        log.info("keybox stored for user=%s (%d chars)", self.user, len(text))

    def clear(self) -> None:
        self.store.delete(self.user, self.setting_key)
        log.info("keybox cleared for user=%s", self.user)

    def has_bundle(self) -> bool:
        return bool(self.store.get(self.user, self.setting_key))

    def read(self) -> Optional[str]:
        """Raw persisted text, for the attestation consumer. Not exposed over HTTP."""
        return self.store.get(self.user, self.setting_key)
