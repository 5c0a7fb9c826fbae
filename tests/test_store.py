import pytest

from keybox.config import KeyboxConfig
from keybox.persistence import BundlePersistence, open_store
from keybox.store.memory import MemorySettingsStore
from keybox.store.redis_store import RedisSettingsStore
from keybox.store.sqlite import SqliteSettingsStore


class FakeRedis:
    def __init__(self):
        self.data = {}

    def get(self, k):
        return self.data.get(k)

    def set(self, k, v):
        self.data[k] = v

    def delete(self, k):
        self.data.pop(k, None)


def test_sqlite_store_roundtrip_and_scope(tmp_path):
    s = SqliteSettingsStore(str(tmp_path / "data"))
    assert s.get("0", "keybox_data") is None
    s.put("0", "keybox_data", "<a/>")
    s.put("10", "keybox_data", "<b/>")
    s.put("0", "keybox_data", "<c/>")
    assert s.get("0", "keybox_data") == "<c/>"
    assert s.get("10", "keybox_data") == "<b/>"
    s.delete("0", "keybox_data")
    s.delete("0", "keybox_data")
    assert s.get("0", "keybox_data") is None


def test_sqlite_store_persists_across_instances(tmp_path):
    SqliteSettingsStore(str(tmp_path)).put("0", "k", "v")
    assert SqliteSettingsStore(str(tmp_path)).get("0", "k") == "v"


def test_redis_store_keys():
    fake = FakeRedis()
    s = RedisSettingsStore("redis://unused", client=fake)
    s.put("0", "keybox_data", "<a/>")
    assert fake.data == {"settings:secure:0:keybox_data": "<a/>"}
    assert s.get("0", "keybox_data") == "<a/>"
    s.delete("0", "keybox_data")
    assert s.get("0", "keybox_data") is None


def test_open_store_selects_backend(tmp_path):
    assert isinstance(open_store(KeyboxConfig(store_backend="memory")), MemorySettingsStore)
    assert isinstance(open_store(KeyboxConfig(store_backend="sqlite", data_dir=str(tmp_path))), SqliteSettingsStore)
    with pytest.raises(ValueError):
        open_store(KeyboxConfig(store_backend="etcd"))


def test_open_store_reads_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("KEYBOX_STORE_BACKEND", "SQLITE")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "env"))
    s = open_store()
    assert isinstance(s, SqliteSettingsStore)
    assert s.path.startswith(str(tmp_path / "env"))


def test_persistence_treats_empty_as_absent():
    store = MemorySettingsStore()
    p = BundlePersistence(store, user="0", setting_key="keybox_data")
    assert p.has_bundle() is False
    store.put("0", "keybox_data", "")
    assert p.has_bundle() is False
    p.replace("<x/>")
    assert p.has_bundle() is True
    p.clear()
    assert p.read() is None
