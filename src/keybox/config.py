"""Keybox engine configuration.

Values come from the environment (optionally seeded from a local .env file) and
are re-read on every `load_config()` call so tests can monkeypatch them.
"""
from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

XML_MIME_TYPES = ("text/xml", "application/xml")
XML_SUFFIX = ".xml"


class KeyboxConfig(BaseModel):
    store_backend: str = "sqlite"  # sqlite|redis|memory
    data_dir: str = "var/data"
    redis_url: str = "redis://localhost:6379/0"
    user: str = "0"
    setting_key: str = "keybox_data"

    # Read budget for a single import; larger sources are treated as malformed
    max_bytes: int = 1024 * 1024
    read_chunk: int = 8192


def load_config() -> KeyboxConfig:
    return KeyboxConfig(
        store_backend=os.getenv("KEYBOX_STORE_BACKEND", "sqlite").lower(),
        data_dir=os.getenv("DATA_DIR", "var/data"),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        user=os.getenv("KEYBOX_USER", "0"),
        setting_key=os.getenv("KEYBOX_SETTING_KEY", "keybox_data"),
        max_bytes=int(os.getenv("KEYBOX_MAX_BYTES", str(1024 * 1024))),
        read_chunk=int(os.getenv("KEYBOX_READ_CHUNK", "8192")),
    )
