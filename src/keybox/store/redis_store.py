import redis
from typing import Optional


class RedisSettingsStore:
    def __init__(self, url: str, client=None):
        self.r = client if client is not None else redis.from_url(url, decode_responses=True)

    @staticmethod
    def _key(user: str, name: str) -> str:
        return f"settings:secure:{user}:{name}"

    def get(self, user: str, name: str) -> Optional[str]:
        return self.r.get(self._key(user, name))

    def put(self, user: str, name: str, value: str) -> None:
        # SET replaces the whole value atomically
        self.r.set(self._key(user, name), value)

    def delete(self, user: str, name: str) -> None:
        self.r.delete(self._key(user, name))
