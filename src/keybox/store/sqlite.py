import os, sqlite3, threading, time
from typing import Optional

_SCHEMA = """
CREATE TABLE IF NOT EXISTS secure_settings(
  user TEXT NOT NULL,
  name TEXT NOT NULL,
  value TEXT NOT NULL,
  updated_ts INTEGER NOT NULL,
  PRIMARY KEY (user, name)
);
"""

# One lock for every store instance in the process; sqlite handles cross-process access
_LOCK = threading.Lock()


class SqliteSettingsStore:
    def __init__(self, data_dir: str, filename: str = "settings.db"):
        self.data_dir = data_dir
        self.path = os.path.join(data_dir, filename)
        with _LOCK:
            conn = self._connect()
            try:
                for stmt in _SCHEMA.strip().split(';'):
                    s = stmt.strip()
                    if s:
                        conn.execute(s)
            finally:
                conn.close()

    def _connect(self):
        os.makedirs(self.data_dir, exist_ok=True)
        conn = sqlite3.connect(self.path, timeout=5, isolation_level=None)
        conn.execute('PRAGMA journal_mode=WAL;')
        conn.execute('PRAGMA synchronous=NORMAL;')
        return conn

    def get(self, user: str, name: str) -> Optional[str]:
        with _LOCK:
            c = self._connect()
            try:
                row = c.execute('SELECT value FROM secure_settings WHERE user=? AND name=?', (user, name)).fetchone()
                return row[0] if row else None
            finally:
                c.close()

    def put(self, user: str, name: str, value: str) -> None:
        with _LOCK:
            c = self._connect()
            try:
                c.execute('INSERT OR REPLACE INTO secure_settings(user,name,value,updated_ts) VALUES (?,?,?,?)',
                          (user, name, value, int(time.time())))
            finally:
                c.close()

    def delete(self, user: str, name: str) -> None:
        with _LOCK:
            c = self._connect()
            try:
                c.execute('DELETE FROM secure_settings WHERE user=? AND name=?', (user, name))
            finally:
                c.close()
