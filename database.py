import sqlite3
import os
import time
from datetime import datetime

# Use a DB file located next to this module so the recorder uses a consistent
# store regardless of the current working directory when launched.
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_NAME = os.path.join(BASE_DIR, "payment_recorder.db")

# Keys of the three independent entries kept in the store
CATALOG_KEY = "catalog"
HISTORY_KEY = "paymentHistory"
TAX_RATE_KEY = "taxRate"


def commit_with_retry(conn, retries=6, initial_delay=0.5):
    """Attempt to commit, retrying on `sqlite3.OperationalError: database is locked`.

    Retries use exponential backoff (initial_delay * 2**attempt).
    """
    last_exc = None
    for attempt in range(retries):
        try:
            conn.commit()
            return
        except sqlite3.OperationalError as e:
            last_exc = e
            msg = str(e).lower()
            if 'locked' in msg or 'busy' in msg:
                time.sleep(initial_delay * (2 ** attempt))
                continue
            raise
    raise last_exc


class DatabaseManager:
    """String key-value store backed by a single sqlite file.

    Values are opaque text; every `set` is a full overwrite of the entry.
    """

    def __init__(self, db_name=DB_NAME):
        self.db_name = db_name
        self.check_schema()

    def connect(self):
        conn = sqlite3.connect(self.db_name, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def check_schema(self):
        conn = self.connect()
        try:
            conn.execute('''CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )''')
            commit_with_retry(conn)
        finally:
            conn.close()

    def get(self, key):
        conn = self.connect()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return row["value"]

    def set(self, key, value):
        conn = self.connect()
        try:
            conn.execute(
                "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            )
            commit_with_retry(conn)
        finally:
            conn.close()

    def delete(self, key):
        conn = self.connect()
        try:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            commit_with_retry(conn)
        finally:
            conn.close()

    def keys(self):
        conn = self.connect()
        try:
            rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        finally:
            conn.close()
        return [r["key"] for r in rows]
