import json
import logging
import sqlite3
from contextlib import contextmanager

from database.schema import settings_schema
from config import DB_PATH


# SETTINGS COMMANDS ==========================================

def get_setting(device_id, key, default=None):
    """Return the decoded value stored under key, or default when missing.

    Raises ValueError when the stored text is not valid JSON.
    """
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            'SELECT value FROM settings WHERE device_id = ? AND key = ?',
            (device_id, key)
        )
        row = cursor.fetchone()

    if row is None:
        return default
    return json.loads(row['value'])


def get_raw_setting(device_id, key):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            'SELECT value FROM settings WHERE device_id = ? AND key = ?',
            (device_id, key)
        )
        row = cursor.fetchone()
        if row:
            return row['value']
        return None


def set_setting(device_id, key, value):
    set_raw_setting(device_id, key, json.dumps(value, ensure_ascii=False))


def set_raw_setting(device_id, key, text):
    """Store text as-is. The caller is responsible for it being valid JSON."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """INSERT INTO settings (device_id, key, value) VALUES (?, ?, ?)
               ON CONFLICT(device_id, key)
               DO UPDATE SET value = excluded.value, updated_at = datetime('now')
            """,
            (device_id, key, text)
        )
    logging.debug(f"Stored {key} for device {device_id}")


def delete_setting(device_id, key):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            'DELETE FROM settings WHERE device_id = ? AND key = ?',
            (device_id, key)
        )
        return cursor.rowcount > 0


# DB CONNECTION ==============================================

@contextmanager
def get_db():
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    with get_db() as conn:
        conn.execute(settings_schema)
