from __future__ import annotations

import os
import sqlite3
import sys
from datetime import datetime, timezone
from typing import Any

from .settings import settings


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _resolve_db_path() -> str:
    """Return a file path usable by sqlite.

    If the configured path is an existing directory (a common result of
    bind-mounting a path that did not exist yet), the DB file goes inside it.
    """

    p = os.path.abspath(settings.db_path)

    if os.path.isdir(p):
        p = os.path.join(p, "svcheal.db")

    parent = os.path.dirname(p)
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)

    return p


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_resolve_db_path())
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    """Create tables if they do not exist."""
    with connect() as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS events (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              ts TEXT NOT NULL,
              level TEXT NOT NULL,
              service_name TEXT,
              message TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_events_ts ON events(ts);
            """
        )


def log_event(level: str, message: str, service_name: str | None = None) -> None:
    """Append a row to the event journal.

    The journal is a side channel: a broken or locked database is reported on
    stderr and otherwise ignored.
    """
    if not settings.enable_event_log:
        return
    try:
        init_db()
        with connect() as conn:
            conn.execute(
                "INSERT INTO events (ts, level, service_name, message) VALUES (?, ?, ?, ?)",
                (utc_now(), level.upper(), service_name, message),
            )
    except sqlite3.Error as e:
        print(f"[svcheal] event log unavailable: {e}", file=sys.stderr)


def latest_events(limit: int = 100) -> list[dict[str, Any]]:
    init_db()
    with connect() as conn:
        rows = conn.execute("SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return [dict(r) for r in rows]
