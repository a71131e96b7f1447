from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Iterable

import streamlit as st

from pos_core.schema import SCHEMA_SQL
from pos_core.utils import iso_now


def connect(db_path: Path | str) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return connect(db_path)


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA_SQL)
    conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    cur = conn.execute(sql, tuple(params))
    conn.commit()
    last = cur.lastrowid
    cur.close()
    return int(last or 0)


def load_store(conn: sqlite3.Connection, name: str, default: Any = None) -> Any:
    rows = q(conn, "SELECT payload FROM stores WHERE name=?", (name,))
    if not rows:
        return default
    return json.loads(rows[0]["payload"])


def save_store(conn: sqlite3.Connection, name: str, payload: Any) -> None:
    # Last write wins; committed before returning so the next read sees it.
    x(
        conn,
        """
        INSERT INTO stores (name, payload, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(name) DO UPDATE SET payload=excluded.payload, updated_at=excluded.updated_at
        """,
        (name, json.dumps(payload), iso_now()),
    )


def delete_store(conn: sqlite3.Connection, name: str) -> None:
    x(conn, "DELETE FROM stores WHERE name=?", (name,))


def store_names(conn: sqlite3.Connection) -> list[str]:
    return [str(r["name"]) for r in q(conn, "SELECT name FROM stores ORDER BY name")]
