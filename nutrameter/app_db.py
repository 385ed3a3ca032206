# -*- coding: utf-8 -*-
"""App database: SQLite schema and connection helpers for the durable store."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def connect(db_path: Path, timeout: float = 5.0) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_app_db(db_path: Path, timeout: float = 5.0) -> None:
    conn = connect(db_path, timeout=timeout)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                weight REAL NOT NULL,
                height REAL NOT NULL,
                age INTEGER NOT NULL,
                goal TEXT NOT NULL,
                daily_calorie_target REAL NOT NULL,
                daily_water_target REAL NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS meals (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                image_url TEXT,
                meal_type TEXT NOT NULL,
                food_items_json TEXT NOT NULL,
                calories REAL NOT NULL,
                macros_json TEXT NOT NULL,
                micronutrients_json TEXT NOT NULL,
                health_score INTEGER NOT NULL,
                recommendations_json TEXT NOT NULL,
                is_ai_analyzed INTEGER NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_meals_user_created ON meals(user_id, created_at DESC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS progress (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                weight REAL NOT NULL,
                water_intake REAL NOT NULL,
                date TEXT NOT NULL,
                notes TEXT
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_progress_user_date ON progress(user_id, date DESC);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path, timeout: float = 5.0) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path, timeout=timeout)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
