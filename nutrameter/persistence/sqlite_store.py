# -*- coding: utf-8 -*-
"""Persistence: durable SQLite store.

Every failure is classified before it leaves this module:

- ``sqlite3.IntegrityError`` means the store rejected the write: a UNIQUE
  violation (duplicate email) becomes ``ConflictError``, any other constraint
  failure becomes ``ValidationError``.
- Any other ``sqlite3.DatabaseError`` (cannot open, locked past the timeout,
  disk I/O) or ``OSError`` means the store is unavailable and becomes
  ``BackendUnavailable``, which the gateway answers from the fallback store.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional

from ..app_db import db_conn, init_app_db
from ..errors import BackendUnavailable, ConflictError, ValidationError
from .base import Record, Store, to_utc_iso

logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    "id",
    "name",
    "email",
    "password_hash",
    "weight",
    "height",
    "age",
    "goal",
    "daily_calorie_target",
    "daily_water_target",
    "created_at",
)
_USER_UPDATABLE = frozenset(_USER_COLUMNS) - {"id", "email", "password_hash", "created_at"}

# Meal record key -> column; list/dict fields are stored as JSON text.
_MEAL_JSON_FIELDS = ("food_items", "macros", "micronutrients", "recommendations")
_MEAL_PLAIN_FIELDS = (
    "id",
    "user_id",
    "name",
    "image_url",
    "meal_type",
    "calories",
    "health_score",
    "is_ai_analyzed",
    "created_at",
)
_MEAL_UPDATABLE = frozenset(_MEAL_PLAIN_FIELDS + _MEAL_JSON_FIELDS) - {"id", "user_id", "created_at"}


def _meal_to_row(record: Record) -> dict:
    row = {k: record.get(k) for k in _MEAL_PLAIN_FIELDS}
    row["is_ai_analyzed"] = 1 if record.get("is_ai_analyzed") else 0
    for key in _MEAL_JSON_FIELDS:
        row[f"{key}_json"] = json.dumps(record.get(key) or ({} if key in ("macros", "micronutrients") else []))
    return row


def _row_to_meal(row: sqlite3.Row) -> Record:
    data = dict(row)
    meal: Record = {k: data.get(k) for k in _MEAL_PLAIN_FIELDS}
    meal["is_ai_analyzed"] = bool(data.get("is_ai_analyzed"))
    for key in _MEAL_JSON_FIELDS:
        meal[key] = json.loads(data.get(f"{key}_json") or "null") or ({} if key in ("macros", "micronutrients") else [])
    return meal


class SqliteStore(Store):
    name = "sqlite"

    def __init__(self, db_path: Path, *, timeout: float = 5.0) -> None:
        self.db_path = db_path
        self.timeout = timeout
        self._schema_ready = False

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        try:
            if not self._schema_ready:
                init_app_db(self.db_path, timeout=self.timeout)
                self._schema_ready = True
            with db_conn(self.db_path, timeout=self.timeout) as conn:
                yield conn
        except sqlite3.IntegrityError as exc:
            detail = str(exc).lower()
            if detail.startswith("unique constraint failed") and "email" in detail:
                raise ConflictError("Email already in use") from exc
            if detail.startswith("unique constraint failed"):
                raise ConflictError("Record already exists") from exc
            # NOT NULL / CHECK violations: the record itself is malformed.
            raise ValidationError("Invalid record") from exc
        except (sqlite3.OperationalError, sqlite3.DatabaseError, OSError) as exc:
            logger.warning("SQLite store at %s failed", self.db_path, exc_info=True)
            raise BackendUnavailable(f"SQLite store unavailable: {exc}") from exc

    # ---- users ----

    def create_user(self, record: Record) -> Record:
        values = [record.get(k) for k in _USER_COLUMNS]
        placeholders = ", ".join("?" for _ in _USER_COLUMNS)
        with self._session() as conn:
            conn.execute(
                f"INSERT INTO users ({', '.join(_USER_COLUMNS)}) VALUES ({placeholders})",
                values,
            )
        return dict(record)

    def get_user_by_email(self, email: str) -> Optional[Record]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (email.lower().strip(),)).fetchone()
            return dict(row) if row else None

    def get_user_by_id(self, user_id: str) -> Optional[Record]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return dict(row) if row else None

    def update_user(self, user_id: str, updates: Record) -> Optional[Record]:
        fields = [k for k in updates if k in _USER_UPDATABLE]
        with self._session() as conn:
            if fields:
                assignments = ", ".join(f"{k} = ?" for k in fields)
                conn.execute(
                    f"UPDATE users SET {assignments} WHERE id = ?",
                    [updates[k] for k in fields] + [user_id],
                )
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return dict(row) if row else None

    # ---- meals ----

    def create_meal(self, record: Record) -> Record:
        row = _meal_to_row(record)
        columns = list(row.keys())
        with self._session() as conn:
            conn.execute(
                f"INSERT INTO meals ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
                [row[c] for c in columns],
            )
        return dict(record)

    def get_meal(self, user_id: str, meal_id: str) -> Optional[Record]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id)
            ).fetchone()
            return _row_to_meal(row) if row else None

    def list_meals(
        self,
        user_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        meal_type: Optional[str] = None,
    ) -> List[Record]:
        clauses = ["user_id = ?"]
        params: List[Any] = [user_id]
        if meal_type:
            clauses.append("meal_type = ?")
            params.append(meal_type)
        if start is not None:
            clauses.append("created_at >= ?")
            params.append(to_utc_iso(start))
        if end is not None:
            clauses.append("created_at <= ?")
            params.append(to_utc_iso(end))
        sql = f"SELECT * FROM meals WHERE {' AND '.join(clauses)} ORDER BY created_at DESC"
        with self._session() as conn:
            return [_row_to_meal(r) for r in conn.execute(sql, params).fetchall()]

    def update_meal(self, user_id: str, meal_id: str, updates: Record) -> Optional[Record]:
        fields = [k for k in updates if k in _MEAL_UPDATABLE]
        assignments: List[str] = []
        params: List[Any] = []
        for key in fields:
            value = updates[key]
            if key in _MEAL_JSON_FIELDS:
                assignments.append(f"{key}_json = ?")
                params.append(json.dumps(value))
            elif key == "is_ai_analyzed":
                assignments.append("is_ai_analyzed = ?")
                params.append(1 if value else 0)
            else:
                assignments.append(f"{key} = ?")
                params.append(value)
        with self._session() as conn:
            if assignments:
                conn.execute(
                    f"UPDATE meals SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
                    params + [meal_id, user_id],
                )
            row = conn.execute(
                "SELECT * FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id)
            ).fetchone()
            return _row_to_meal(row) if row else None

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        with self._session() as conn:
            cur = conn.execute("DELETE FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id))
            return cur.rowcount > 0

    # ---- progress ----

    def create_progress(self, record: Record) -> Record:
        with self._session() as conn:
            conn.execute(
                "INSERT INTO progress (id, user_id, weight, water_intake, date, notes) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record["id"],
                    record["user_id"],
                    record["weight"],
                    record.get("water_intake") or 0.0,
                    record["date"],
                    record.get("notes"),
                ),
            )
        return dict(record)

    def list_progress(self, user_id: str, *, limit: int = 30) -> List[Record]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM progress WHERE user_id = ? ORDER BY date DESC LIMIT ?",
                (user_id, int(limit)),
            ).fetchall()
            return [dict(r) for r in rows]
