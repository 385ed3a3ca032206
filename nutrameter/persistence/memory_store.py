# -*- coding: utf-8 -*-
"""Persistence: in-process fallback store.

Serves requests while the durable store is unreachable. Contents live for the
lifetime of the process only and are never copied into the durable store once
it comes back; a record written here stays visible through this store alone.

Thread safety: none. Acceptable for a single-instance demo deployment only.
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..auth.security import hash_password
from ..errors import ConflictError
from .base import Record, Store, to_utc_iso

DEMO_USER_ID = "demo-user-001"
DEMO_USER_EMAIL = "demo@nutrameter.com"
DEMO_USER_PASSWORD = "demo123"


def _demo_user() -> Record:
    return {
        "id": DEMO_USER_ID,
        "name": "Demo User",
        "email": DEMO_USER_EMAIL,
        "password_hash": hash_password(DEMO_USER_PASSWORD),
        "weight": 70.0,
        "height": 175.0,
        "age": 28,
        "goal": "maintain",
        "daily_calorie_target": 2000.0,
        "daily_water_target": 2500.0,
        "created_at": to_utc_iso(datetime(2024, 1, 1, tzinfo=timezone.utc)),
    }


class MemoryStore(Store):
    name = "memory"

    def __init__(self, *, seed_demo_user: bool = True) -> None:
        self._users: Dict[str, Record] = {}
        self._meals: Dict[str, Record] = {}
        self._progress: Dict[str, Record] = {}
        if seed_demo_user:
            demo = _demo_user()
            self._users[demo["id"]] = demo

    # ---- users ----

    def create_user(self, record: Record) -> Record:
        if self.get_user_by_email(record["email"]) is not None:
            raise ConflictError("Email already in use")
        self._users[record["id"]] = deepcopy(record)
        return deepcopy(record)

    def get_user_by_email(self, email: str) -> Optional[Record]:
        needle = email.lower().strip()
        for user in self._users.values():
            if user["email"] == needle:
                return deepcopy(user)
        return None

    def get_user_by_id(self, user_id: str) -> Optional[Record]:
        user = self._users.get(user_id)
        return deepcopy(user) if user else None

    def update_user(self, user_id: str, updates: Record) -> Optional[Record]:
        user = self._users.get(user_id)
        if user is None:
            return None
        user.update(deepcopy(updates))
        return deepcopy(user)

    # ---- meals ----

    def create_meal(self, record: Record) -> Record:
        self._meals[record["id"]] = deepcopy(record)
        return deepcopy(record)

    def get_meal(self, user_id: str, meal_id: str) -> Optional[Record]:
        meal = self._meals.get(meal_id)
        if meal is None or meal["user_id"] != user_id:
            return None
        return deepcopy(meal)

    def list_meals(
        self,
        user_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        meal_type: Optional[str] = None,
    ) -> List[Record]:
        start_s = to_utc_iso(start) if start else None
        end_s = to_utc_iso(end) if end else None
        out: List[Record] = []
        for meal in self._meals.values():
            if meal["user_id"] != user_id:
                continue
            if meal_type and meal["meal_type"] != meal_type:
                continue
            if start_s and meal["created_at"] < start_s:
                continue
            if end_s and meal["created_at"] > end_s:
                continue
            out.append(deepcopy(meal))
        out.sort(key=lambda m: m["created_at"], reverse=True)
        return out

    def update_meal(self, user_id: str, meal_id: str, updates: Record) -> Optional[Record]:
        meal = self._meals.get(meal_id)
        if meal is None or meal["user_id"] != user_id:
            return None
        meal.update(deepcopy(updates))
        return deepcopy(meal)

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        meal = self._meals.get(meal_id)
        if meal is None or meal["user_id"] != user_id:
            return False
        del self._meals[meal_id]
        return True

    # ---- progress ----

    def create_progress(self, record: Record) -> Record:
        self._progress[record["id"]] = deepcopy(record)
        return deepcopy(record)

    def list_progress(self, user_id: str, *, limit: int = 30) -> List[Record]:
        entries = [deepcopy(p) for p in self._progress.values() if p["user_id"] == user_id]
        entries.sort(key=lambda p: p["date"], reverse=True)
        return entries[:limit]
