# -*- coding: utf-8 -*-
"""Persistence: the store interface shared by the durable and fallback backends.

Stores exchange plain dict records. Timestamps are ISO-8601 UTC strings with
microsecond precision (see ``to_utc_iso``) so they order correctly as text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


def to_utc_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


class Store(ABC):
    """Data operations over users, meals and progress entries.

    Meal and progress operations are always scoped by ``user_id``; a record
    owned by another user behaves exactly like a missing one.
    """

    name = "store"

    # ---- users ----

    @abstractmethod
    def create_user(self, record: Record) -> Record: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[Record]: ...

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[Record]: ...

    @abstractmethod
    def update_user(self, user_id: str, updates: Record) -> Optional[Record]: ...

    # ---- meals ----

    @abstractmethod
    def create_meal(self, record: Record) -> Record: ...

    @abstractmethod
    def get_meal(self, user_id: str, meal_id: str) -> Optional[Record]: ...

    @abstractmethod
    def list_meals(
        self,
        user_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        meal_type: Optional[str] = None,
    ) -> List[Record]:
        """Owner's meals, newest first; ``start``/``end`` bound ``created_at`` inclusively."""

    @abstractmethod
    def update_meal(self, user_id: str, meal_id: str, updates: Record) -> Optional[Record]: ...

    @abstractmethod
    def delete_meal(self, user_id: str, meal_id: str) -> bool: ...

    # ---- progress ----

    @abstractmethod
    def create_progress(self, record: Record) -> Record: ...

    @abstractmethod
    def list_progress(self, user_id: str, *, limit: int = 30) -> List[Record]:
        """Owner's progress entries, newest ``date`` first."""
