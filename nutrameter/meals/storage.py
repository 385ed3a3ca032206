# -*- coding: utf-8 -*-
"""Meals: the per-user meal ledger.

Every operation takes the owner id and passes it down to the store, so there
is no path that reads or changes another user's meal.
"""

from __future__ import annotations

from datetime import date as date_cls
from datetime import datetime, time, timezone, tzinfo
from typing import List, Optional
from uuid import uuid4

from ..errors import NotFoundError, ValidationError
from ..persistence.base import Record, Store, to_utc_iso
from .models import Meal, MealCreateRequest, MealUpdateRequest


def _to_meal(record: Record) -> Meal:
    return Meal.model_validate(record)


def parse_day(value: str) -> date_cls:
    """Parse a ``YYYY-MM-DD`` filter (a trailing time part is ignored)."""
    try:
        return date_cls.fromisoformat(value.strip()[:10])
    except ValueError as exc:
        raise ValidationError("Invalid date, expected YYYY-MM-DD") from exc


def day_window(day: date_cls, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """Inclusive [00:00:00.000000, 23:59:59.999999] bounds of ``day``.

    Without ``tz`` the bounds are server-local, each localized with the zone
    rules in force on ``day``.
    """
    if tz is None:
        return datetime.combine(day, time.min).astimezone(), datetime.combine(day, time.max).astimezone()
    return datetime.combine(day, time.min, tzinfo=tz), datetime.combine(day, time.max, tzinfo=tz)


def create_meal(
    store: Store,
    user_id: str,
    request: MealCreateRequest,
    *,
    now: Optional[datetime] = None,
) -> Meal:
    created_at = now or datetime.now(timezone.utc)
    record = request.model_dump(mode="json")
    record.update(
        {
            "id": str(uuid4()),
            "user_id": user_id,
            "created_at": to_utc_iso(created_at),
        }
    )
    return _to_meal(store.create_meal(record))


def list_meals(
    store: Store,
    user_id: str,
    *,
    date: Optional[str] = None,
    meal_type: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> List[Meal]:
    start = end = None
    if date:
        start, end = day_window(parse_day(date), tz)
    records = store.list_meals(user_id, start=start, end=end, meal_type=meal_type or None)
    return [_to_meal(r) for r in records]


def list_meals_since(store: Store, user_id: str, since: datetime) -> List[Meal]:
    return [_to_meal(r) for r in store.list_meals(user_id, start=since)]


def update_meal(store: Store, user_id: str, meal_id: str, request: MealUpdateRequest) -> Meal:
    existing = store.get_meal(user_id, meal_id)
    if existing is None:
        raise NotFoundError("Meal not found")

    updates = request.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if "macros" in updates:
        # Partial macro updates merge into the stored breakdown.
        macros = dict(existing.get("macros") or {})
        macros.update(updates["macros"])
        updates["macros"] = macros

    updated = store.update_meal(user_id, meal_id, updates)
    if updated is None:
        raise NotFoundError("Meal not found")
    return _to_meal(updated)


def delete_meal(store: Store, user_id: str, meal_id: str) -> None:
    if not store.delete_meal(user_id, meal_id):
        raise NotFoundError("Meal not found")
