# -*- coding: utf-8 -*-
"""Insights: aggregation engine.

Pure functions over a list of meals and a reference ``now``. Calendar days are
evaluated in the timezone of an aware ``now``; a naive ``now`` means server-local
time, where each instant is converted with the system zone rules in force at
that instant (DST included).

Two notions of "recent" are kept apart:

- ``today_meals`` matches on calendar-date equality with ``now``.
- ``week_window`` is a rolling ``now - 7 days`` duration.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..meals.models import Meal
from ..progress.models import ProgressEntry

WEEK = timedelta(days=7)
WEEKDAY_SHORT = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Macro split of the calorie target (share, kcal per gram).
PROTEIN_SPLIT = (0.30, 4)
CARBS_SPLIT = (0.45, 4)
FATS_SPLIT = (0.25, 9)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 away from zero for positives (2.5 -> 3)."""
    if value != value or value in (math.inf, -math.inf):
        return 0
    return int(math.floor(value + 0.5))


def safe_ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def as_aware(dt: datetime) -> datetime:
    """Naive datetimes are read as server-local time."""
    return dt if dt.tzinfo is not None else dt.astimezone()


def local_date(dt: datetime, now: Optional[datetime] = None) -> date:
    """Calendar date of ``dt`` in the timezone of ``now`` (server-local when naive or None)."""
    if now is None or now.tzinfo is None:
        return as_aware(dt).astimezone().date()
    return as_aware(dt).astimezone(now.tzinfo).date()


@dataclass
class DailyTotals:
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class WeeklySummary:
    avg_daily_calories: int = 0
    meals_logged: int = 0
    avg_health_score: int = 0
    logged_days: int = 0
    consistency_score: int = 0


def today_meals(meals: Iterable[Meal], now: datetime) -> List[Meal]:
    today = now.date()
    return [m for m in meals if local_date(m.created_at, now) == today]


def sum_totals(meals: Iterable[Meal]) -> DailyTotals:
    totals = DailyTotals()
    for m in meals:
        totals.calories += m.calories
        totals.protein += m.macros.protein
        totals.carbs += m.macros.carbs
        totals.fats += m.macros.fats
        totals.fiber += m.macros.fiber
        totals.sugar += m.macros.sugar
        totals.sodium += m.micronutrients.get("sodium", 0.0)
    return totals


def today_totals(meals: Iterable[Meal], now: datetime) -> DailyTotals:
    return sum_totals(today_meals(meals, now))


def week_window(meals: Iterable[Meal], now: datetime) -> List[Meal]:
    cutoff = as_aware(now) - WEEK
    return [m for m in meals if as_aware(m.created_at) >= cutoff]


def logged_day_count(week_meals: Iterable[Meal], now: Optional[datetime] = None) -> int:
    return len({local_date(m.created_at, now) for m in week_meals})


def consistency_score(logged_days: int) -> int:
    return max(0, min(round_half_up(logged_days / 7 * 100), 100))


def average_health_score(meals: Sequence[Meal]) -> float:
    """Mean health score, 0.0 for no meals (check ``len(meals)`` to tell the two apart)."""
    if not meals:
        return 0.0
    return sum(m.health_score for m in meals) / len(meals)


def daily_series(meals: Iterable[Meal], now: datetime, days: int = 7) -> List[Dict[str, object]]:
    """Calories and protein for each of the last ``days`` calendar dates, oldest first."""
    buckets: Dict[date, DailyTotals] = {}
    for m in meals:
        agg = buckets.setdefault(local_date(m.created_at, now), DailyTotals())
        agg.calories += m.calories
        agg.protein += m.macros.protein

    today = now.date()
    series: List[Dict[str, object]] = []
    for offset in range(days - 1, -1, -1):
        d = today - timedelta(days=offset)
        agg = buckets.get(d, DailyTotals())
        series.append(
            {
                "day": WEEKDAY_SHORT[d.weekday()],
                "date": d.isoformat(),
                "calories": agg.calories,
                "protein": agg.protein,
            }
        )
    return series


def protein_target(calorie_target: float, share: float = PROTEIN_SPLIT[0]) -> int:
    return round_half_up(calorie_target * share / PROTEIN_SPLIT[1])


def macro_targets(calorie_target: float, protein_share: float = PROTEIN_SPLIT[0]) -> Dict[str, int]:
    return {
        "protein": protein_target(calorie_target, protein_share),
        "carbs": round_half_up(calorie_target * CARBS_SPLIT[0] / CARBS_SPLIT[1]),
        "fats": round_half_up(calorie_target * FATS_SPLIT[0] / FATS_SPLIT[1]),
    }


def percent_of(value: float, target: float) -> int:
    """Progress toward ``target`` as a whole percentage capped at 100."""
    return max(0, min(round_half_up(safe_ratio(value, target) * 100), 100))


def macro_progress(totals: DailyTotals, targets: Dict[str, int]) -> Dict[str, int]:
    return {name: percent_of(getattr(totals, name), target) for name, target in targets.items()}


def recent_recommendations(week_meals: Iterable[Meal], limit: int = 3) -> List[str]:
    """Distinct non-empty recommendation strings in first-seen order."""
    seen: List[str] = []
    for m in week_meals:
        for rec in m.recommendations:
            if rec and rec not in seen:
                seen.append(rec)
                if len(seen) >= limit:
                    return seen
    return seen


def weekly_summary(meals: Sequence[Meal], now: datetime) -> WeeklySummary:
    week = week_window(meals, now)
    logged = logged_day_count(week, now)
    return WeeklySummary(
        avg_daily_calories=round_half_up(sum(m.calories for m in week) / 7),
        meals_logged=len(week),
        avg_health_score=round_half_up(average_health_score(week)),
        logged_days=logged,
        consistency_score=consistency_score(logged),
    )


def water_progress(entries: Iterable[ProgressEntry], target: float, now: datetime) -> Dict[str, float]:
    today = now.date()
    consumed = sum(e.water_intake for e in entries if local_date(e.date, now) == today)
    return {"consumed": consumed, "target": target, "percent": percent_of(consumed, target)}


def bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    if not weight_kg or not height_cm or weight_kg <= 0 or height_cm <= 0:
        return None
    meters = height_cm / 100
    return round(weight_kg / (meters * meters), 1)


def bmi_category(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    if value < 18.5:
        return "Underweight"
    if value < 25:
        return "Normal"
    if value < 30:
        return "Overweight"
    return "Obese"
