# -*- coding: utf-8 -*-
"""Insights: ordered rule table turning aggregates into insight cards.

Rules are evaluated in table order and each appends at most one card; cards are
shown in that order. Alternatives inside a group are mutually exclusive by
construction of their conditions:

- calorie: exactly one of over / under / on-track when anything was eaten
- protein: at most one of low / high
- consistency: at most one of high / low; low needs at least one logged day,
  so a user with no meals at all sees only the empty-state card
- health: at most one of high / low

Recommendation tips and the empty-state card are appended after the table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Sequence, Tuple

from ..meals.models import Meal
from .aggregation import (
    DailyTotals,
    average_health_score,
    logged_day_count,
    protein_target,
    recent_recommendations,
    round_half_up,
    sum_totals,
    today_meals,
    week_window,
)
from .models import Insight, InsightType


@dataclass(frozen=True)
class InsightThresholds:
    calorie_over_ratio: float = 1.1
    calorie_under_ratio: float = 0.6
    calorie_under_min_meals: int = 2
    protein_calorie_share: float = 0.30
    protein_low_ratio: float = 0.6
    protein_high_ratio: float = 0.9
    sodium_alert_mg: float = 2000.0
    sodium_daily_limit_mg: float = 2300.0
    health_high_score: float = 70.0
    health_low_score: float = 50.0
    consistency_high_days: int = 5
    consistency_low_days: int = 3
    max_ai_tips: int = 3

    @classmethod
    def from_settings(cls, settings: object) -> "InsightThresholds":
        return cls(**{name: getattr(settings, name) for name in cls.__dataclass_fields__ if hasattr(settings, name)})


@dataclass(frozen=True)
class InsightContext:
    totals: DailyTotals
    today_meal_count: int
    avg_health_score: float
    logged_days: int
    recommendations: Tuple[str, ...]
    calorie_target: float
    protein_target: int
    thresholds: InsightThresholds = InsightThresholds()

    @classmethod
    def from_meals(
        cls,
        meals: Sequence[Meal],
        now: datetime,
        *,
        calorie_target: float,
        thresholds: InsightThresholds = InsightThresholds(),
    ) -> "InsightContext":
        today = today_meals(meals, now)
        week = week_window(meals, now)
        return cls(
            totals=sum_totals(today),
            today_meal_count=len(today),
            avg_health_score=average_health_score(today),
            logged_days=logged_day_count(week, now),
            recommendations=tuple(recent_recommendations(week, thresholds.max_ai_tips)),
            calorie_target=calorie_target,
            protein_target=protein_target(calorie_target, thresholds.protein_calorie_share),
            thresholds=thresholds,
        )


@dataclass(frozen=True)
class Rule:
    kind: str
    condition: Callable[[InsightContext], bool]
    render: Callable[[InsightContext], Insight]


def fmt_number(value: float) -> str:
    """12.0 -> '12', 12.34 -> '12.3'."""
    rounded = round(float(value), 1)
    if rounded.is_integer():
        return str(int(rounded))
    return str(rounded)


# ---- conditions ----


def _calorie_over(ctx: InsightContext) -> bool:
    cals = ctx.totals.calories
    return cals > 0 and cals > ctx.calorie_target * ctx.thresholds.calorie_over_ratio


def _calorie_under(ctx: InsightContext) -> bool:
    cals = ctx.totals.calories
    return (
        cals > 0
        and not _calorie_over(ctx)
        and cals < ctx.calorie_target * ctx.thresholds.calorie_under_ratio
        and ctx.today_meal_count >= ctx.thresholds.calorie_under_min_meals
    )


def _calorie_on_track(ctx: InsightContext) -> bool:
    return ctx.totals.calories > 0 and not _calorie_over(ctx) and not _calorie_under(ctx)


def _protein_low(ctx: InsightContext) -> bool:
    protein = ctx.totals.protein
    return protein > 0 and protein < ctx.protein_target * ctx.thresholds.protein_low_ratio


def _protein_high(ctx: InsightContext) -> bool:
    protein = ctx.totals.protein
    return protein > 0 and not _protein_low(ctx) and protein >= ctx.protein_target * ctx.thresholds.protein_high_ratio


def _health_low(ctx: InsightContext) -> bool:
    return 0 < ctx.avg_health_score < ctx.thresholds.health_low_score


# ---- rule table ----

RULES: Tuple[Rule, ...] = (
    Rule(
        kind="consistency_high",
        condition=lambda ctx: ctx.logged_days >= ctx.thresholds.consistency_high_days,
        render=lambda ctx: Insight(
            type=InsightType.success,
            kind="consistency_high",
            title="Great Consistency!",
            message=f"You've logged meals {ctx.logged_days} out of the last 7 days. Keep it up!",
            badge=f"{ctx.logged_days}/7",
        ),
    ),
    Rule(
        kind="consistency_low",
        condition=lambda ctx: 0 < ctx.logged_days < ctx.thresholds.consistency_low_days,
        render=lambda ctx: Insight(
            type=InsightType.warning,
            kind="consistency_low",
            title="Track More Consistently",
            message=(
                f"You've only logged {ctx.logged_days} days this week. "
                "Consistent tracking leads to better insights."
            ),
            badge=f"{ctx.logged_days}/7",
        ),
    ),
    Rule(
        kind="calorie_over",
        condition=_calorie_over,
        render=lambda ctx: Insight(
            type=InsightType.warning,
            kind="calorie_over",
            title="Over Calorie Goal",
            message=(
                f"You're {fmt_number(ctx.totals.calories - ctx.calorie_target)} kcal over your daily target "
                f"of {fmt_number(ctx.calorie_target)} kcal."
            ),
            badge=f"{fmt_number(ctx.totals.calories)} kcal",
        ),
    ),
    Rule(
        kind="calorie_under",
        condition=_calorie_under,
        render=lambda ctx: Insight(
            type=InsightType.tip,
            kind="calorie_under",
            title="Low Calorie Intake",
            message=(
                f"You've only had {fmt_number(ctx.totals.calories)} kcal. "
                "Consider a nutritious snack to meet your energy needs."
            ),
        ),
    ),
    Rule(
        kind="calorie_on_track",
        condition=_calorie_on_track,
        render=lambda ctx: Insight(
            type=InsightType.success,
            kind="calorie_on_track",
            title="On Track Today!",
            message=(
                f"{fmt_number(ctx.totals.calories)} / {fmt_number(ctx.calorie_target)} kcal consumed. "
                "You're pacing well for the day."
            ),
        ),
    ),
    Rule(
        kind="protein_low",
        condition=_protein_low,
        render=lambda ctx: Insight(
            type=InsightType.warning,
            kind="protein_low",
            title="Low Protein Intake",
            message=(
                f"You're getting {fmt_number(ctx.totals.protein)}g protein vs a target of "
                f"~{ctx.protein_target}g. Add lean meats, eggs, or legumes."
            ),
            badge=f"{fmt_number(ctx.totals.protein)}g",
        ),
    ),
    Rule(
        kind="protein_high",
        condition=_protein_high,
        render=lambda ctx: Insight(
            type=InsightType.success,
            kind="protein_high",
            title="Excellent Protein!",
            message=(
                f"Great job hitting {fmt_number(ctx.totals.protein)}g protein today. "
                "Your muscles will thank you!"
            ),
            badge=f"{fmt_number(ctx.totals.protein)}g",
        ),
    ),
    Rule(
        kind="sodium_high",
        condition=lambda ctx: ctx.totals.sodium > ctx.thresholds.sodium_alert_mg,
        render=lambda ctx: Insight(
            type=InsightType.warning,
            kind="sodium_high",
            title="High Sodium Alert",
            message=(
                f"Today's sodium intake is {fmt_number(ctx.totals.sodium)}mg, exceeding the "
                f"{fmt_number(ctx.thresholds.sodium_daily_limit_mg)}mg daily limit. Limit processed foods."
            ),
            badge=f"{fmt_number(ctx.totals.sodium)}mg",
        ),
    ),
    Rule(
        kind="health_high",
        condition=lambda ctx: ctx.avg_health_score >= ctx.thresholds.health_high_score,
        render=lambda ctx: Insight(
            type=InsightType.success,
            kind="health_high",
            title="High Quality Meals",
            message=(
                f"Your average meal health score is {round_half_up(ctx.avg_health_score)}/100. "
                "You're making nutritious choices!"
            ),
        ),
    ),
    Rule(
        kind="health_low",
        condition=_health_low,
        render=lambda ctx: Insight(
            type=InsightType.tip,
            kind="health_low",
            title="Improve Meal Quality",
            message=(
                f"Average health score is {round_half_up(ctx.avg_health_score)}/100. "
                "Try adding more whole foods and vegetables."
            ),
        ),
    ),
)


def _ai_tip(message: str) -> Insight:
    return Insight(type=InsightType.tip, kind="ai_tip", title="AI Nutrition Tip", message=message)


EMPTY_STATE = Insight(
    type=InsightType.info,
    kind="empty_state",
    title="Start Logging Meals",
    message="Log your first meal to receive personalized AI-powered nutritional insights!",
)


def generate_insights(ctx: InsightContext, rules: Sequence[Rule] = RULES) -> List[Insight]:
    items: List[Insight] = [rule.render(ctx) for rule in rules if rule.condition(ctx)]
    items.extend(_ai_tip(rec) for rec in ctx.recommendations[: ctx.thresholds.max_ai_tips])
    if not items:
        items.append(EMPTY_STATE.model_copy())
    return items
