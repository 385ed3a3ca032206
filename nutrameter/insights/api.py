# -*- coding: utf-8 -*-
"""Insights: API endpoints (insight cards and dashboard aggregates)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..auth.security import TokenUser, get_current_user
from ..auth.storage import DEFAULT_CALORIE_TARGET, DEFAULT_WATER_TARGET_ML
from ..config import settings
from ..meals.storage import list_meals_since
from ..persistence.gateway import PersistenceGateway, get_gateway
from ..progress.storage import list_entries
from .aggregation import (
    WEEK,
    average_health_score,
    bmi,
    bmi_category,
    consistency_score,
    daily_series,
    logged_day_count,
    macro_progress,
    macro_targets,
    percent_of,
    round_half_up,
    sum_totals,
    today_meals,
    water_progress,
    week_window,
    weekly_summary,
)
from .models import DashboardResponse, InsightsResponse, Targets, WeeklySummaryOut
from .rules import InsightContext, InsightThresholds, generate_insights

router = APIRouter(prefix="/api", tags=["Insights"])


def get_now() -> datetime:
    """FastAPI dependency: naive server-local "now" (see ``aggregation.local_date``)."""
    return datetime.now()


def _profile(gateway: PersistenceGateway, user_id: str) -> Dict[str, Any]:
    return gateway.get_user_by_id(user_id) or {}


def _targets(profile: Dict[str, Any], thresholds: InsightThresholds) -> Targets:
    calories = float(profile.get("daily_calorie_target") or DEFAULT_CALORIE_TARGET)
    water = float(profile.get("daily_water_target") or DEFAULT_WATER_TARGET_ML)
    return Targets(calories=calories, water=water, **macro_targets(calories, thresholds.protein_calorie_share))


@router.get("/insights", response_model=InsightsResponse, summary="Rule-based nutrition insights")
def get_insights(
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
    now: datetime = Depends(get_now),
):
    thresholds = InsightThresholds.from_settings(settings)
    targets = _targets(_profile(gateway, user.user_id), thresholds)
    meals = list_meals_since(gateway, user.user_id, now - WEEK)

    ctx = InsightContext.from_meals(meals, now, calorie_target=targets.calories, thresholds=thresholds)
    summary = weekly_summary(meals, now)
    return InsightsResponse(
        insights=generate_insights(ctx),
        weekly_summary=WeeklySummaryOut(
            avg_daily_calories=summary.avg_daily_calories,
            meals_logged=summary.meals_logged,
            avg_health_score=summary.avg_health_score,
            logged_days=summary.logged_days,
            consistency_score=summary.consistency_score,
        ),
        targets=targets,
    )


@router.get("/dashboard", response_model=DashboardResponse, summary="Today's totals and weekly trends")
def get_dashboard(
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
    now: datetime = Depends(get_now),
):
    thresholds = InsightThresholds.from_settings(settings)
    profile = _profile(gateway, user.user_id)
    targets = _targets(profile, thresholds)
    meals = list_meals_since(gateway, user.user_id, now - WEEK)

    today = today_meals(meals, now)
    totals = sum_totals(today)
    logged = logged_day_count(week_window(meals, now), now)
    body_mass = bmi(profile.get("weight"), profile.get("height"))
    return DashboardResponse(
        today={
            "totals": totals.to_dict(),
            "meal_count": len(today),
            "avg_health_score": round_half_up(average_health_score(today)),
        },
        targets=targets,
        calorie_progress=percent_of(totals.calories, targets.calories),
        macro_progress=macro_progress(
            totals, {"protein": targets.protein, "carbs": targets.carbs, "fats": targets.fats}
        ),
        water=water_progress(list_entries(gateway, user.user_id), targets.water, now),
        daily_series=daily_series(meals, now),
        logged_days=logged,
        consistency_score=consistency_score(logged),
        bmi=body_mass,
        bmi_category=bmi_category(body_mass),
    )
