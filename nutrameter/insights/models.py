# -*- coding: utf-8 -*-
"""Insights: Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class InsightType(str, Enum):
    success = "success"
    warning = "warning"
    tip = "tip"
    info = "info"


class Insight(BaseModel):
    type: InsightType
    kind: str = Field(..., description="Rule that produced the card, e.g. 'calorie_over'")
    title: str
    message: str
    badge: Optional[str] = None


class WeeklySummaryOut(BaseModel):
    avg_daily_calories: int = 0
    meals_logged: int = 0
    avg_health_score: int = 0
    logged_days: int = 0
    consistency_score: int = 0


class Targets(BaseModel):
    calories: float
    water: float
    protein: int
    carbs: int
    fats: int


class InsightsResponse(BaseModel):
    insights: List[Insight]
    weekly_summary: WeeklySummaryOut
    targets: Targets


class TodaySummary(BaseModel):
    totals: Dict[str, float]
    meal_count: int = 0
    avg_health_score: int = 0


class SeriesPoint(BaseModel):
    day: str = Field(..., description="Weekday short name, e.g. 'Mon'")
    date: str = Field(..., description="YYYY-MM-DD")
    calories: float = 0.0
    protein: float = 0.0


class WaterProgress(BaseModel):
    consumed: float = 0.0
    target: float = 0.0
    percent: int = 0


class DashboardResponse(BaseModel):
    today: TodaySummary
    targets: Targets
    calorie_progress: int = 0
    macro_progress: Dict[str, int]
    water: WaterProgress
    daily_series: List[SeriesPoint]
    logged_days: int = 0
    consistency_score: int = 0
    bmi: Optional[float] = None
    bmi_category: Optional[str] = None
