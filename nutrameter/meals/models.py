# -*- coding: utf-8 -*-
"""Meals: Pydantic models."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# mg, except vitamins A/D/E which are mcg by convention.
MICRONUTRIENT_KEYS = (
    "vitaminA",
    "vitaminC",
    "vitaminD",
    "vitaminE",
    "iron",
    "calcium",
    "potassium",
    "sodium",
    "magnesium",
    "zinc",
)

DEFAULT_MEAL_NAME = "Unnamed Meal"


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class Macros(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fats: float = Field(0.0, ge=0)
    fiber: float = Field(0.0, ge=0)
    sugar: float = Field(0.0, ge=0)


class MacrosUpdate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    protein: Optional[float] = Field(None, ge=0)
    carbs: Optional[float] = Field(None, ge=0)
    fats: Optional[float] = Field(None, ge=0)
    fiber: Optional[float] = Field(None, ge=0)
    sugar: Optional[float] = Field(None, ge=0)


def clamp_health_score(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(score):
        return 0
    return int(max(0.0, min(100.0, round(score))))


def normalize_micronutrients(value: Any) -> Dict[str, float]:
    """Keep only known nutrient keys with numeric, non-negative values."""
    if not isinstance(value, dict):
        return {}
    out: Dict[str, float] = {}
    for key in MICRONUTRIENT_KEYS:
        raw = value.get(key)
        if raw is None or isinstance(raw, bool):
            continue
        try:
            amount = float(raw)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(amount):
            continue
        out[key] = max(0.0, amount)
    return out


def _clean_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    out: List[str] = []
    for item in value:
        if item is None:
            continue
        s = str(item).strip()
        if s:
            out.append(s)
    return out


class MealCreateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str = Field(DEFAULT_MEAL_NAME, max_length=200)
    image_url: Optional[str] = None
    meal_type: MealType = MealType.lunch
    food_items: List[str] = Field(default_factory=list)
    calories: float = Field(0.0, ge=0)
    macros: Macros = Field(default_factory=Macros)
    micronutrients: Dict[str, float] = Field(default_factory=dict)
    health_score: int = 0
    recommendations: List[str] = Field(default_factory=list)
    is_ai_analyzed: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_MEAL_NAME
        return value

    @field_validator("health_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: object) -> int:
        return clamp_health_score(value)

    @field_validator("micronutrients", mode="before")
    @classmethod
    def _micros(cls, value: object) -> Dict[str, float]:
        return normalize_micronutrients(value)

    @field_validator("food_items", "recommendations", mode="before")
    @classmethod
    def _str_lists(cls, value: object) -> List[str]:
        return _clean_str_list(value)


class MealUpdateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    image_url: Optional[str] = None
    meal_type: Optional[MealType] = None
    food_items: Optional[List[str]] = None
    calories: Optional[float] = Field(None, ge=0)
    macros: Optional[MacrosUpdate] = None
    micronutrients: Optional[Dict[str, float]] = None
    health_score: Optional[int] = None
    recommendations: Optional[List[str]] = None
    is_ai_analyzed: Optional[bool] = None

    @field_validator("health_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: object) -> Optional[int]:
        return None if value is None else clamp_health_score(value)

    @field_validator("micronutrients", mode="before")
    @classmethod
    def _micros(cls, value: object) -> Optional[Dict[str, float]]:
        return None if value is None else normalize_micronutrients(value)

    @field_validator("food_items", "recommendations", mode="before")
    @classmethod
    def _str_lists(cls, value: object) -> Optional[List[str]]:
        return None if value is None else _clean_str_list(value)


class Meal(BaseModel):
    id: str
    user_id: str
    name: str
    image_url: Optional[str] = None
    meal_type: MealType = MealType.lunch
    food_items: List[str] = []
    calories: float = Field(0.0, ge=0)
    macros: Macros = Macros()
    micronutrients: Dict[str, float] = {}
    health_score: int = Field(0, ge=0, le=100)
    recommendations: List[str] = []
    is_ai_analyzed: bool = False
    created_at: datetime


class MealResponse(BaseModel):
    meal: Meal


class MealsResponse(BaseModel):
    meals: List[Meal]


class MealDeletedResponse(BaseModel):
    message: str = "Meal deleted"
