# -*- coding: utf-8 -*-
"""Analyze: Pydantic models."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..meals.models import Macros


class AnalyzeRequest(BaseModel):
    # Optional so a missing image is reported as "Image data is required".
    image_base64: Optional[str] = Field(None, description="Raw base64 without data-url prefix")
    mime_type: str = Field("image/jpeg", pattern=r"^image/[a-z0-9.+-]+$")


class NutritionEstimate(BaseModel):
    """AI estimate in the shape of a meal's nutrition fields."""

    food_items: List[str] = []
    calories: float = Field(0.0, ge=0)
    macros: Macros = Macros()
    micronutrients: Dict[str, float] = {}
    health_score: int = Field(0, ge=0, le=100)
    recommendations: List[str] = []


class AnalyzeResponse(BaseModel):
    success: bool = True
    data: NutritionEstimate
