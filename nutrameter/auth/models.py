# -*- coding: utf-8 -*-
"""Auth: Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Goal(str, Enum):
    lose_weight = "lose_weight"
    maintain = "maintain"
    gain_muscle = "gain_muscle"


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)
    weight: Optional[float] = Field(None, gt=0, le=700)
    height: Optional[float] = Field(None, gt=0, le=300)
    age: Optional[int] = Field(None, gt=0, le=150)
    goal: Optional[Goal] = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("weight", "height", "age", mode="before")
    @classmethod
    def _zero_is_missing(cls, value: object) -> object:
        # Blank form fields arrive as "" or 0; treat them as "use the default".
        if value in ("", 0, "0"):
            return None
        return value


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class UserPublic(BaseModel):
    id: str
    name: str
    email: str
    weight: float
    height: float
    age: int
    goal: Goal
    daily_calorie_target: float
    daily_water_target: float
    created_at: str


class AuthResponse(BaseModel):
    user: UserPublic
    token: str
