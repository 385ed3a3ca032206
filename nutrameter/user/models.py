# -*- coding: utf-8 -*-
"""User profile: Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..auth.models import Goal, UserPublic

# Only these fields may be changed through PUT /api/user.
PROFILE_UPDATABLE_FIELDS = (
    "name",
    "weight",
    "height",
    "age",
    "goal",
    "daily_calorie_target",
    "daily_water_target",
)


class UserUpdateRequest(BaseModel):
    # Unknown fields (email, password_hash, id, ...) are dropped silently.
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    weight: Optional[float] = Field(None, gt=0, le=700)
    height: Optional[float] = Field(None, gt=0, le=300)
    age: Optional[int] = Field(None, gt=0, le=150)
    goal: Optional[Goal] = None
    daily_calorie_target: Optional[float] = Field(None, gt=0, le=20000)
    daily_water_target: Optional[float] = Field(None, ge=0, le=20000)


class UserResponse(BaseModel):
    user: UserPublic
