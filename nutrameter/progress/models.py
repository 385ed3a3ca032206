# -*- coding: utf-8 -*-
"""Progress: Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProgressCreateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    # Optional here so a missing weight is reported as "Weight is required".
    weight: Optional[float] = None
    water_intake: float = Field(0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)


class ProgressEntry(BaseModel):
    id: str
    user_id: str
    weight: float = Field(..., gt=0)
    water_intake: float = Field(0.0, ge=0)
    date: datetime
    notes: Optional[str] = None


class ProgressEntryResponse(BaseModel):
    entry: ProgressEntry


class ProgressEntriesResponse(BaseModel):
    entries: List[ProgressEntry]
