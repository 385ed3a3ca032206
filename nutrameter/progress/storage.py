# -*- coding: utf-8 -*-
"""Progress: storage helpers over the persistence gateway."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from ..errors import ValidationError
from ..persistence.base import Store, to_utc_iso
from .models import ProgressCreateRequest, ProgressEntry

DEFAULT_LIMIT = 30


def create_entry(
    store: Store,
    user_id: str,
    request: ProgressCreateRequest,
    *,
    now: Optional[datetime] = None,
) -> ProgressEntry:
    if request.weight is None or request.weight == 0:
        raise ValidationError("Weight is required")
    if not math.isfinite(request.weight) or request.weight < 0:
        raise ValidationError("Weight must be a positive number")
    if not math.isfinite(request.water_intake or 0.0):
        raise ValidationError("Water intake must be a number")
    record = {
        "id": str(uuid4()),
        "user_id": user_id,
        "weight": float(request.weight),
        "water_intake": float(request.water_intake or 0.0),
        "date": to_utc_iso(now or datetime.now(timezone.utc)),
        "notes": request.notes,
    }
    return ProgressEntry.model_validate(store.create_progress(record))


def list_entries(store: Store, user_id: str, *, limit: int = DEFAULT_LIMIT) -> List[ProgressEntry]:
    return [ProgressEntry.model_validate(r) for r in store.list_progress(user_id, limit=limit)]
