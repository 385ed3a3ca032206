# -*- coding: utf-8 -*-
"""Shared builders for test records."""

from __future__ import annotations

import os
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator
from uuid import uuid4

from nutrameter.meals.models import Meal

# POSIX rule string, so no tz database is needed: EST/EDT, DST from the second
# Sunday of March to the first Sunday of November.
US_EASTERN = "EST5EDT,M3.2.0,M11.1.0"


def make_meal(created_at: datetime, **fields: Any) -> Meal:
    data = {
        "id": str(uuid4()),
        "user_id": fields.pop("user_id", "u1"),
        "name": fields.pop("name", "Test meal"),
        "created_at": created_at,
    }
    data.update(fields)
    return Meal.model_validate(data)


@contextmanager
def system_timezone(spec: str) -> Iterator[None]:
    """Run the block with the process-local zone set to ``spec``."""
    previous = os.environ.get("TZ")
    os.environ["TZ"] = spec
    time.tzset()
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = previous
        time.tzset()
