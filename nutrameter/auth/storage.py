# -*- coding: utf-8 -*-
"""Auth: user storage helpers over the persistence gateway."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from ..errors import AuthError, ConflictError
from ..persistence.base import Store, to_utc_iso
from .models import Goal, RegisterRequest
from .security import hash_password, verify_password

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_AGE = 25
DEFAULT_CALORIE_TARGET = 2000.0
DEFAULT_WATER_TARGET_ML = 2500.0


def normalize_email(email: str) -> str:
    return email.lower().strip()


def get_user_by_email(store: Store, email: str) -> Optional[Dict[str, Any]]:
    return store.get_user_by_email(normalize_email(email))


def create_user(store: Store, request: RegisterRequest) -> Dict[str, Any]:
    email = normalize_email(request.email)
    if store.get_user_by_email(email) is not None:
        raise ConflictError("Email already in use")

    record = {
        "id": str(uuid4()),
        "name": request.name,
        "email": email,
        "password_hash": hash_password(request.password),
        "weight": float(request.weight or DEFAULT_WEIGHT_KG),
        "height": float(request.height or DEFAULT_HEIGHT_CM),
        "age": int(request.age or DEFAULT_AGE),
        "goal": (request.goal or Goal.maintain).value,
        "daily_calorie_target": DEFAULT_CALORIE_TARGET,
        "daily_water_target": DEFAULT_WATER_TARGET_ML,
        "created_at": to_utc_iso(datetime.now(timezone.utc)),
    }
    return store.create_user(record)


def authenticate(store: Store, email: str, password: str) -> Dict[str, Any]:
    user = get_user_by_email(store, email)
    if not user or not verify_password(password, user["password_hash"]):
        raise AuthError("Invalid credentials")
    return user
