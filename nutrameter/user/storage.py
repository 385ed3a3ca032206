# -*- coding: utf-8 -*-
"""User profile: read and allow-listed update."""

from __future__ import annotations

from typing import Any, Dict

from ..errors import NotFoundError
from ..persistence.base import Store
from .models import PROFILE_UPDATABLE_FIELDS, UserUpdateRequest


def get_profile(store: Store, user_id: str) -> Dict[str, Any]:
    user = store.get_user_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_profile(store: Store, user_id: str, request: UserUpdateRequest) -> Dict[str, Any]:
    provided = request.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    updates = {k: v for k, v in provided.items() if k in PROFILE_UPDATABLE_FIELDS}
    user = store.update_user(user_id, updates)
    if not user:
        raise NotFoundError("User not found")
    return user
