# -*- coding: utf-8 -*-
"""User profile: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.api import user_public
from ..auth.security import TokenUser, get_current_user
from ..persistence.gateway import PersistenceGateway, get_gateway
from .models import UserResponse, UserUpdateRequest
from .storage import get_profile, update_profile

router = APIRouter(prefix="/api/user", tags=["User"])


@router.get("", response_model=UserResponse, summary="Get profile")
def read_profile(
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return UserResponse(user=user_public(get_profile(gateway, user.user_id)))


@router.put("", response_model=UserResponse, summary="Update profile")
def write_profile(
    request: UserUpdateRequest,
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return UserResponse(user=user_public(update_profile(gateway, user.user_id, request)))
