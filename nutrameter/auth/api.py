# -*- coding: utf-8 -*-
"""Auth: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..errors import NotFoundError
from ..persistence.gateway import PersistenceGateway, get_gateway
from .models import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from .security import TokenUser, create_access_token, get_current_user
from .storage import authenticate, create_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def user_public(row: dict) -> UserPublic:
    return UserPublic.model_validate({k: row[k] for k in UserPublic.model_fields if k in row})


@router.post("/register", response_model=AuthResponse, status_code=201, summary="Register a new user")
def register(request: RegisterRequest, gateway: PersistenceGateway = Depends(get_gateway)):
    user = create_user(gateway, request)
    token = create_access_token(user_id=user["id"], email=user["email"])
    return AuthResponse(user=user_public(user), token=token)


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest, gateway: PersistenceGateway = Depends(get_gateway)):
    user = authenticate(gateway, request.email, request.password)
    token = create_access_token(user_id=user["id"], email=user["email"])
    return AuthResponse(user=user_public(user), token=token)


@router.get("/me", response_model=UserPublic, summary="Get current user")
def me(
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    row = gateway.get_user_by_id(user.user_id)
    if not row:
        raise NotFoundError("User not found")
    return user_public(row)
