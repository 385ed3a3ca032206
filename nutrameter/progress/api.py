# -*- coding: utf-8 -*-
"""Progress: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import TokenUser, get_current_user
from ..persistence.gateway import PersistenceGateway, get_gateway
from .models import ProgressCreateRequest, ProgressEntriesResponse, ProgressEntryResponse
from .storage import DEFAULT_LIMIT, create_entry, list_entries

router = APIRouter(prefix="/api/progress", tags=["Progress"])


@router.get("", response_model=ProgressEntriesResponse, summary="List progress entries, newest first")
def get_progress(
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=365),
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return ProgressEntriesResponse(entries=list_entries(gateway, user.user_id, limit=limit))


@router.post("", response_model=ProgressEntryResponse, status_code=201, summary="Log weight and water")
def post_progress(
    request: ProgressCreateRequest,
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return ProgressEntryResponse(entry=create_entry(gateway, user.user_id, request))
