# -*- coding: utf-8 -*-
"""Analyze: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.security import TokenUser, get_current_user
from .models import AnalyzeRequest, AnalyzeResponse
from .vision import analyze_image

router = APIRouter(prefix="/api/analyze", tags=["Analyze"])


@router.post("", response_model=AnalyzeResponse, summary="Estimate nutrition from a meal photo")
def post_analyze(
    request: AnalyzeRequest,
    user: TokenUser = Depends(get_current_user),
):
    estimate = analyze_image(image_base64=request.image_base64, mime_type=request.mime_type)
    return AnalyzeResponse(data=estimate)
