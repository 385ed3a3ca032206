# -*- coding: utf-8 -*-
"""Meals: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import TokenUser, get_current_user
from ..persistence.gateway import PersistenceGateway, get_gateway
from .models import (
    MealCreateRequest,
    MealDeletedResponse,
    MealResponse,
    MealsResponse,
    MealType,
    MealUpdateRequest,
)
from .storage import create_meal, delete_meal, list_meals, update_meal

router = APIRouter(prefix="/api/meals", tags=["Meals"])


@router.get("", response_model=MealsResponse, summary="List meals, newest first")
def get_meals(
    date: str | None = Query(default=None, description="YYYY-MM-DD (server-local day)"),
    meal_type: MealType | None = Query(default=None),
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    meals = list_meals(
        gateway,
        user.user_id,
        date=date,
        meal_type=meal_type.value if meal_type else None,
    )
    return MealsResponse(meals=meals)


@router.post("", response_model=MealResponse, status_code=201, summary="Log a meal")
def post_meal(
    request: MealCreateRequest,
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return MealResponse(meal=create_meal(gateway, user.user_id, request))


@router.put("/{meal_id}", response_model=MealResponse, summary="Update a meal")
def put_meal(
    meal_id: str,
    request: MealUpdateRequest,
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    return MealResponse(meal=update_meal(gateway, user.user_id, meal_id, request))


@router.delete("/{meal_id}", response_model=MealDeletedResponse, summary="Delete a meal")
def remove_meal(
    meal_id: str,
    user: TokenUser = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    delete_meal(gateway, user.user_id, meal_id)
    return MealDeletedResponse()
