# -*- coding: utf-8 -*-
"""Persistence: gateway that routes every operation to the durable store first.

When the durable store raises ``BackendUnavailable`` the same operation is
replayed against the fallback store and a warning is logged. Any other error
(conflict, validation, not-found) propagates unchanged: the fallback is only
for an unreachable backend, never for a rejected request.

Callers cannot tell which backend answered; both return the same record
shapes. Records written while in fallback mode are not reconciled into the
durable store later.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

from fastapi import Request

from ..errors import BackendUnavailable
from .base import Record, Store

logger = logging.getLogger(__name__)


class PersistenceGateway(Store):
    name = "gateway"

    def __init__(self, primary: Store, fallback: Store) -> None:
        self.primary = primary
        self.fallback = fallback
        self.fallback_active = False

    def _run(self, op: str, *args: Any, **kwargs: Any) -> Any:
        try:
            result = getattr(self.primary, op)(*args, **kwargs)
        except BackendUnavailable as exc:
            logger.warning(
                "Durable store unavailable (%s); serving %s from %s fallback store",
                exc,
                op,
                self.fallback.name,
            )
            self.fallback_active = True
            return getattr(self.fallback, op)(*args, **kwargs)
        self.fallback_active = False
        return result

    # ---- users ----

    def create_user(self, record: Record) -> Record:
        return self._run("create_user", record)

    def get_user_by_email(self, email: str) -> Optional[Record]:
        return self._run("get_user_by_email", email)

    def get_user_by_id(self, user_id: str) -> Optional[Record]:
        return self._run("get_user_by_id", user_id)

    def update_user(self, user_id: str, updates: Record) -> Optional[Record]:
        return self._run("update_user", user_id, updates)

    # ---- meals ----

    def create_meal(self, record: Record) -> Record:
        return self._run("create_meal", record)

    def get_meal(self, user_id: str, meal_id: str) -> Optional[Record]:
        return self._run("get_meal", user_id, meal_id)

    def list_meals(
        self,
        user_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        meal_type: Optional[str] = None,
    ) -> List[Record]:
        return self._run("list_meals", user_id, start=start, end=end, meal_type=meal_type)

    def update_meal(self, user_id: str, meal_id: str, updates: Record) -> Optional[Record]:
        return self._run("update_meal", user_id, meal_id, updates)

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        return self._run("delete_meal", user_id, meal_id)

    # ---- progress ----

    def create_progress(self, record: Record) -> Record:
        return self._run("create_progress", record)

    def list_progress(self, user_id: str, *, limit: int = 30) -> List[Record]:
        return self._run("list_progress", user_id, limit=limit)


def get_gateway(request: Request) -> PersistenceGateway:
    """FastAPI dependency: the gateway built by ``create_app``."""
    return request.app.state.gateway
