# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from nutrameter.auth.models import RegisterRequest
from nutrameter.auth.storage import create_user
from nutrameter.errors import BackendUnavailable, ConflictError, ValidationError
from nutrameter.meals.models import MealCreateRequest
from nutrameter.meals.storage import create_meal, list_meals_since
from nutrameter.persistence.gateway import PersistenceGateway
from nutrameter.persistence.memory_store import DEMO_USER_EMAIL, MemoryStore
from nutrameter.persistence.sqlite_store import SqliteStore


class _CountingMemoryStore(MemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self.calls = []

    def create_user(self, record):
        self.calls.append("create_user")
        return super().create_user(record)

    def get_user_by_email(self, email):
        self.calls.append("get_user_by_email")
        return super().get_user_by_email(email)


class TestPersistenceGateway(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="nutrameter-test-"))

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def _healthy(self) -> PersistenceGateway:
        return PersistenceGateway(SqliteStore(self._tmp / "db" / "nutrameter.db"), _CountingMemoryStore())

    def _broken(self) -> PersistenceGateway:
        # A directory cannot be opened as a database file.
        return PersistenceGateway(SqliteStore(self._tmp, timeout=0.1), _CountingMemoryStore())

    def test_unreachable_sqlite_is_unavailable(self) -> None:
        with self.assertRaises(BackendUnavailable):
            SqliteStore(self._tmp, timeout=0.1).get_user_by_id("x")

    def test_falls_back_when_durable_store_is_unavailable(self) -> None:
        gateway = self._broken()
        self.assertFalse(gateway.fallback_active)

        meal = create_meal(gateway, "u1", MealCreateRequest(name="Oats", calories=300))
        self.assertTrue(gateway.fallback_active)

        since = datetime.now(timezone.utc) - timedelta(days=1)
        self.assertEqual([m.id for m in list_meals_since(gateway, "u1", since)], [meal.id])
        self.assertIsNotNone(gateway.fallback.get_meal("u1", meal.id))

    def test_demo_user_is_served_by_fallback(self) -> None:
        gateway = self._broken()
        user = gateway.get_user_by_email(DEMO_USER_EMAIL)
        self.assertIsNotNone(user)
        self.assertEqual(user["id"], "demo-user-001")

    def test_duplicate_email_is_rejected_without_fallback(self) -> None:
        gateway = self._healthy()
        request = RegisterRequest(name="Ann", email="ann@example.com", password="secret1")
        create_user(gateway, request)

        with self.assertRaises(ConflictError):
            create_user(gateway, request)
        self.assertFalse(gateway.fallback_active)
        self.assertEqual(gateway.fallback.calls, [])
        self.assertIsNone(gateway.fallback.get_user_by_email("ann@example.com"))

    def test_store_level_conflict_does_not_fall_back(self) -> None:
        gateway = self._healthy()
        record = {
            "id": "u-1",
            "name": "Ann",
            "email": "ann@example.com",
            "password_hash": "x",
            "weight": 70.0,
            "height": 170.0,
            "age": 30,
            "goal": "maintain",
            "daily_calorie_target": 2000.0,
            "daily_water_target": 2500.0,
            "created_at": "2026-01-01T00:00:00.000000+00:00",
        }
        gateway.create_user(record)
        with self.assertRaises(ConflictError):
            gateway.create_user(dict(record, id="u-2"))
        self.assertEqual(gateway.fallback.calls, [])

    def test_missing_required_column_is_invalid_not_conflict(self) -> None:
        gateway = self._healthy()
        record = {
            "id": "p-1",
            "user_id": "u-1",
            "weight": None,
            "water_intake": 0.0,
            "date": "2026-01-01T00:00:00.000000+00:00",
            "notes": None,
        }
        with self.assertRaises(ValidationError):
            gateway.create_progress(record)
        self.assertFalse(gateway.fallback_active)
        self.assertEqual(gateway.primary.list_progress("u-1"), [])

    def test_flag_clears_once_durable_store_answers(self) -> None:
        gateway = self._healthy()
        gateway.fallback_active = True
        gateway.get_user_by_id("nobody")
        self.assertFalse(gateway.fallback_active)


if __name__ == "__main__":
    unittest.main()
