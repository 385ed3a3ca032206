# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import time
import unittest
from contextlib import ExitStack
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError as ModelValidationError

from nutrameter.errors import NotFoundError, ValidationError
from nutrameter.meals.models import MealCreateRequest, MealUpdateRequest
from nutrameter.meals.storage import create_meal, day_window, delete_meal, list_meals, update_meal
from nutrameter.persistence.memory_store import MemoryStore
from nutrameter.persistence.sqlite_store import SqliteStore
from nutrameter.progress.models import ProgressCreateRequest
from nutrameter.progress.storage import create_entry, list_entries

from ._factories import US_EASTERN, system_timezone

NOW = datetime(2026, 3, 11, 9, 30, tzinfo=timezone.utc)


class _LedgerCases:
    """Behaviour shared by both store backends."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self) -> None:
        self.store = self.make_store()

    def test_macros_round_trip_through_date_filter(self) -> None:
        created = create_meal(
            self.store,
            "alice",
            MealCreateRequest(name="Chicken salad", calories=450, macros={"protein": 25, "carbs": 45, "fats": 15}),
            now=NOW,
        )
        found = list_meals(self.store, "alice", date="2026-03-11", tz=timezone.utc)
        self.assertEqual([m.id for m in found], [created.id])
        macros = found[0].macros
        self.assertEqual((macros.protein, macros.carbs, macros.fats), (25, 45, 15))
        self.assertEqual(list_meals(self.store, "alice", date="2026-03-10", tz=timezone.utc), [])

    def test_list_is_scoped_to_owner_and_newest_first(self) -> None:
        first = create_meal(self.store, "alice", MealCreateRequest(name="A"), now=NOW)
        second = create_meal(self.store, "alice", MealCreateRequest(name="B"), now=NOW + timedelta(hours=1))
        create_meal(self.store, "bob", MealCreateRequest(name="C"), now=NOW)

        meals = list_meals(self.store, "alice")
        self.assertEqual([m.id for m in meals], [second.id, first.id])
        self.assertTrue(all(m.user_id == "alice" for m in meals))

    def test_meal_type_filter(self) -> None:
        create_meal(self.store, "alice", MealCreateRequest(name="Eggs", meal_type="breakfast"), now=NOW)
        create_meal(self.store, "alice", MealCreateRequest(name="Soup", meal_type="dinner"), now=NOW)
        names = [m.name for m in list_meals(self.store, "alice", meal_type="dinner")]
        self.assertEqual(names, ["Soup"])

    def test_defaults_for_sparse_meal(self) -> None:
        meal = create_meal(self.store, "alice", MealCreateRequest(name="  ", health_score=140), now=NOW)
        self.assertEqual(meal.name, "Unnamed Meal")
        self.assertEqual(meal.health_score, 100)
        self.assertEqual(meal.meal_type.value, "lunch")
        self.assertFalse(meal.is_ai_analyzed)

    def test_update_merges_macros(self) -> None:
        meal = create_meal(
            self.store, "alice", MealCreateRequest(name="Rice", macros={"protein": 5, "carbs": 57}), now=NOW
        )
        updated = update_meal(
            self.store, "alice", meal.id, MealUpdateRequest(calories=260, macros={"protein": 6})
        )
        self.assertEqual(updated.calories, 260)
        self.assertEqual(updated.macros.protein, 6)
        self.assertEqual(updated.macros.carbs, 57)
        self.assertEqual(updated.name, "Rice")

    def test_other_users_meal_is_not_found(self) -> None:
        meal = create_meal(self.store, "alice", MealCreateRequest(name="Rice"), now=NOW)
        with self.assertRaises(NotFoundError):
            update_meal(self.store, "bob", meal.id, MealUpdateRequest(name="Stolen"))
        with self.assertRaises(NotFoundError):
            delete_meal(self.store, "bob", meal.id)
        self.assertEqual(len(list_meals(self.store, "alice")), 1)

        delete_meal(self.store, "alice", meal.id)
        self.assertEqual(list_meals(self.store, "alice"), [])
        with self.assertRaises(NotFoundError):
            delete_meal(self.store, "alice", meal.id)

    def test_invalid_date_filter(self) -> None:
        with self.assertRaises(ValidationError):
            list_meals(self.store, "alice", date="yesterday")

    def test_progress_entries(self) -> None:
        with self.assertRaises(ValidationError):
            create_entry(self.store, "alice", ProgressCreateRequest())
        with self.assertRaises(ValidationError):
            create_entry(self.store, "alice", ProgressCreateRequest(weight=-3))

        create_entry(self.store, "alice", ProgressCreateRequest(weight=71.5), now=NOW - timedelta(days=1))
        create_entry(self.store, "alice", ProgressCreateRequest(weight=71.0, water_intake=500), now=NOW)
        create_entry(self.store, "bob", ProgressCreateRequest(weight=90), now=NOW)

        entries = list_entries(self.store, "alice")
        self.assertEqual([e.weight for e in entries], [71.0, 71.5])
        self.assertEqual(entries[0].water_intake, 500)
        self.assertEqual(len(list_entries(self.store, "alice", limit=1)), 1)

    def test_non_finite_weight_is_rejected_before_writing(self) -> None:
        for bad in (float("nan"), float("inf")):
            with self.assertRaises(ModelValidationError):
                ProgressCreateRequest(weight=bad)
            with self.assertRaises(ValidationError):
                unchecked = ProgressCreateRequest.model_construct(weight=bad, water_intake=0.0)
                create_entry(self.store, "alice", unchecked)
        self.assertEqual(list_entries(self.store, "alice"), [])

    @unittest.skipUnless(hasattr(time, "tzset"), "needs time.tzset")
    def test_date_filter_uses_local_rules_of_that_day(self) -> None:
        stack = ExitStack()
        stack.enter_context(system_timezone(US_EASTERN))
        self.addCleanup(stack.close)

        # 2026-01-15 is in EST (UTC-5) whatever the offset is today.
        start, end = day_window(date(2026, 1, 15))
        self.assertEqual(start, datetime(2026, 1, 15, 5, 0, tzinfo=timezone.utc))
        self.assertEqual(end, datetime(2026, 1, 16, 4, 59, 59, 999999, tzinfo=timezone.utc))
        summer_start, _ = day_window(date(2026, 7, 15))
        self.assertEqual(summer_start, datetime(2026, 7, 15, 4, 0, tzinfo=timezone.utc))

        late = create_meal(
            self.store, "alice", MealCreateRequest(name="Late"), now=datetime(2026, 1, 15, 4, 30, tzinfo=timezone.utc)
        )
        early = create_meal(
            self.store, "alice", MealCreateRequest(name="Early"), now=datetime(2026, 1, 15, 5, 30, tzinfo=timezone.utc)
        )
        self.assertEqual([m.id for m in list_meals(self.store, "alice", date="2026-01-15")], [early.id])
        self.assertEqual([m.id for m in list_meals(self.store, "alice", date="2026-01-14")], [late.id])


class TestMemoryLedger(_LedgerCases, unittest.TestCase):
    def make_store(self):
        return MemoryStore(seed_demo_user=False)


class TestSqliteLedger(_LedgerCases, unittest.TestCase):
    def make_store(self):
        self._tmp = Path(tempfile.mkdtemp(prefix="nutrameter-test-"))
        self.addCleanup(shutil.rmtree, self._tmp, True)
        return SqliteStore(self._tmp / "nutrameter.db")


if __name__ == "__main__":
    unittest.main()
