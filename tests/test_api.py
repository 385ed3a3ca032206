# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient

from nutrameter.api import create_app
from nutrameter.config import settings
from nutrameter.persistence.gateway import PersistenceGateway
from nutrameter.persistence.memory_store import MemoryStore
from nutrameter.persistence.sqlite_store import SqliteStore


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="nutrameter-test-"))
        cls.gateway = PersistenceGateway(SqliteStore(cls._tmp / "data" / "nutrameter.db"), MemoryStore())
        cls.client = TestClient(create_app(cls.gateway))

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _register(self, email: str, **extra) -> str:
        body = {"name": "Ann", "email": email, "password": "secret1"}
        body.update(extra)
        resp = self.client.post("/api/auth/register", json=body)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["token"]

    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"ok": True, "fallback_active": False})

    def test_register_login_and_me(self) -> None:
        token = self._register("Ann@Example.com", weight=64, goal="lose_weight")

        me = self.client.get("/api/auth/me", headers=_auth(token))
        self.assertEqual(me.status_code, 200)
        body = me.json()
        self.assertEqual(body["email"], "ann@example.com")
        self.assertEqual(body["weight"], 64)
        self.assertEqual(body["height"], 170)
        self.assertEqual(body["daily_calorie_target"], 2000)
        self.assertNotIn("password_hash", body)

        login = self.client.post("/api/auth/login", json={"email": "ann@example.com", "password": "secret1"})
        self.assertEqual(login.status_code, 200)
        self.assertTrue(login.json()["token"])

        bad = self.client.post("/api/auth/login", json={"email": "ann@example.com", "password": "nope"})
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(bad.json()["detail"], "Invalid credentials")

    def test_duplicate_registration_is_conflict(self) -> None:
        self._register("dup@example.com")
        resp = self.client.post(
            "/api/auth/register", json={"name": "Dup", "email": "dup@example.com", "password": "x"}
        )
        self.assertEqual(resp.status_code, 409)
        self.assertFalse(self.gateway.fallback_active)
        self.assertIsNone(self.gateway.fallback.get_user_by_email("dup@example.com"))

    def test_register_missing_field(self) -> None:
        resp = self.client.post("/api/auth/register", json={"name": "No Password", "email": "np@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("password", resp.json()["detail"])

    def test_requires_bearer_token(self) -> None:
        self.assertEqual(self.client.get("/api/meals").status_code, 401)
        resp = self.client.get("/api/meals", headers=_auth("not-a-token"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Unauthorized")

    def test_meal_crud(self) -> None:
        token = self._register("meals@example.com")
        other = self._register("other@example.com")

        created = self.client.post(
            "/api/meals",
            headers=_auth(token),
            json={
                "name": "Chicken salad",
                "meal_type": "lunch",
                "calories": 450,
                "macros": {"protein": 25, "carbs": 45, "fats": 15},
                "micronutrients": {"sodium": 480},
                "health_score": 72,
            },
        )
        self.assertEqual(created.status_code, 201, created.text)
        meal = created.json()["meal"]
        self.assertEqual(meal["macros"]["protein"], 25)

        today = datetime.now().astimezone().date().isoformat()
        listed = self.client.get(f"/api/meals?date={today}", headers=_auth(token)).json()["meals"]
        self.assertEqual([m["id"] for m in listed], [meal["id"]])
        self.assertEqual(self.client.get("/api/meals", headers=_auth(other)).json()["meals"], [])

        updated = self.client.put(f"/api/meals/{meal['id']}", headers=_auth(token), json={"calories": 500})
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["meal"]["calories"], 500)

        self.assertEqual(
            self.client.put(f"/api/meals/{meal['id']}", headers=_auth(other), json={"calories": 1}).status_code,
            404,
        )
        self.assertEqual(self.client.delete(f"/api/meals/{meal['id']}", headers=_auth(other)).status_code, 404)

        deleted = self.client.delete(f"/api/meals/{meal['id']}", headers=_auth(token))
        self.assertEqual(deleted.json(), {"message": "Meal deleted"})
        self.assertEqual(self.client.delete(f"/api/meals/{meal['id']}", headers=_auth(token)).status_code, 404)

    def test_bad_date_filter(self) -> None:
        token = self._register("dates@example.com")
        resp = self.client.get("/api/meals?date=soon", headers=_auth(token))
        self.assertEqual(resp.status_code, 400)

    def test_progress(self) -> None:
        token = self._register("progress@example.com")
        missing = self.client.post("/api/progress", headers=_auth(token), json={"water_intake": 250})
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json()["detail"], "Weight is required")

        created = self.client.post("/api/progress", headers=_auth(token), json={"weight": 68.2, "water_intake": 750})
        self.assertEqual(created.status_code, 201)
        entries = self.client.get("/api/progress", headers=_auth(token)).json()["entries"]
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["weight"], 68.2)

    def test_non_finite_weight_is_rejected(self) -> None:
        token = self._register("nan-weight@example.com")
        headers = {**_auth(token), "Content-Type": "application/json"}
        for raw in (b'{"weight": NaN}', b'{"weight": Infinity}'):
            resp = self.client.post("/api/progress", headers=headers, content=raw)
            self.assertEqual(resp.status_code, 400, resp.text)

        self.assertEqual(self.client.get("/api/progress", headers=_auth(token)).json()["entries"], [])
        dashboard = self.client.get("/api/dashboard", headers=_auth(token))
        self.assertEqual(dashboard.status_code, 200, dashboard.text)

    def test_profile_update_ignores_protected_fields(self) -> None:
        token = self._register("profile@example.com")
        resp = self.client.put(
            "/api/user",
            headers=_auth(token),
            json={"name": "Ann B", "daily_calorie_target": 1800, "email": "evil@example.com", "password_hash": "x"},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        user = resp.json()["user"]
        self.assertEqual(user["name"], "Ann B")
        self.assertEqual(user["daily_calorie_target"], 1800)
        self.assertEqual(user["email"], "profile@example.com")

        login = self.client.post("/api/auth/login", json={"email": "profile@example.com", "password": "secret1"})
        self.assertEqual(login.status_code, 200)

    def test_insights_and_dashboard(self) -> None:
        token = self._register("insights@example.com", weight=70, height=175)

        empty = self.client.get("/api/insights", headers=_auth(token)).json()
        self.assertEqual([i["kind"] for i in empty["insights"]], ["empty_state"])
        self.assertEqual(empty["weekly_summary"]["consistency_score"], 0)
        self.assertEqual(empty["targets"]["protein"], 150)

        for calories in (1300, 1000):
            self.client.post("/api/meals", headers=_auth(token), json={"name": "Big", "calories": calories})
        insights = self.client.get("/api/insights", headers=_auth(token)).json()["insights"]
        over = [i for i in insights if i["kind"] == "calorie_over"]
        self.assertEqual(len(over), 1)
        self.assertEqual(over[0]["badge"], "2300 kcal")
        self.assertIn("300 kcal over", over[0]["message"])

        self.client.post("/api/progress", headers=_auth(token), json={"weight": 70, "water_intake": 1250})
        dash = self.client.get("/api/dashboard", headers=_auth(token)).json()
        self.assertEqual(dash["today"]["meal_count"], 2)
        self.assertEqual(dash["today"]["totals"]["calories"], 2300)
        self.assertEqual(dash["calorie_progress"], 100)
        self.assertEqual(dash["water"]["percent"], 50)
        self.assertEqual(len(dash["daily_series"]), 7)
        self.assertEqual(dash["bmi"], 22.9)
        self.assertEqual(dash["bmi_category"], "Normal")

    def test_unexpected_error_is_generic_500(self) -> None:
        token = self._register("boom@example.com")
        client = TestClient(create_app(self.gateway), raise_server_exceptions=False)
        self.addCleanup(client.close)
        with mock.patch("nutrameter.insights.api.weekly_summary", side_effect=RuntimeError("disk on fire")):
            resp = client.get("/api/insights", headers=_auth(token))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"detail": "Internal server error"})

    def test_analyze_without_key_is_unconfigured(self) -> None:
        token = self._register("vision@example.com")
        with mock.patch.object(settings, "gemini_api_key", None):
            resp = self.client.post("/api/analyze", headers=_auth(token), json={"image_base64": "aGVsbG8="})
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["detail"], "Gemini API key not configured")


class TestApiFallback(unittest.TestCase):
    """Durable store path is a directory, so every call is served from memory."""

    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="nutrameter-test-"))
        cls.gateway = PersistenceGateway(SqliteStore(cls._tmp, timeout=0.1), MemoryStore())
        cls.client = TestClient(create_app(cls.gateway))

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def test_meals_survive_in_fallback_store(self) -> None:
        login = self.client.post("/api/auth/login", json={"email": "demo@nutrameter.com", "password": "demo123"})
        self.assertEqual(login.status_code, 200, login.text)
        token = login.json()["token"]

        created = self.client.post("/api/meals", headers=_auth(token), json={"name": "Toast", "calories": 180})
        self.assertEqual(created.status_code, 201, created.text)

        meals = self.client.get("/api/meals", headers=_auth(token)).json()["meals"]
        self.assertEqual([m["id"] for m in meals], [created.json()["meal"]["id"]])

        health = self.client.get("/api/health").json()
        self.assertTrue(health["fallback_active"])

    def test_register_in_fallback_mode(self) -> None:
        resp = self.client.post(
            "/api/auth/register", json={"name": "Bo", "email": "bo@example.com", "password": "pw"}
        )
        self.assertEqual(resp.status_code, 201)
        dup = self.client.post(
            "/api/auth/register", json={"name": "Bo", "email": "demo@nutrameter.com", "password": "pw"}
        )
        self.assertEqual(dup.status_code, 409)

    def test_non_finite_weight_is_rejected_in_fallback_mode(self) -> None:
        login = self.client.post("/api/auth/login", json={"email": "demo@nutrameter.com", "password": "demo123"})
        token = login.json()["token"]
        headers = {**_auth(token), "Content-Type": "application/json"}
        resp = self.client.post("/api/progress", headers=headers, content=b'{"weight": NaN}')
        self.assertEqual(resp.status_code, 400, resp.text)

        progress = self.client.get("/api/progress", headers=_auth(token))
        self.assertEqual(progress.status_code, 200, progress.text)
        self.assertEqual(self.client.get("/api/dashboard", headers=_auth(token)).status_code, 200)


if __name__ == "__main__":
    unittest.main()
