"""Integration tests for the HTTP API over in-memory stores."""

from collections.abc import Iterator
from datetime import date
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from backend.planner.main import create_app

ALICE = {"Authorization": "Bearer alice:Alice"}
BOB = {"Authorization": "Bearer bob:Bob"}


@pytest.fixture
def client(make_planner: Any) -> Iterator[TestClient]:
    """Test client whose lifespan initializes and disposes the planner."""
    with TestClient(create_app(make_planner())) as test_client:
        yield test_client


class TestRoot:
    def test_root(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Trip Planner API"


class TestHealth:
    """Test /health, /healthz and /metrics."""

    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_healthz_ok(self, client: TestClient) -> None:
        data = client.get("/healthz").json()
        assert data["status"] == "ok"
        assert data["components"] == {"remote": "ok", "cache": "not_configured"}

    def test_healthz_degraded_when_remote_down(self, client: TestClient, trip_store: Any) -> None:
        trip_store.down = True

        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["components"]["remote"].startswith("error")

    def test_metrics_exposes_sync_metrics(self, client: TestClient) -> None:
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "sync_latency_ms" in response.text
        assert "cache_hits_total" in response.text


class TestDays:
    """Test day endpoints."""

    def test_list_days(self, client: TestClient) -> None:
        data = client.get("/days").json()
        assert data["trip_start_date"] == "2024-04-01"
        assert data["total_days"] == 3
        assert data["max_days"] == 7
        assert [d["date"] for d in data["days"]] == ["2024-04-01", "2024-04-02", "2024-04-03"]

    def test_add_and_remove_day(self, client: TestClient, settings_store: Any) -> None:
        response = client.post("/days", json={})
        assert response.status_code == 201
        assert response.json()["total_days"] == 4
        assert response.json()["sync_error"] is None

        response = client.delete("/days/last")
        assert response.json()["total_days"] == 3

    def test_add_day_over_limit_conflicts(self, client: TestClient) -> None:
        for _ in range(4):
            client.post("/days", json={})
        response = client.post("/days", json={})
        assert response.status_code == 409

    def test_remove_only_day_conflicts(self, client: TestClient) -> None:
        client.delete("/days/last")
        client.delete("/days/last")
        assert client.delete("/days/last").status_code == 409

    def test_failed_save_reports_sync_error(self, client: TestClient, settings_store: Any) -> None:
        settings_store.down = True

        response = client.post("/days", json={})

        assert response.status_code == 201
        assert response.json()["total_days"] == 4
        assert response.json()["sync_error"] == "settings store is down"

    def test_update_day_theme_and_image(self, client: TestClient) -> None:
        response = client.patch(
            "/days/2", json={"theme": "Nara", "image_url": "https://img.example/deer.jpg"}
        )
        day = response.json()["days"][1]
        assert day["theme"] == "Nara"
        assert day["image_url"] == "https://img.example/deer.jpg"

    def test_update_missing_day(self, client: TestClient) -> None:
        assert client.patch("/days/9", json={"theme": "x"}).status_code == 404

    def test_set_start_date_and_day_date(self, client: TestClient) -> None:
        response = client.put("/days/start-date", json={"trip_start_date": "2024-05-01"})
        assert response.json()["trip_start_date"] == "2024-05-01"

        response = client.put("/days/3/date", json={"date": "2024-06-10"})
        assert response.json()["trip_start_date"] == "2024-06-08"

    def test_pending_day_abandon(self, client: TestClient) -> None:
        response = client.post("/days", json={"pending": True})
        assert response.json()["pending_day"] == 4

        response = client.post("/trips/form/abandon")

        assert response.json() == {"rolled_back_day": 4, "total_days": 3, "sync_error": None}

    def test_reorder(self, client: TestClient) -> None:
        trip_id = client.post("/trips", json={"title": "Tower", "date": "2024-04-03"}).json()["id"]

        response = client.post("/days/reorder", json={"from_day": 1, "to_day": 3})

        assert response.status_code == 200
        assert response.json()["moved_trip_ids"] == [trip_id]
        assert response.json()["partial_failure"] is False
        assert [t["id"] for t in client.get("/trips", params={"day": 1}).json()] == [trip_id]

    def test_reorder_partial_failure(self, client: TestClient, trip_store: Any) -> None:
        first = client.post("/trips", json={"title": "A", "date": "2024-04-01"}).json()["id"]
        second = client.post("/trips", json={"title": "B", "date": "2024-04-02"}).json()["id"]
        trip_store.fail_update_ids = {second}

        data = client.post("/days/reorder", json={"from_day": 1, "to_day": 2}).json()

        assert data["partial_failure"] is True
        assert data["moved_trip_ids"] == [first]
        assert [f["trip_id"] for f in data["failed"]] == [second]

    def test_reorder_missing_day(self, client: TestClient) -> None:
        response = client.post("/days/reorder", json={"from_day": 1, "to_day": 8})
        assert response.status_code == 404

    def test_strict_reorder_fails_on_partial_failure(
        self, client: TestClient, trip_store: Any
    ) -> None:
        client.post("/trips", json={"title": "A", "date": "2024-04-01"})
        second = client.post("/trips", json={"title": "B", "date": "2024-04-02"}).json()["id"]
        trip_store.fail_update_ids = {second}

        response = client.post(
            "/days/reorder", params={"strict": True}, json={"from_day": 1, "to_day": 2}
        )

        assert response.status_code == 502
        assert "1 trip update(s) failed" in response.json()["detail"]

    def test_strict_reorder_succeeds_without_failures(self, client: TestClient) -> None:
        client.post("/trips", json={"title": "A", "date": "2024-04-01"})

        response = client.post(
            "/days/reorder", params={"strict": True}, json={"from_day": 1, "to_day": 2}
        )

        assert response.status_code == 200
        assert response.json()["partial_failure"] is False


class TestTrips:
    """Test trip endpoints."""

    def test_create_commits_pending_day(self, client: TestClient) -> None:
        client.post("/days", json={"pending": True})

        response = client.post("/trips", json={"title": "Onsen", "date": "2024-04-04"})

        assert response.status_code == 201
        assert client.get("/days").json()["pending_day"] is None
        assert client.post("/trips/form/abandon").json()["rolled_back_day"] is None

    def test_list_by_day_and_hidden_trips(self, client: TestClient) -> None:
        client.post("/trips", json={"title": "Castle", "date": "2024-04-03"})
        client.post("/trips", json={"title": "Later", "date": date(2024, 4, 20).isoformat()})

        assert [t["title"] for t in client.get("/trips").json()] == ["Castle"]
        assert [t["title"] for t in client.get("/trips", params={"day": 3}).json()] == ["Castle"]
        assert client.get("/trips", params={"day": 5}).status_code == 404

    def test_update_and_delete(self, client: TestClient) -> None:
        trip_id = client.post("/trips", json={"title": "Temple", "date": "2024-04-01"}).json()["id"]

        response = client.patch(f"/trips/{trip_id}", json={"title": "Kinkaku-ji"})
        assert response.json() == {"sync_error": None}
        assert client.get("/trips", params={"day": 1}).json()[0]["title"] == "Kinkaku-ji"

        assert client.delete(f"/trips/{trip_id}").json() == {"sync_error": None}
        assert client.get("/trips").json() == []

    def test_update_failure_keeps_local_change(self, client: TestClient, trip_store: Any) -> None:
        trip_id = client.post("/trips", json={"title": "Temple", "date": "2024-04-01"}).json()["id"]
        trip_store.fail_update_ids = {trip_id}

        response = client.patch(f"/trips/{trip_id}", json={"title": "Kinkaku-ji"})

        assert response.json()["sync_error"] == f"update of trip {trip_id} rejected"
        assert client.get("/trips", params={"day": 1}).json()[0]["title"] == "Kinkaku-ji"

    def test_empty_update_rejected(self, client: TestClient) -> None:
        assert client.patch("/trips/1", json={}).status_code == 422

    @pytest.mark.parametrize("field", ["title", "date", "description", "location", "lat", "lng"])
    def test_null_required_field_rejected(self, client: TestClient, field: str) -> None:
        trip_id = client.post("/trips", json={"title": "Temple", "date": "2024-04-01"}).json()["id"]

        response = client.patch(f"/trips/{trip_id}", json={field: None})

        assert response.status_code == 422
        assert client.get("/trips", params={"day": 1}).json()[0]["title"] == "Temple"

    def test_clearing_optional_field(self, client: TestClient) -> None:
        trip_id = client.post(
            "/trips", json={"title": "Temple", "date": "2024-04-01", "time_start": "09:00"}
        ).json()["id"]

        response = client.patch(f"/trips/{trip_id}", json={"time_start": None})

        assert response.json() == {"sync_error": None}
        assert client.get("/trips", params={"day": 1}).json()[0]["time_start"] is None

    def test_invalid_trip_rejected(self, client: TestClient) -> None:
        response = client.post("/trips", json={"title": "x", "date": "2024-04-01", "lat": 100})
        assert response.status_code == 422


class TestChecklist:
    """Test checklist endpoints."""

    def test_toggle_requires_user(self, client: TestClient) -> None:
        key = client.get("/checklist").json()[0]["key"]
        assert client.post("/checklist/toggle", json={"item_key": key}).status_code == 401

    def test_toggle_on_and_off(self, client: TestClient) -> None:
        key = client.get("/checklist").json()[0]["key"]

        response = client.post("/checklist/toggle", json={"item_key": key}, headers=ALICE)
        assert response.json()["checked"] is True
        assert [u["username"] for u in response.json()["checked_by"]] == ["alice"]

        response = client.post("/checklist/toggle", json={"item_key": key}, headers=ALICE)
        assert response.json()["checked"] is False

    def test_unknown_item(self, client: TestClient) -> None:
        response = client.post("/checklist/toggle", json={"item_key": "nope"}, headers=ALICE)
        assert response.status_code == 404

    def test_all_checked_once_every_known_user_checked(self, client: TestClient) -> None:
        key = client.get("/checklist").json()[0]["key"]

        client.post("/checklist/toggle", json={"item_key": key}, headers=ALICE)
        item = client.get("/checklist").json()[0]
        assert [u["username"] for u in item["checked_by"]] == ["alice"]
        assert item["all_checked"] is False

        client.post("/checklist/toggle", json={"item_key": key}, headers=BOB)
        item = client.get("/checklist").json()[0]
        assert sorted(u["username"] for u in item["checked_by"]) == ["alice", "bob"]
        assert item["all_checked"] is True

    def test_lists_all_notice_items(self, client: TestClient) -> None:
        items = client.get("/checklist").json()
        assert len(items) == 10
        assert all(item["checked_by"] == [] and not item["all_checked"] for item in items)


class TestWishlist:
    """Test wishlist endpoints."""

    def test_wishlist_flow(self, client: TestClient) -> None:
        response = client.post("/wishlist", json={"category": "food", "name": "Kushikatsu"})
        assert response.status_code == 201
        item_id = response.json()["id"]

        assert client.post(f"/wishlist/{item_id}/favorite").json() == {"sync_error": None}
        response = client.post(f"/wishlist/{item_id}/schedule", json={"day": 2, "time": "19:00"})
        assert response.json() == {"sync_error": None}

        [item] = client.get("/wishlist").json()
        assert item["is_favorite"] is True
        assert item["added_to_trip"] == {"day": 2, "time": "19:00"}

        assert client.delete(f"/wishlist/{item_id}").json() == {"sync_error": None}
        assert client.get("/wishlist").json() == []

    def test_schedule_on_missing_day(self, client: TestClient) -> None:
        item_id = client.post("/wishlist", json={"category": "food", "name": "Ramen"}).json()["id"]
        response = client.post(f"/wishlist/{item_id}/schedule", json={"day": 9})
        assert response.status_code == 404


class TestLifespan:
    """Test startup and shutdown wiring."""

    def test_built_planner_engine_disposed_on_shutdown(self, make_planner: Any) -> None:
        engine = MagicMock()
        engine.dispose = AsyncMock()
        build = AsyncMock(return_value=(make_planner(), engine))

        with patch("backend.planner.main.build_planner", build):
            with TestClient(create_app()) as test_client:
                assert test_client.get("/health").status_code == 200
                engine.dispose.assert_not_awaited()

        build.assert_awaited_once()
        engine.dispose.assert_awaited_once()
