"""Tests for the GeoQuest FastAPI application.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import base64

import pytest
from dirty_equals import IsStr
from fastapi.testclient import TestClient

from geoquest.game import GameSession
from geoquest.infra.flags import MemoryFlagStore
from geoquest.ui.app import ImageRequest, create_app

__all__ = ()

pytestmark = pytest.mark.anyio

PHOTO = base64.b64encode(b"\xff\xd8photo").decode()


@pytest.fixture
def game(image_editor) -> GameSession:
    return GameSession(flags=MemoryFlagStore(), image_editor=image_editor)


@pytest.fixture
def client(game: GameSession) -> TestClient:
    """Create a test client for the FastAPI app."""
    return TestClient(create_app(game))


def _solve_stratum(client: TestClient) -> None:
    client.post("/api/missions/2/select")
    client.put("/api/mission/fields", json={"values": {"answer": "南港層"}})
    client.post("/api/mission/verify", json={})


class TestImageRequest:
    """Tests for the ImageRequest model."""

    def test_valid_base64(self) -> None:
        request = ImageRequest(data=PHOTO)

        assert request.payload() == b"\xff\xd8photo"
        assert request.mime_type == "image/jpeg"

    def test_invalid_base64(self) -> None:
        with pytest.raises(ValueError):
            ImageRequest(data="not base64!!")


class TestCreateApp:
    """Tests for application setup."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_game_attached_to_state(self, client: TestClient, game: GameSession) -> None:
        assert client.app.state.game is game


class TestMapEndpoints:
    """Tests for position, map and HUD routes."""

    def test_position_updates_map(self, client: TestClient) -> None:
        response = client.post("/api/position", json={"lat": 25.028155021059753, "lng": 121.57924699325368, "accuracy_m": 8})

        assert response.json() == {"gpsStatus": "locked"}
        data = client.get("/api/map").json()
        markers = {m["mission_id"]: m for m in data["markers"]}
        assert markers["2"]["visible"] is True
        assert markers["1"]["visible"] is False
        assert data["sideMissions"] == ["s1"]
        assert data["fogEnabled"] is True

    def test_position_error(self, client: TestClient) -> None:
        response = client.post("/api/position/error", json={"status": "denied"})

        assert response.json() == {"gpsStatus": "error"}
        assert client.get("/api/hud").json()["gps_status"] == "error"

    def test_invalid_position(self, client: TestClient) -> None:
        response = client.post("/api/position", json={"lat": 123, "lng": 0})

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_sample"

    def test_fog_toggle(self, client: TestClient) -> None:
        markers = client.post("/api/fog", json={"enabled": False}).json()

        assert all(m["visible"] for m in markers)

    def test_hud(self, client: TestClient) -> None:
        hud = client.get("/api/hud").json()

        assert hud["level"] == 1
        assert hud["fragments_total"] == 3


class TestMissionEndpoints:
    """Tests for the mission flow over HTTP."""

    def test_select_unknown_mission(self, client: TestClient) -> None:
        response = client.post("/api/missions/99/select")

        assert response.status_code == 404
        assert response.json() == {"error": "mission_not_found", "message": "Mission not found: 99", "recovery": "abort"}

    def test_busy(self, client: TestClient) -> None:
        client.post("/api/missions/1/select")

        response = client.post("/api/missions/2/select")

        assert response.status_code == 409
        assert response.json() == {"error": "mission_busy", "message": IsStr(regex=r"Cannot enter 2: .*"), "recovery": "retry"}

    def test_no_active_mission(self, client: TestClient) -> None:
        response = client.get("/api/mission")

        assert response.status_code == 409
        assert response.json() == {"error": "no_active_mission", "message": IsStr(), "recovery": "abort"}

    def test_wrong_answer(self, client: TestClient) -> None:
        client.post("/api/missions/2/select")
        client.put("/api/mission/fields", json={"values": {"answer": "北港層"}})

        body = client.post("/api/mission/verify", json={"check_id": "stratum"}).json()

        assert body["correct"] is False
        assert body["mission"]["stage"] == "quiz_error"
        assert body["mission"]["errors"] == {"stratum": True}

    def test_unknown_field(self, client: TestClient) -> None:
        client.post("/api/missions/2/select")

        response = client.put("/api/mission/fields", json={"values": {"nope": "x"}})

        assert response.status_code == 422
        assert response.json()["error"] == "unknown_field"

    def test_full_main_mission(self, client: TestClient, image_editor) -> None:
        _solve_stratum(client)

        view = client.post("/api/mission/image", json={"data": PHOTO}).json()
        assert view["stage"] == "evidence_pending"
        assert view["has_image"] is True

        client.put("/api/mission/prompt", json={"prompt": "標出節理"})
        edit = client.post("/api/mission/edit").json()
        assert edit["success"] is True
        assert base64.b64decode(edit["edited_image"]) == b"edited"
        assert image_editor.calls[0][1] == "標出節理"

        notice = client.post("/api/mission/submit").json()
        assert notice["fragment_id"] == 1

        result = client.post("/api/mission/acknowledge").json()
        assert result["newly_completed"] is True
        assert result["xp_awarded"] == 300

        hud = client.get("/api/hud").json()
        assert hud["current_xp"] == 400
        assert hud["fragments_collected"] == 1

        again = client.post("/api/mission/acknowledge")
        assert again.status_code == 409

    def test_edit_failure_returns_message(self, client: TestClient, image_editor) -> None:
        image_editor.error = "quota exceeded"
        _solve_stratum(client)
        client.post("/api/mission/image", json={"data": PHOTO})

        response = client.post("/api/mission/edit")

        assert response.status_code == 200
        assert response.json()["error"] == "quota exceeded"
        view = client.post("/api/mission/error/dismiss").json()
        assert view["evidence_error"] is None

    def test_submit_before_solving(self, client: TestClient) -> None:
        client.post("/api/missions/2/select")

        response = client.post("/api/mission/submit")

        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transition"

    def test_side_mission_next_photo(self, client: TestClient) -> None:
        client.post("/api/missions/s1/select")
        client.post("/api/mission/image", json={"data": PHOTO, "mime_type": "image/png"})
        client.post("/api/mission/submit")

        result = client.post("/api/mission/acknowledge", params={"next_photo": True}).json()

        assert result["xp_awarded"] == 50
        view = client.get("/api/mission").json()
        assert view["mission_id"] == "s1"
        assert view["has_image"] is False

    def test_back_and_remove_image(self, client: TestClient) -> None:
        _solve_stratum(client)
        client.post("/api/mission/image", json={"data": PHOTO})

        assert client.delete("/api/mission/image").json()["has_image"] is False
        assert client.post("/api/mission/back").json() == {"status": "returned"}
        assert client.get("/api/mission").status_code == 409

    def test_invalid_image_payload(self, client: TestClient) -> None:
        _solve_stratum(client)

        response = client.post("/api/mission/image", json={"data": "%%%"})

        assert response.status_code == 422


class TestTutorialEndpoints:
    """Tests for the tutorial flag routes."""

    def test_tutorial_flow(self, client: TestClient) -> None:
        assert client.get("/api/tutorial").json() == {"show": True}

        assert client.post("/api/tutorial/dismiss").json() == {"show": False}
        assert client.get("/api/tutorial").json() == {"show": False}
