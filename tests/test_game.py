"""Tests for the game session facade.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

from typing import TYPE_CHECKING

import pytest

from geoquest.core.constants import INITIAL_MANA
from geoquest.core.settings import GeoQuestSettings
from geoquest.game import GameSession
from geoquest.infra.flags import JsonFlagStore, MemoryFlagStore

if TYPE_CHECKING:
    from pathlib import Path

    from geoquest.core.models import Mission

__all__ = ()


@pytest.fixture
def game(flags: MemoryFlagStore) -> GameSession:
    return GameSession(flags=flags)


class TestPositionStream:
    """Tests for position handling through the session."""

    def test_tick_applies_queued_samples(self, game: GameSession, missions: tuple[Mission, ...]) -> None:
        target = missions[0].target
        assert target is not None
        game.push_position(target.lat, target.lng, 5.0)

        assert game.gps_status == "searching"
        assert game.tick() == "locked"
        assert len(game.sampler) == 0
        assert game.proximity.is_revealed(missions[0].id)

    def test_failure_marks_error(self, game: GameSession) -> None:
        game.push_failure("denied")

        assert game.tick() == "error"
        assert game.hud().gps_status == "error"


class TestMapView:
    """Tests for the marker projection."""

    def test_only_targeted_missions(self, game: GameSession) -> None:
        markers = game.map_view()

        assert [m.mission_id for m in markers] == ["1", "2", "3"]
        assert [m.id for m in game.side_missions()] == ["s1"]

    def test_fog_and_reveal(self, game: GameSession, missions: tuple[Mission, ...]) -> None:
        target = missions[1].target
        assert target is not None
        game.push_position(target.lat, target.lng)
        game.tick()

        visible = {m.mission_id: m.visible for m in game.map_view()}
        assert visible["2"] is True
        assert visible["1"] is False

        game.set_fog(False)
        assert all(m.visible for m in game.map_view())

    def test_marker_state(self, game: GameSession) -> None:
        game.select_mission("1")

        markers = {m.mission_id: m for m in game.map_view()}

        assert markers["1"].active
        assert not markers["2"].active
        assert not markers["1"].locked
        assert not markers["1"].completed
        assert markers["1"].distance_m is None


class TestHud:
    """Tests for the HUD projection."""

    def test_initial_hud(self, game: GameSession) -> None:
        hud = game.hud()

        assert hud.level == 1
        assert hud.mana == INITIAL_MANA
        assert hud.fragments_collected == 0
        assert hud.fragments_total == 3
        assert hud.gps_status == "searching"


class TestTutorial:
    """Tests for the first-run tutorial flag."""

    def test_shown_once(self, game: GameSession, flags: MemoryFlagStore) -> None:
        assert game.should_show_tutorial() is True

        game.dismiss_tutorial()

        assert game.should_show_tutorial() is False
        assert flags.get("tutorial_seen") is True

    def test_not_shown_when_flag_set(self, flags: MemoryFlagStore) -> None:
        flags.set("tutorial_seen")

        assert GameSession(flags=flags).should_show_tutorial() is False

    def test_flag_persists_across_sessions(self, tmp_path: Path) -> None:
        settings = GeoQuestSettings(flag_path=tmp_path / "flags.json")
        first = GameSession.from_settings(settings)
        assert isinstance(first.flags, JsonFlagStore)
        assert first.should_show_tutorial()
        first.dismiss_tutorial()

        second = GameSession.from_settings(settings)

        assert second.should_show_tutorial() is False


class TestSettings:
    """Tests for settings wiring."""

    def test_from_settings_uses_values(self, tmp_path: Path) -> None:
        settings = GeoQuestSettings(
            reveal_radius_m=10.0,
            max_accuracy_m=20.0,
            sample_buffer_size=2,
            flag_path=tmp_path / "flags.json",
        )

        game = GameSession.from_settings(settings)

        assert game.proximity.reveal_radius_m == 10.0
        assert game.proximity.max_accuracy_m == 20.0
        for _ in range(3):
            game.push_position(25.03, 121.58)
        assert len(game.sampler) == 2

    def test_env_settings(self, env) -> None:
        env.set("GEOQUEST_REVEAL_RADIUS_M", "120")
        env.set("GEOQUEST_SAMPLE_BUFFER_SIZE", "8")

        settings = GeoQuestSettings()

        assert settings.reveal_radius_m == 120.0
        assert settings.sample_buffer_size == 8
