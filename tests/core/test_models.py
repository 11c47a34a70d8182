"""Tests for core domain models.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from geoquest.content import fragments_total, load_missions
from geoquest.core.constants import RANK_TITLES, XP_PER_LEVEL
from geoquest.core.models import (
    ChoicePairCheck,
    Coordinate,
    FreeTextCheck,
    KeywordCheck,
    Mission,
    MissionProgress,
    NumericRangeCheck,
    PlayerStats,
    PositionSample,
    Quiz,
    QuizCheck,
    level_for_xp,
    rank_for_level,
)

__all__ = ()


class TestCoordinate:
    """Tests for Coordinate."""

    def test_valid(self) -> None:
        coordinate = Coordinate(lat=25.03, lng=121.58)

        assert coordinate.lat == 25.03

    @pytest.mark.parametrize(("lat", "lng"), [(91.0, 0.0), (-91.0, 0.0), (0.0, 181.0)])
    def test_out_of_range(self, lat: float, lng: float) -> None:
        """Latitude and longitude are bounded."""
        with pytest.raises(ValidationError):
            Coordinate(lat=lat, lng=lng)

    def test_frozen(self) -> None:
        coordinate = Coordinate(lat=0.0, lng=0.0)

        with pytest.raises(ValidationError):
            coordinate.lat = 1.0  # type: ignore[misc]


class TestPositionSample:
    """Tests for PositionSample."""

    def test_ok_requires_coordinate(self) -> None:
        with pytest.raises(ValidationError):
            PositionSample(status="ok")

    def test_failure_without_coordinate(self) -> None:
        sample = PositionSample(status="denied")

        assert sample.is_failure
        assert sample.coordinate is None

    def test_negative_accuracy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PositionSample(coordinate=Coordinate(lat=0, lng=0), accuracy_m=-1)


class TestQuizDescriptors:
    """Tests for quiz check descriptors."""

    def test_discriminated_union_parses_by_kind(self) -> None:
        """Check payloads are routed on their ``kind`` tag."""
        adapter = TypeAdapter(QuizCheck)

        check = adapter.validate_python({"kind": "keywords", "groups": [["高"], ["低"]]})

        assert isinstance(check, KeywordCheck)
        assert check.field == "reason"

    def test_choice_pair_rejects_unselectable_pair(self) -> None:
        with pytest.raises(ValidationError, match="not within the option sets"):
            ChoicePairCheck(first_options=("a",), second_options=("b",), accepted=(("a", "c"),))

    def test_numeric_range_rejects_empty_band(self) -> None:
        with pytest.raises(ValidationError):
            NumericRangeCheck(bands={"tiger": (150, 140)})

    def test_quiz_rejects_duplicate_ids(self) -> None:
        with pytest.raises(ValidationError, match="duplicate"):
            Quiz(question="?", checks=(FreeTextCheck(expected="x"), FreeTextCheck(expected="y", field="other")))

    def test_quiz_rejects_shared_fields(self) -> None:
        with pytest.raises(ValidationError, match="share answer fields"):
            Quiz(question="?", checks=(FreeTextCheck(id="a", expected="x"), FreeTextCheck(id="b", expected="y")))

    def test_check_lookup(self) -> None:
        quiz = Quiz(
            question="?",
            checks=(NumericRangeCheck(bands={"tiger": (1, 2)}), KeywordCheck(groups=(("高",),))),
        )

        assert quiz.check_ids == ("measurements", "reasoning")
        assert quiz.check("reasoning") is quiz.checks[1]
        assert quiz.check("missing") is None
        assert quiz.check_for_field("tiger") is quiz.checks[0]
        assert quiz.check_for_field("nope") is None


class TestMission:
    """Tests for Mission definitions."""

    def test_xp_reward_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Mission(id="m", title="M", xp_reward=0)

    def test_side_mission_never_awards_fragment(self) -> None:
        mission = Mission(id="s", title="S", xp_reward=50, kind="side", fragment_id=3)

        assert not mission.awards_fragment

    def test_requires_evidence(self) -> None:
        assert Mission(id="m", title="M", xp_reward=1, evidence_instruction="photo").requires_evidence
        assert not Mission(id="m", title="M", xp_reward=1).requires_evidence


class TestReferenceContent:
    """Tests for the shipped mission catalogue."""

    def test_ids_unique(self) -> None:
        ids = [mission.id for mission in load_missions()]

        assert len(ids) == len(set(ids))

    def test_fragments_total(self) -> None:
        assert fragments_total(load_missions()) == 3

    def test_side_missions_are_location_agnostic(self) -> None:
        side = [m for m in load_missions() if m.kind == "side"]

        assert side
        assert all(m.target is None and m.fragment_id is None for m in side)


class TestProgressModels:
    """Tests for progress and player statistics."""

    def test_progress_starts_empty(self) -> None:
        progress = MissionProgress()

        assert progress.is_empty
        assert not progress.is_solved("answer")

    def test_progress_not_empty_after_answer(self) -> None:
        progress = MissionProgress(answers={"answer": "南港"})

        assert not progress.is_empty

    @pytest.mark.parametrize("xp", [0, 1, 499, 500, 1234, 5000])
    def test_level_derived_from_xp(self, xp: int) -> None:
        """Level always equals floor(xp / 500) + 1."""
        stats = PlayerStats(current_xp=xp)

        assert stats.level == xp // XP_PER_LEVEL + 1
        assert stats.next_level_xp == stats.level * XP_PER_LEVEL

    def test_rank_table(self) -> None:
        assert rank_for_level(1) == RANK_TITLES[0]
        assert rank_for_level(4) == RANK_TITLES[3]
        assert rank_for_level(40) == RANK_TITLES[-1]
        assert level_for_xp(999) == 2

    def test_mana_bounds_validated(self) -> None:
        stats = PlayerStats()

        with pytest.raises(ValidationError):
            stats.mana = -1

    def test_computed_fields_serialized(self) -> None:
        data = PlayerStats(current_xp=600).model_dump()

        assert data["level"] == 2
        assert data["rank"] == RANK_TITLES[1]
