"""Player progression ledger.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from typing import TYPE_CHECKING

# Third-party (alphabetical)
import logfire

# Local imports (core first, then alphabetical)
from ..core.constants import FIELD_XP_BONUS, MISSION_MANA_COST, XP_PER_LEVEL
from ..core.models import CompletionResult, HudView, PlayerStats
from ..infra.logging import get_logger

if TYPE_CHECKING:
    from ..core.models import Mission
    from ..core.types import FragmentId, GpsStatus, MissionId

__all__ = ("ProgressionLedger",)

logger = get_logger("mission.ledger")


class ProgressionLedger:
    """XP, mana, completed missions and collected fragments for one player.

    The completed set and fragment set only ever grow. Mission-driven changes
    go through ``award_field_bonus`` and ``finalize``, which carry the guards
    against double counting.
    """

    def __init__(self, stats: PlayerStats | None = None) -> None:
        self.stats = stats or PlayerStats()
        self._completed: set[MissionId] = set()
        self._fragments: set[FragmentId] = set()

    @property
    def completed_ids(self) -> frozenset[MissionId]:
        return frozenset(self._completed)

    @property
    def fragments(self) -> frozenset[FragmentId]:
        return frozenset(self._fragments)

    def is_completed(self, mission_id: MissionId) -> bool:
        return mission_id in self._completed

    # ------------------------------------------------------------------
    # Primitive effects
    # ------------------------------------------------------------------
    def award_xp(self, amount: int) -> int:
        """Add XP and return the resulting level."""
        if amount < 0:
            raise ValueError(f"XP awards must be non-negative, got {amount}")
        previous_level = self.stats.level
        self.stats.current_xp += amount
        if self.stats.level != previous_level:
            logger.info("level up {previous} -> {level}", previous=previous_level, level=self.stats.level, rank=self.stats.rank)
        return self.stats.level

    def spend_mana(self, amount: int) -> int:
        """Deduct mana, flooring at zero, and return what is left."""
        if amount < 0:
            raise ValueError(f"mana cost must be non-negative, got {amount}")
        self.stats.mana = max(0, self.stats.mana - amount)
        return self.stats.mana

    # ------------------------------------------------------------------
    # Guarded mission effects
    # ------------------------------------------------------------------
    def award_field_bonus(self, mission: Mission) -> int:
        """Per-check bonus for main missions that are not yet completed."""
        if mission.kind != "main" or mission.id in self._completed:
            return 0
        self.award_xp(FIELD_XP_BONUS)
        return FIELD_XP_BONUS

    def finalize(self, mission: Mission) -> CompletionResult:
        """Apply the effects of completing a mission.

        Main missions count once: a repeated finalization returns a result with
        nothing awarded. Side missions pay out on every completion and never
        enter the completed set.
        """
        with logfire.span("ledger.finalize", mission_id=mission.id, kind=mission.kind):
            if mission.kind == "main" and mission.id in self._completed:
                logger.info("mission {mission_id} already completed", mission_id=mission.id)
                return self._result(mission)

            fragment: FragmentId | None = None
            if mission.kind == "main":
                self._completed.add(mission.id)
                if mission.fragment_id is not None and mission.fragment_id not in self._fragments:
                    self._fragments.add(mission.fragment_id)
                    fragment = mission.fragment_id

            self.award_xp(mission.xp_reward)
            mana_before = self.stats.mana
            self.spend_mana(MISSION_MANA_COST)

            return self._result(
                mission,
                xp_awarded=mission.xp_reward,
                mana_spent=mana_before - self.stats.mana,
                fragment_collected=fragment,
                newly_completed=mission.kind == "main",
            )

    def _result(
        self,
        mission: Mission,
        *,
        xp_awarded: int = 0,
        mana_spent: int = 0,
        fragment_collected: FragmentId | None = None,
        newly_completed: bool = False,
    ) -> CompletionResult:
        return CompletionResult(
            mission_id=mission.id,
            kind=mission.kind,
            xp_awarded=xp_awarded,
            mana_spent=mana_spent,
            fragment_collected=fragment_collected,
            newly_completed=newly_completed,
            level=self.stats.level,
            rank=self.stats.rank,
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def hud(self, fragments_total: int, gps_status: GpsStatus = "searching") -> HudView:
        stats = self.stats
        return HudView(
            level=stats.level,
            current_xp=stats.current_xp,
            xp_into_level=stats.current_xp % XP_PER_LEVEL,
            xp_to_next_level=stats.next_level_xp - stats.current_xp,
            next_level_xp=stats.next_level_xp,
            rank=stats.rank,
            mana=stats.mana,
            max_mana=stats.max_mana,
            sos_count=stats.sos_count,
            fragments_collected=len(self._fragments),
            fragments_total=fragments_total,
            gps_status=gps_status,
        )
