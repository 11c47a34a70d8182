"""Game session wiring for a single player.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from typing import TYPE_CHECKING

# Local imports (core first, then alphabetical)
from .content import fragments_total, load_missions
from .core.constants import (
    DEFAULT_MAX_ACCURACY_M,
    DEFAULT_REVEAL_RADIUS_M,
    DEFAULT_SAMPLE_BUFFER_SIZE,
    TUTORIAL_FLAG,
)
from .core.models import MarkerView
from .geo.fog import ProximityEngine
from .geo.sampler import GeolocationSampler
from .infra.flags import JsonFlagStore, MemoryFlagStore
from .infra.instrumentation import get_logger, traced
from .mission.ledger import ProgressionLedger
from .mission.machine import MissionStateMachine
from .mission.store import SessionStore

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .core.models import HudView, Mission, MissionView, PositionSample
    from .core.protocols import FlagStore, ImageEditor
    from .core.settings import GeoQuestSettings
    from .core.types import GpsStatus, MissionId, SampleStatus

__all__ = ("GameSession",)

logger = get_logger("game")


class GameSession:
    """One player's game: position stream, fog, missions and progression.

    Every public method handles one discrete event to completion. Position
    callbacks only enqueue samples; ``tick`` applies them to the proximity
    engine in arrival order.
    """

    def __init__(
        self,
        missions: Iterable[Mission] | None = None,
        *,
        reveal_radius_m: float = DEFAULT_REVEAL_RADIUS_M,
        max_accuracy_m: float = DEFAULT_MAX_ACCURACY_M,
        sample_buffer_size: int = DEFAULT_SAMPLE_BUFFER_SIZE,
        image_editor: ImageEditor | None = None,
        flags: FlagStore | None = None,
    ) -> None:
        self.missions: tuple[Mission, ...] = tuple(missions) if missions is not None else load_missions()
        self.sampler = GeolocationSampler(sample_buffer_size)
        self.proximity = ProximityEngine(self.missions, reveal_radius_m=reveal_radius_m, max_accuracy_m=max_accuracy_m)
        self.ledger = ProgressionLedger()
        self.store = SessionStore()
        self.machine = MissionStateMachine(
            self.missions,
            ledger=self.ledger,
            store=self.store,
            image_editor=image_editor,
        )
        self.flags: FlagStore = flags if flags is not None else MemoryFlagStore()
        self._tutorial_checked = False
        self._show_tutorial = False

    @classmethod
    def from_settings(
        cls,
        settings: GeoQuestSettings,
        *,
        missions: Iterable[Mission] | None = None,
        image_editor: ImageEditor | None = None,
    ) -> GameSession:
        return cls(
            missions,
            reveal_radius_m=settings.reveal_radius_m,
            max_accuracy_m=settings.max_accuracy_m,
            sample_buffer_size=settings.sample_buffer_size,
            image_editor=image_editor,
            flags=JsonFlagStore(settings.flag_path),
        )

    # ------------------------------------------------------------------
    # Position stream
    # ------------------------------------------------------------------
    def push_position(self, lat: float, lng: float, accuracy_m: float | None = None) -> PositionSample:
        return self.sampler.publish_fix(lat, lng, accuracy_m)

    def push_failure(self, status: SampleStatus) -> PositionSample:
        return self.sampler.publish_failure(status)

    @traced("game.tick")
    def tick(self) -> GpsStatus:
        """Apply every queued sample to the proximity engine."""
        return self.proximity.ingest_all(self.sampler.drain())

    @property
    def gps_status(self) -> GpsStatus:
        return self.proximity.status

    # ------------------------------------------------------------------
    # Map and HUD
    # ------------------------------------------------------------------
    def set_fog(self, enabled: bool) -> None:
        self.proximity.set_fog(enabled)

    def map_view(self) -> list[MarkerView]:
        """Markers for every mission placed on the map."""
        active_id = self.machine.active_id
        return [
            MarkerView(
                mission_id=mission.id,
                title=mission.title,
                kind=mission.kind,
                difficulty=mission.difficulty,
                target=mission.target,
                visible=self.proximity.is_visible(mission.id),
                locked=self.machine.is_locked(mission),
                completed=self.ledger.is_completed(mission.id),
                active=mission.id == active_id,
                distance_m=self.proximity.distance_to(mission.id),
            )
            for mission in self.missions
            if mission.target is not None
        ]

    def side_missions(self) -> list[Mission]:
        return [mission for mission in self.missions if mission.kind == "side"]

    def hud(self) -> HudView:
        return self.ledger.hud(fragments_total(self.missions), self.gps_status)

    # ------------------------------------------------------------------
    # Missions
    # ------------------------------------------------------------------
    @traced("game.select_mission", capture=("mission_id",))
    def select_mission(self, mission_id: MissionId) -> MissionView:
        """Inbound mission-selected event from the map or side-mission list."""
        return self.machine.enter(mission_id)

    # ------------------------------------------------------------------
    # Tutorial
    # ------------------------------------------------------------------
    def should_show_tutorial(self) -> bool:
        """Read the persisted flag once, on first entry to the map."""
        if not self._tutorial_checked:
            self._tutorial_checked = True
            self._show_tutorial = not self.flags.get(TUTORIAL_FLAG)
        return self._show_tutorial

    def dismiss_tutorial(self) -> None:
        if self._show_tutorial or not self._tutorial_checked:
            self.flags.set(TUTORIAL_FLAG, True)
            logger.info("tutorial dismissed")
        self._tutorial_checked = True
        self._show_tutorial = False
