"""Proximity and fog-of-war engine.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from math import atan2, cos, radians, sin, sqrt
from typing import TYPE_CHECKING

# Local imports (core first, then alphabetical)
from ..core.constants import DEFAULT_MAX_ACCURACY_M, DEFAULT_REVEAL_RADIUS_M, EARTH_RADIUS_M
from ..infra.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..core.models import Coordinate, Mission, PositionSample
    from ..core.types import GpsStatus, MissionId

__all__ = ("ProximityEngine", "distance_m")

logger = get_logger("geo.fog", stream="position")


def distance_m(a: Coordinate, b: Coordinate) -> float:
    """Return distance in metres using haversine formula."""
    d_lat = radians(b.lat - a.lat)
    d_lng = radians(b.lng - a.lng)
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    h = sin(d_lat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(d_lng / 2) ** 2
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_M * c


class ProximityEngine:
    """Turns position samples into per-mission distances, fog state and GPS status.

    Only missions with a target coordinate take part; location-agnostic
    missions are never placed on the map. Distances are recomputed from
    scratch on every acceptable fix, so repeated ingestion of the same sample
    is harmless.

    The fog toggle is a rendering override: it changes what ``is_visible``
    reports but never touches the stored distances.
    """

    def __init__(
        self,
        missions: Iterable[Mission],
        *,
        reveal_radius_m: float = DEFAULT_REVEAL_RADIUS_M,
        max_accuracy_m: float = DEFAULT_MAX_ACCURACY_M,
    ) -> None:
        self.reveal_radius_m = reveal_radius_m
        self.max_accuracy_m = max_accuracy_m
        self._targets: dict[MissionId, Coordinate] = {m.id: m.target for m in missions if m.target is not None}
        self._distances: dict[MissionId, float] = {}
        self._position: Coordinate | None = None
        self._status: GpsStatus = "searching"
        self._fog_enabled = True

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def status(self) -> GpsStatus:
        return self._status

    @property
    def position(self) -> Coordinate | None:
        """Last accepted player position."""
        return self._position

    @property
    def fog_enabled(self) -> bool:
        return self._fog_enabled

    def set_fog(self, enabled: bool) -> None:
        self._fog_enabled = enabled
        logger.info("fog {state}", state="enabled" if enabled else "disabled")

    def toggle_fog(self) -> bool:
        self.set_fog(not self._fog_enabled)
        return self._fog_enabled

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    def ingest(self, sample: PositionSample) -> GpsStatus:
        """Apply one sample and return the resulting GPS status.

        Failures switch to ``error`` and keep the last known distances. A fix
        whose accuracy is worse than ``max_accuracy_m`` is ignored entirely.
        """
        if sample.is_failure:
            self._set_status("error", reason=sample.status)
            return self._status

        if sample.accuracy_m is not None and sample.accuracy_m > self.max_accuracy_m:
            logger.debug("ignoring coarse fix", accuracy_m=sample.accuracy_m)
            return self._status

        if sample.coordinate is None:
            return self._status
        self._position = sample.coordinate
        self._distances = {mission_id: distance_m(sample.coordinate, target) for mission_id, target in self._targets.items()}
        self._set_status("locked")
        return self._status

    def ingest_all(self, samples: Iterable[PositionSample]) -> GpsStatus:
        for sample in samples:
            self.ingest(sample)
        return self._status

    def _set_status(self, status: GpsStatus, *, reason: str | None = None) -> None:
        if status == self._status:
            return
        previous, self._status = self._status, status
        if status == "error":
            logger.warning("gps status {previous} -> {status}", previous=previous, status=status, reason=reason)
        else:
            logger.info("gps status {previous} -> {status}", previous=previous, status=status)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def distance_to(self, mission_id: MissionId) -> float | None:
        """Last computed distance, or None before the first fix."""
        return self._distances.get(mission_id)

    def is_revealed(self, mission_id: MissionId) -> bool:
        """Distance-derived reveal state, ignoring the fog toggle."""
        distance = self._distances.get(mission_id)
        return distance is not None and distance <= self.reveal_radius_m

    def is_visible(self, mission_id: MissionId) -> bool:
        """Whether the marker should be drawn uncovered."""
        if mission_id not in self._targets:
            return False
        return not self._fog_enabled or self.is_revealed(mission_id)

    def revealed_ids(self) -> set[MissionId]:
        return {mission_id for mission_id in self._targets if self.is_revealed(mission_id)}
