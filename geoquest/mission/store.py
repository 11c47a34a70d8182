"""In-memory mission progress snapshots.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from typing import TYPE_CHECKING

# Local imports (core first, then alphabetical)
from ..infra.logging import get_logger

if TYPE_CHECKING:
    from ..core.models import MissionProgress
    from ..core.types import MissionId

__all__ = ("SessionStore",)

logger = get_logger("mission.store")


class SessionStore:
    """Last saved progress per mission, for the lifetime of the session.

    Snapshots are deep-copied on the way in and out so callers can keep
    mutating their working copy without touching the stored one.
    """

    def __init__(self) -> None:
        self._snapshots: dict[MissionId, MissionProgress] = {}

    def __contains__(self, mission_id: object) -> bool:
        return mission_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def save(self, mission_id: MissionId, snapshot: MissionProgress) -> None:
        self._snapshots[mission_id] = snapshot.model_copy(deep=True)
        logger.debug("saved progress for {mission_id}", mission_id=mission_id)

    def load(self, mission_id: MissionId) -> MissionProgress | None:
        snapshot = self._snapshots.get(mission_id)
        return snapshot.model_copy(deep=True) if snapshot is not None else None

    def clear(self, mission_id: MissionId) -> None:
        if self._snapshots.pop(mission_id, None) is not None:
            logger.debug("cleared progress for {mission_id}", mission_id=mission_id)
