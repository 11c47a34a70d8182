"""Working state of the mission currently on screen.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

# Local imports (core first, then alphabetical)
from ..core.models import MissionStage

if TYPE_CHECKING:
    from ..core.models import Mission, MissionProgress
    from ..core.types import CheckId, FieldName

__all__ = ("MissionSession",)


@dataclass(slots=True)
class MissionSession:
    """One entry into a mission, from selection until back or finalization.

    ``token`` identifies the attempt; an image-edit result is only applied if
    the session that issued it is still the active one.
    """

    mission: Mission
    progress: MissionProgress
    token: int
    stage: MissionStage = MissionStage.ENTERED
    errors: dict[CheckId, bool] = field(default_factory=dict)
    evidence_error: str | None = None
    edit_pending: bool = False
    finalized: bool = False
    read_only: bool = False

    @property
    def quiz_solved(self) -> bool:
        quiz = self.mission.quiz
        if quiz is None:
            return True
        return all(self.progress.is_solved(check_id) for check_id in quiz.check_ids)

    @property
    def prompt(self) -> str:
        if self.progress.prompt is not None:
            return self.progress.prompt
        return self.mission.prompt_hint

    def locked_fields(self) -> tuple[FieldName, ...]:
        quiz = self.mission.quiz
        if quiz is None:
            return ()
        return tuple(
            name
            for check in quiz.checks
            if self.read_only or self.progress.is_solved(check.id)
            for name in check.field_names()
        )
