"""Mission lifecycle state machine.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from typing import TYPE_CHECKING

# Third-party (alphabetical)
import logfire

# Local imports (core first, then alphabetical)
from ..core.constants import DEFAULT_IMAGE_MIME_TYPE
from ..core.exceptions import (
    EditInProgressError,
    FieldLockedError,
    ImageEditError,
    MissionBusyError,
    MissionNotFoundError,
    MissionReadOnlyError,
    NoActiveMissionError,
    QuizCheckNotFoundError,
    StateTransitionError,
    UnknownFieldError,
)
from ..core.models import (
    CompletionNotice,
    CompletionResult,
    EditOutcome,
    EvidenceImage,
    MissionProgress,
    MissionStage,
    MissionView,
)
from ..infra.logging import get_logger
from ..quiz.verifier import QuizVerifier
from .ledger import ProgressionLedger
from .state import MissionSession
from .store import SessionStore

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..core.models import Mission
    from ..core.protocols import ImageEditor
    from ..core.types import CheckId, MissionId

__all__ = ("MissionStateMachine",)

logger = get_logger("mission.machine")

_QUIZ_STAGES = frozenset({MissionStage.ENTERED, MissionStage.QUIZ_PENDING, MissionStage.QUIZ_ERROR})


class MissionStateMachine:
    """Drives one mission at a time from entry to finalization.

    The machine owns the working progress of the active mission and is the
    only caller of the ledger's mission effects. Every failure is either an
    inline flag on the mission view (wrong answer, failed image edit) or a
    recoverable ``GeoQuestError`` for actions that do not fit the current
    stage; none of them end the mission.

    Example:
        >>> machine = MissionStateMachine(load_missions())
        >>> view = machine.enter('2')
        >>> machine.update_field('answer', '南港層')
        >>> machine.verify()
        True
    """

    def __init__(
        self,
        missions: Iterable[Mission],
        *,
        verifier: QuizVerifier | None = None,
        ledger: ProgressionLedger | None = None,
        store: SessionStore | None = None,
        image_editor: ImageEditor | None = None,
    ) -> None:
        self.missions: dict[MissionId, Mission] = {m.id: m for m in missions}
        self.verifier = verifier or QuizVerifier(self.missions.values())
        self.ledger = ledger or ProgressionLedger()
        self.store = store or SessionStore()
        self.image_editor = image_editor
        self._active: MissionSession | None = None
        self._attempts = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def active_id(self) -> MissionId | None:
        return self._active.mission.id if self._active is not None else None

    def get_mission(self, mission_id: MissionId) -> Mission:
        try:
            return self.missions[mission_id]
        except KeyError:
            raise MissionNotFoundError(mission_id) from None

    def is_locked(self, mission: Mission) -> bool:
        return not self._rank_gate(mission)

    def is_completed(self, mission_id: MissionId) -> bool:
        return self.ledger.is_completed(mission_id)

    def stage_of(self, mission_id: MissionId) -> MissionStage:
        """Stage of any mission, active or not."""
        if self._active is not None and self._active.mission.id == mission_id:
            return self._active.stage
        if self.ledger.is_completed(mission_id):
            return MissionStage.COMPLETED
        return MissionStage.LOCKED

    def view(self) -> MissionView:
        """Read-only projection of the active mission."""
        session = self._require("view")
        mission = session.mission
        progress = session.progress
        quiz = mission.quiz
        return MissionView(
            mission_id=mission.id,
            title=mission.title,
            description=mission.description,
            kind=mission.kind,
            stage=session.stage,
            question=quiz.question if quiz is not None else None,
            check_ids=quiz.check_ids if quiz is not None else (),
            answers=dict(progress.answers),
            solved={check_id: progress.is_solved(check_id) for check_id in (quiz.check_ids if quiz else ())},
            errors=dict(session.errors),
            locked_fields=session.locked_fields(),
            quiz_solved=session.quiz_solved,
            evidence_instruction=mission.evidence_instruction,
            has_image=progress.image is not None,
            has_edited_image=progress.edited_image is not None,
            prompt=session.prompt,
            edit_pending=session.edit_pending,
            evidence_error=session.evidence_error,
            read_only=session.read_only,
        )

    # ------------------------------------------------------------------
    # Entry and exit
    # ------------------------------------------------------------------
    def enter(self, mission_id: MissionId) -> MissionView:
        """Handle the map's mission-selected event."""
        mission = self.get_mission(mission_id)
        if self._active is not None:
            if self._active.mission.id == mission_id:
                return self.view()
            raise MissionBusyError(mission_id, self._active.mission.id)
        if not self._rank_gate(mission):
            raise StateTransitionError(MissionStage.LOCKED.value, MissionStage.ENTERED.value, "rank requirement not met")

        with logfire.span("mission.enter", mission_id=mission_id, kind=mission.kind):
            progress = self.store.load(mission_id) or MissionProgress()
            read_only = mission.kind == "main" and self.ledger.is_completed(mission_id)
            if read_only and mission.quiz is not None:
                progress.solved = {check_id: True for check_id in mission.quiz.check_ids}
                progress.quiz_solved = True

            self._attempts += 1
            self._active = MissionSession(mission=mission, progress=progress, token=self._attempts, read_only=read_only)
            logger.info("mission {mission_id}: locked -> entered", mission_id=mission_id, restored=not progress.is_empty)
            self._advance()
        return self.view()

    def back(self) -> None:
        """Leave the mission without finishing it, keeping everything typed so far."""
        session = self._require("back")
        mission_id = session.mission.id
        if not session.read_only:
            self.store.save(mission_id, session.progress)
        logger.info("mission {mission_id}: left at {stage}", mission_id=mission_id, stage=session.stage.value)
        self._active = None

    def _rank_gate(self, mission: Mission) -> bool:
        # Placeholder gate: rank requirements are carried on missions but not enforced yet.
        return True

    # ------------------------------------------------------------------
    # Quiz
    # ------------------------------------------------------------------
    def update_field(self, name: str, value: str) -> None:
        """Record the player's current input for one answer field."""
        session = self._require_writable("update_field")
        quiz = session.mission.quiz
        check = quiz.check_for_field(name) if quiz is not None else None
        if check is None:
            raise UnknownFieldError(session.mission.id, name)
        if session.progress.is_solved(check.id):
            raise FieldLockedError(session.mission.id, name)
        session.progress.answers[name] = value

    def update_fields(self, values: Mapping[str, str]) -> None:
        for name, value in values.items():
            self.update_field(name, value)

    def verify(self, check_id: CheckId | None = None) -> bool:
        """Verify one sub-check, or every unsolved one when ``check_id`` is None.

        Returns whether all verified checks passed. Failures only raise the
        check's error flag; the player may resubmit as often as they like.
        """
        session = self._require_writable("verify")
        mission = session.mission
        quiz = mission.quiz
        if quiz is None:
            return True
        if check_id is not None and quiz.check(check_id) is None:
            raise QuizCheckNotFoundError(mission.id, check_id)

        if check_id is None:
            pending = [cid for cid in quiz.check_ids if not session.progress.is_solved(cid)]
        elif session.progress.is_solved(check_id):
            pending = []
        else:
            pending = [check_id]

        all_passed = True
        with logfire.span("mission.verify", mission_id=mission.id, checks=pending):
            for cid in pending:
                if self.verifier.verify_check(mission.id, cid, session.progress.answers):
                    session.progress.solved[cid] = True
                    session.errors[cid] = False
                    bonus = self.ledger.award_field_bonus(mission)
                    logger.info("mission {mission_id}: check {check_id} solved", mission_id=mission.id, check_id=cid, bonus=bonus)
                else:
                    session.errors[cid] = True
                    all_passed = False
                    logger.info("mission {mission_id}: check {check_id} rejected", mission_id=mission.id, check_id=cid)
        self._advance()
        return all_passed

    # ------------------------------------------------------------------
    # Evidence
    # ------------------------------------------------------------------
    def attach_image(self, data: bytes, mime_type: str = DEFAULT_IMAGE_MIME_TYPE) -> None:
        session = self._require_evidence_stage("attach_image")
        session.progress.image = EvidenceImage(data=data, mime_type=mime_type)
        session.progress.edited_image = None
        session.evidence_error = None

    def remove_image(self) -> None:
        session = self._require_evidence_stage("remove_image")
        session.progress.image = None
        session.progress.edited_image = None
        session.evidence_error = None

    def set_prompt(self, prompt: str) -> None:
        session = self._require_evidence_stage("set_prompt")
        session.progress.prompt = prompt

    def dismiss_error(self) -> None:
        session = self._require("dismiss_error")
        session.evidence_error = None

    async def edit_image(self) -> EditOutcome:
        """Run the attached photo through the image-edit collaborator.

        The outcome is advisory: failures are kept as a dismissible message and
        the mission can still be submitted manually. If the player leaves the
        mission before the call returns, the late result is discarded.
        """
        session = self._require_evidence_stage("edit_image")
        image = session.progress.image
        if image is None:
            raise StateTransitionError(session.stage.value, "edit_image", "no image attached")
        prompt = session.prompt.strip()
        if not prompt:
            raise StateTransitionError(session.stage.value, "edit_image", "prompt is empty")
        if session.edit_pending:
            raise EditInProgressError(session.mission.id)
        if self.image_editor is None:
            session.evidence_error = "Image editing is not available"
            return EditOutcome(success=False, error=session.evidence_error)

        session.edit_pending = True
        session.evidence_error = None
        try:
            with logfire.span("mission.edit_image", mission_id=session.mission.id, token=session.token):
                edited = await self.image_editor.edit(image.data, prompt, image.mime_type)
        except ImageEditError as exc:
            message = str(exc) or "Image edit failed"
            if self._active is not session:
                logger.info("discarding late image-edit failure", mission_id=session.mission.id, token=session.token)
                return EditOutcome(success=False, error=message, discarded=True)
            session.evidence_error = message
            logger.warning("image edit failed for {mission_id}", mission_id=session.mission.id, error=message)
            return EditOutcome(success=False, error=message)
        finally:
            session.edit_pending = False

        result = EvidenceImage(data=edited, mime_type=image.mime_type)
        if self._active is not session:
            logger.info("discarding late image-edit result", mission_id=session.mission.id, token=session.token)
            return EditOutcome(success=True, discarded=True, image=result)
        session.progress.edited_image = result
        return EditOutcome(success=True, image=result)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------
    def submit(self) -> CompletionNotice:
        """Player confirms the mission; surfaces the completion acknowledgment."""
        session = self._require("submit")
        mission = session.mission
        if session.read_only:
            raise MissionReadOnlyError(mission.id)
        if session.stage is not MissionStage.PRE_COMPLETE:
            if session.stage is MissionStage.EVIDENCE_PENDING:
                if session.progress.image is None:
                    raise StateTransitionError(session.stage.value, MissionStage.PRE_COMPLETE.value, "photo evidence required")
            elif session.stage is not MissionStage.QUIZ_SOLVED:
                raise StateTransitionError(session.stage.value, MissionStage.PRE_COMPLETE.value, "quiz not solved")
            self._transition(session, MissionStage.PRE_COMPLETE)

        fragment = mission.fragment_id if mission.awards_fragment and mission.fragment_id not in self.ledger.fragments else None
        return CompletionNotice(
            mission_id=mission.id,
            title=mission.title,
            kind=mission.kind,
            xp_reward=mission.xp_reward,
            fragment_id=fragment,
            repeatable=mission.kind == "side",
        )

    def acknowledge(self) -> CompletionResult:
        """Finalize the submitted mission exactly once."""
        session = self._require("acknowledge")
        mission = session.mission
        if session.stage is not MissionStage.PRE_COMPLETE:
            raise StateTransitionError(session.stage.value, MissionStage.COMPLETED.value, "mission not submitted")
        if session.finalized:
            raise StateTransitionError(session.stage.value, MissionStage.COMPLETED.value, "already finalized")
        session.finalized = True

        with logfire.span("mission.finalize", mission_id=mission.id, kind=mission.kind):
            result = self.ledger.finalize(mission)
            if mission.kind == "main":
                session.progress.quiz_solved = True
                self.store.save(mission.id, session.progress)
            else:
                self.store.clear(mission.id)
            self._transition(session, MissionStage.COMPLETED)
            self._active = None
        return result

    def acknowledge_and_continue(self) -> CompletionResult:
        """Finalize a side mission and immediately start a fresh attempt."""
        session = self._require("acknowledge_and_continue")
        if session.mission.kind != "side":
            raise StateTransitionError(session.stage.value, MissionStage.ENTERED.value, "only side missions repeat")
        mission_id = session.mission.id
        result = self.acknowledge()
        self.enter(mission_id)
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _require(self, action: str) -> MissionSession:
        if self._active is None:
            raise NoActiveMissionError(action)
        return self._active

    def _require_writable(self, action: str) -> MissionSession:
        session = self._require(action)
        if session.read_only:
            raise MissionReadOnlyError(session.mission.id)
        if session.stage is MissionStage.PRE_COMPLETE:
            raise StateTransitionError(session.stage.value, action, "awaiting acknowledgment")
        return session

    def _require_evidence_stage(self, action: str) -> MissionSession:
        session = self._require_writable(action)
        if not session.mission.requires_evidence:
            raise StateTransitionError(session.stage.value, action, "mission takes no photo evidence")
        if session.stage is not MissionStage.EVIDENCE_PENDING:
            raise StateTransitionError(session.stage.value, action, "quiz not solved")
        return session

    def _advance(self) -> None:
        session = self._active
        if session is None:
            return
        if session.read_only:
            self._transition(session, MissionStage.COMPLETED)
            return
        if session.stage not in _QUIZ_STAGES:
            return
        if not session.quiz_solved:
            target = MissionStage.QUIZ_ERROR if any(session.errors.values()) else MissionStage.QUIZ_PENDING
            self._transition(session, target)
            return
        session.progress.quiz_solved = True
        self._transition(session, MissionStage.QUIZ_SOLVED)
        if session.mission.requires_evidence:
            self._transition(session, MissionStage.EVIDENCE_PENDING)

    def _transition(self, session: MissionSession, stage: MissionStage) -> None:
        if session.stage is stage:
            return
        previous, session.stage = session.stage, stage
        logger.info(
            "mission {mission_id}: {previous} -> {stage}",
            mission_id=session.mission.id,
            previous=previous.value,
            stage=stage.value,
        )
