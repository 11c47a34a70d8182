"""Exception hierarchy for the GeoQuest engine.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .types import ErrorCategory, RecoveryStrategy

__all__ = (
    'GeoQuestError',
    'MissionError',
    'MissionNotFoundError',
    'MissionBusyError',
    'NoActiveMissionError',
    'MissionReadOnlyError',
    'FieldLockedError',
    'StateTransitionError',
    'QuizError',
    'QuizCheckNotFoundError',
    'UnknownFieldError',
    'EvidenceError',
    'EditInProgressError',
    'ImageEditError',
    'GeolocationError',
    'InvalidSampleError',
    'classify_error',
)


class GeoQuestError(Exception):
    """Base exception for all GeoQuest errors.

    Every failure inside the engine returns control to the player.

    Attributes:
        context: Additional context for debugging.
    """

    code: str = 'geoquest_error'

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        self.context = context or {}
        super().__init__(message)


# =============================================================================
# Mission Exceptions
# =============================================================================
class MissionError(GeoQuestError):
    """Base exception for mission lifecycle errors."""

    code = 'mission_error'


class MissionNotFoundError(MissionError):
    """Raised when a mission id is not part of the loaded content."""

    code = 'mission_not_found'

    def __init__(self, mission_id: str) -> None:
        self.mission_id = mission_id
        super().__init__(f'Mission not found: {mission_id}', context={'mission_id': mission_id})


class MissionBusyError(MissionError):
    """Raised when entering a mission while another one is in progress."""

    code = 'mission_busy'

    def __init__(self, requested_id: str, active_id: str) -> None:
        self.requested_id = requested_id
        self.active_id = active_id
        super().__init__(
            f'Cannot enter {requested_id}: mission {active_id} is in progress',
            context={'requested_id': requested_id, 'active_id': active_id},
        )


class NoActiveMissionError(MissionError):
    """Raised when a mission action arrives with no mission entered."""

    code = 'no_active_mission'

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f'No active mission for action: {action}', context={'action': action})


class MissionReadOnlyError(MissionError):
    """Raised when editing a mission that has already been completed."""

    code = 'mission_read_only'

    def __init__(self, mission_id: str) -> None:
        self.mission_id = mission_id
        super().__init__(f'Mission {mission_id} is completed and read-only', context={'mission_id': mission_id})


class FieldLockedError(MissionError):
    """Raised when editing an answer field whose check has been solved."""

    code = 'field_locked'

    def __init__(self, mission_id: str, field: str) -> None:
        self.mission_id = mission_id
        self.field = field
        super().__init__(
            f'Field {field} of mission {mission_id} is already solved',
            context={'mission_id': mission_id, 'field': field},
        )


class StateTransitionError(MissionError):
    """Raised when a mission transition is not allowed from the current stage."""

    code = 'invalid_transition'

    def __init__(self, from_state: str, to_state: str, reason: str) -> None:
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason
        super().__init__(
            f'Invalid transition from {from_state} to {to_state}: {reason}',
            context={'from_state': from_state, 'to_state': to_state, 'reason': reason},
        )


# =============================================================================
# Quiz Exceptions
# =============================================================================
class QuizError(GeoQuestError):
    """Base exception for quiz descriptor errors."""

    code = 'quiz_error'


class QuizCheckNotFoundError(QuizError):
    """Raised when a check id does not exist in the mission's quiz."""

    code = 'quiz_check_not_found'

    def __init__(self, mission_id: str, check_id: str) -> None:
        self.mission_id = mission_id
        self.check_id = check_id
        super().__init__(
            f'Mission {mission_id} has no quiz check {check_id}',
            context={'mission_id': mission_id, 'check_id': check_id},
        )


class UnknownFieldError(QuizError):
    """Raised when an answer field is not read by any check of the quiz."""

    code = 'unknown_field'

    def __init__(self, mission_id: str, field: str) -> None:
        self.mission_id = mission_id
        self.field = field
        super().__init__(f'Mission {mission_id} has no answer field {field}', context={'mission_id': mission_id, 'field': field})


# =============================================================================
# Evidence Exceptions
# =============================================================================
class EvidenceError(GeoQuestError):
    """Base exception for photo evidence errors."""

    code = 'evidence_error'


class EditInProgressError(EvidenceError):
    """Raised when an image edit is requested while one is outstanding."""

    code = 'edit_in_progress'

    def __init__(self, mission_id: str) -> None:
        self.mission_id = mission_id
        super().__init__(f'Image edit already running for {mission_id}', context={'mission_id': mission_id})


class ImageEditError(EvidenceError):
    """Raised by image-edit collaborators when the remote edit fails.

    Attributes:
        status_code: HTTP status from the remote service, when there was one.
    """

    code = 'image_edit_failed'

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, context={'status_code': status_code})


# =============================================================================
# Geolocation Exceptions
# =============================================================================
class GeolocationError(GeoQuestError):
    """Base exception for position sample errors."""

    code = 'geolocation_error'


class InvalidSampleError(GeolocationError):
    """Raised when a position sample is internally inconsistent."""

    code = 'invalid_sample'

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f'Invalid position sample: {reason}', context={'reason': reason})


def classify_error(exc: Exception) -> tuple[ErrorCategory, RecoveryStrategy]:
    """Classify errors into recovery categories and strategies.

    ``dismiss`` clears an inline message, ``retry`` repeats the action once the
    input is fixed, and ``abort`` sends the player back to the map.
    """
    if isinstance(exc, ImageEditError):
        return 'recoverable', 'dismiss'
    if isinstance(exc, (MissionNotFoundError, NoActiveMissionError)):
        return 'recoverable', 'abort'
    if isinstance(exc, GeoQuestError):
        return 'recoverable', 'retry'
    if isinstance(exc, (TimeoutError, ConnectionError)):
        return 'transient', 'retry'
    return 'fatal', 'abort'
