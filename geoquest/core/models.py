"""Core domain models for GeoQuest.

These models represent the entities of the field game: mission definitions,
their quiz descriptors, per-mission progress, player statistics and the
read-only views handed to the map and HUD collaborators.

Definitions (missions, quizzes, samples, views) are frozen. Progress and
player statistics are mutable but validate on assignment.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from .constants import INITIAL_MANA, INITIAL_SOS_COUNT, MAX_MANA, RANK_TITLES, XP_PER_LEVEL
from .types import CheckId, Difficulty, FieldName, FragmentId, GpsStatus, MissionId, MissionKind, SampleStatus

__all__ = [
    # Enums
    'MissionStage',
    # Geo models
    'Coordinate',
    'PositionSample',
    # Quiz models
    'FreeTextCheck',
    'ChoicePairCheck',
    'NumericRangeCheck',
    'KeywordCheck',
    'QuizCheck',
    'Quiz',
    # Mission models
    'Mission',
    'EvidenceImage',
    'MissionProgress',
    # Progression models
    'PlayerStats',
    'CompletionNotice',
    'CompletionResult',
    'EditOutcome',
    # Views
    'MarkerView',
    'HudView',
    'MissionView',
    # Helpers
    'level_for_xp',
    'rank_for_level',
]


# =============================================================================
# Enumerations
# =============================================================================
class MissionStage(str, Enum):
    """Lifecycle stage of a single mission."""

    LOCKED = 'locked'
    ENTERED = 'entered'
    QUIZ_PENDING = 'quiz_pending'
    QUIZ_ERROR = 'quiz_error'
    QUIZ_SOLVED = 'quiz_solved'
    EVIDENCE_PENDING = 'evidence_pending'
    PRE_COMPLETE = 'pre_complete'
    COMPLETED = 'completed'


# =============================================================================
# Helpers
# =============================================================================
def level_for_xp(xp: int) -> int:
    """Level is always derived from total XP."""
    return xp // XP_PER_LEVEL + 1


def rank_for_level(level: int) -> str:
    """Look up the rank title for a level."""
    tier = min(max(level, 1), len(RANK_TITLES)) - 1
    return RANK_TITLES[tier]


# =============================================================================
# Geo Models
# =============================================================================
class Coordinate(BaseModel):
    """A WGS84 position in floating point degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description='Latitude in degrees')
    lng: float = Field(..., ge=-180.0, le=180.0, description='Longitude in degrees')


class PositionSample(BaseModel):
    """One reading from the geolocation stream.

    Failed readings carry no coordinate; successful ones always do.
    """

    model_config = ConfigDict(frozen=True)

    status: SampleStatus = Field(default='ok', description='Sensor status for this reading')
    coordinate: Coordinate | None = Field(default=None, description='Reported position')
    accuracy_m: float | None = Field(default=None, ge=0.0, description='Reported accuracy radius in meters')
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode='after')
    def validate_coordinate_presence(self) -> Self:
        """Ensure ok samples carry a coordinate."""
        if self.status == 'ok' and self.coordinate is None:
            raise ValueError('ok samples require a coordinate')
        return self

    @property
    def is_failure(self) -> bool:
        return self.status != 'ok'


# =============================================================================
# Quiz Models
# =============================================================================
class FreeTextCheck(BaseModel):
    """Free-text answer accepted by equality, containment or a whitelisted phrase."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['free_text'] = 'free_text'
    id: CheckId = Field(default='answer', min_length=1)
    field: FieldName = Field(default='answer', min_length=1)
    expected: str = Field(..., min_length=1, description='Canonical answer')
    alternates: tuple[str, ...] = Field(default=(), description='Extra phrases accepted for this mission only')

    def field_names(self) -> tuple[FieldName, ...]:
        return (self.field,)


class ChoicePairCheck(BaseModel):
    """Two dropdown selections matched against an enumerated set of pairs."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['choice_pair'] = 'choice_pair'
    id: CheckId = Field(default='choice', min_length=1)
    first_field: FieldName = Field(default='first', min_length=1)
    second_field: FieldName = Field(default='second', min_length=1)
    first_options: tuple[str, ...] = Field(..., min_length=1)
    second_options: tuple[str, ...] = Field(..., min_length=1)
    accepted: tuple[tuple[str, str], ...] = Field(..., min_length=1)

    @model_validator(mode='after')
    def validate_accepted_pairs(self) -> Self:
        """Every accepted pair must be selectable."""
        for first, second in self.accepted:
            if first not in self.first_options or second not in self.second_options:
                raise ValueError(f'accepted pair ({first}, {second}) is not within the option sets')
        return self

    def field_names(self) -> tuple[FieldName, ...]:
        return (self.first_field, self.second_field)


class NumericRangeCheck(BaseModel):
    """Several numeric fields, each required to fall inside its own band."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['numeric_range'] = 'numeric_range'
    id: CheckId = Field(default='measurements', min_length=1)
    bands: dict[FieldName, tuple[int, int]] = Field(..., min_length=1)

    @field_validator('bands')
    @classmethod
    def validate_bands(cls, v: dict[FieldName, tuple[int, int]]) -> dict[FieldName, tuple[int, int]]:
        for name, (low, high) in v.items():
            if low > high:
                raise ValueError(f'band for {name} is empty: [{low}, {high}]')
        return v

    def field_names(self) -> tuple[FieldName, ...]:
        return tuple(self.bands)


class KeywordCheck(BaseModel):
    """Free-text reasoning that must mention one keyword from every group."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['keywords'] = 'keywords'
    id: CheckId = Field(default='reasoning', min_length=1)
    field: FieldName = Field(default='reason', min_length=1)
    groups: tuple[tuple[str, ...], ...] = Field(..., min_length=1)

    def field_names(self) -> tuple[FieldName, ...]:
        return (self.field,)


QuizCheck = Annotated[
    FreeTextCheck | ChoicePairCheck | NumericRangeCheck | KeywordCheck,
    Field(discriminator='kind'),
]


class Quiz(BaseModel):
    """Question text plus the independent checks that must all pass."""

    model_config = ConfigDict(frozen=True)

    question: str = Field(..., min_length=1)
    checks: tuple[QuizCheck, ...] = Field(..., min_length=1)

    @model_validator(mode='after')
    def validate_unique_ids(self) -> Self:
        """Ensure check ids and field names do not collide."""
        ids = [check.id for check in self.checks]
        if len(ids) != len(set(ids)):
            raise ValueError(f'duplicate quiz check ids: {ids}')
        names = [name for check in self.checks for name in check.field_names()]
        if len(names) != len(set(names)):
            raise ValueError(f'quiz checks share answer fields: {names}')
        return self

    @property
    def check_ids(self) -> tuple[CheckId, ...]:
        return tuple(check.id for check in self.checks)

    def check(self, check_id: CheckId) -> QuizCheck | None:
        for check in self.checks:
            if check.id == check_id:
                return check
        return None

    def check_for_field(self, field: FieldName) -> QuizCheck | None:
        for check in self.checks:
            if field in check.field_names():
                return check
        return None


# =============================================================================
# Mission Models
# =============================================================================
class Mission(BaseModel):
    """Immutable mission definition loaded at process start."""

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
    )

    id: MissionId = Field(..., min_length=1, max_length=64, description='Unique mission identifier')
    title: str = Field(..., min_length=1)
    description: str = Field(default='')
    target: Coordinate | None = Field(default=None, description='Marker position; None for location-agnostic missions')
    difficulty: Difficulty = Field(default='Novice')
    xp_reward: int = Field(..., gt=0, description='XP awarded on finalization')
    rank_requirement: str = Field(default='')
    fragment_id: FragmentId | None = Field(default=None, ge=0, description='Map fragment, None for no fragment')
    kind: MissionKind = Field(default='main')
    quiz: Quiz | None = Field(default=None)
    evidence_instruction: str | None = Field(default=None)
    prompt_hint: str = Field(default='', description='Default prompt for the image-edit step')

    @property
    def requires_evidence(self) -> bool:
        return self.evidence_instruction is not None

    @property
    def awards_fragment(self) -> bool:
        return self.kind == 'main' and self.fragment_id is not None


class EvidenceImage(BaseModel):
    """Opaque image payload with its mime type."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., min_length=1, repr=False)
    mime_type: str = Field(default='image/jpeg', pattern=r'^image/[a-z0-9.+-]+$')


class MissionProgress(BaseModel):
    """In-flight answers and solved flags of one mission."""

    model_config = ConfigDict(validate_assignment=True)

    answers: dict[FieldName, str] = Field(default_factory=dict)
    solved: dict[CheckId, bool] = Field(default_factory=dict)
    quiz_solved: bool = Field(default=False)
    image: EvidenceImage | None = Field(default=None)
    edited_image: EvidenceImage | None = Field(default=None)
    prompt: str | None = Field(default=None)

    @property
    def is_empty(self) -> bool:
        return (
            not self.answers
            and not any(self.solved.values())
            and not self.quiz_solved
            and self.image is None
            and self.edited_image is None
            and self.prompt is None
        )

    def is_solved(self, check_id: CheckId) -> bool:
        return self.solved.get(check_id, False)


# =============================================================================
# Progression Models
# =============================================================================
class PlayerStats(BaseModel):
    """Global player progression.

    Only XP, mana and SOS count are stored. Level, rank and the next level
    threshold are computed from XP so they can never drift.
    """

    model_config = ConfigDict(validate_assignment=True)

    current_xp: int = Field(default=0, ge=0)
    mana: int = Field(default=INITIAL_MANA, ge=0, le=MAX_MANA)
    max_mana: int = Field(default=MAX_MANA, ge=0)
    sos_count: int = Field(default=INITIAL_SOS_COUNT, ge=0)

    @computed_field
    @property
    def level(self) -> int:
        return level_for_xp(self.current_xp)

    @computed_field
    @property
    def next_level_xp(self) -> int:
        return self.level * XP_PER_LEVEL

    @computed_field
    @property
    def rank(self) -> str:
        return rank_for_level(self.level)


class CompletionNotice(BaseModel):
    """Acknowledgment shown after the player submits a mission."""

    model_config = ConfigDict(frozen=True)

    mission_id: MissionId
    title: str
    kind: MissionKind
    xp_reward: int
    fragment_id: FragmentId | None = None
    repeatable: bool = False


class CompletionResult(BaseModel):
    """Effects applied by one finalization."""

    model_config = ConfigDict(frozen=True)

    mission_id: MissionId
    kind: MissionKind
    xp_awarded: int = Field(default=0, ge=0)
    mana_spent: int = Field(default=0, ge=0)
    fragment_collected: FragmentId | None = None
    newly_completed: bool = False
    level: int = Field(..., ge=1)
    rank: str


class EditOutcome(BaseModel):
    """Result of one image-edit attempt as seen by the player."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    discarded: bool = Field(default=False, description='Result arrived after the player left the mission')
    image: EvidenceImage | None = Field(default=None, repr=False)


# =============================================================================
# Views
# =============================================================================
class MarkerView(BaseModel):
    """Per-mission projection consumed by the map renderer."""

    model_config = ConfigDict(frozen=True)

    mission_id: MissionId
    title: str
    kind: MissionKind
    difficulty: Difficulty
    target: Coordinate | None = None
    visible: bool
    locked: bool
    completed: bool
    active: bool = False
    distance_m: float | None = None


class HudView(BaseModel):
    """Progression summary consumed by the HUD."""

    model_config = ConfigDict(frozen=True)

    level: int
    current_xp: int
    xp_into_level: int
    xp_to_next_level: int
    next_level_xp: int
    rank: str
    mana: int
    max_mana: int
    sos_count: int
    fragments_collected: int
    fragments_total: int
    gps_status: GpsStatus = 'searching'


class MissionView(BaseModel):
    """Read-only projection of the active mission for the mission screen."""

    model_config = ConfigDict(frozen=True)

    mission_id: MissionId
    title: str
    description: str
    kind: MissionKind
    stage: MissionStage
    question: str | None = None
    check_ids: tuple[CheckId, ...] = ()
    answers: dict[FieldName, str] = Field(default_factory=dict)
    solved: dict[CheckId, bool] = Field(default_factory=dict)
    errors: dict[CheckId, bool] = Field(default_factory=dict)
    locked_fields: tuple[FieldName, ...] = ()
    quiz_solved: bool = False
    evidence_instruction: str | None = None
    has_image: bool = False
    has_edited_image: bool = False
    prompt: str | None = None
    edit_pending: bool = False
    evidence_error: str | None = None
    read_only: bool = False
