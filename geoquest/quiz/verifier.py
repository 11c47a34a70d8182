"""Quiz answer verification.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
import re
from typing import TYPE_CHECKING

# Third-party (alphabetical)
import logfire

# Local imports (core first, then alphabetical)
from ..core.exceptions import MissionNotFoundError, QuizCheckNotFoundError
from ..core.models import ChoicePairCheck, FreeTextCheck, KeywordCheck, NumericRangeCheck

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..core.models import Mission, QuizCheck
    from ..core.types import CheckId, MissionId

__all__ = ("QuizVerifier", "check_passes", "parse_measurement")

_NON_DIGITS = re.compile(r"[^0-9]")


def parse_measurement(value: str) -> int | None:
    """Strip every non-digit character and parse what remains.

    ``"138m"`` gives 138, ``"約 1,410"`` gives 1410, ``"abc"`` gives None.
    """
    digits = _NON_DIGITS.sub("", value)
    if not digits:
        return None
    return int(digits)


def _free_text(check: FreeTextCheck, fields: Mapping[str, str]) -> bool:
    submitted = fields.get(check.field, "").strip()
    if not submitted:
        return False
    if submitted == check.expected or check.expected in submitted:
        return True
    return any(phrase in submitted for phrase in check.alternates)


def _choice_pair(check: ChoicePairCheck, fields: Mapping[str, str]) -> bool:
    first = fields.get(check.first_field, "")
    second = fields.get(check.second_field, "")
    if first not in check.first_options or second not in check.second_options:
        return False
    return (first, second) in check.accepted


def _numeric_range(check: NumericRangeCheck, fields: Mapping[str, str]) -> bool:
    for name, (low, high) in check.bands.items():
        value = parse_measurement(fields.get(name, ""))
        if value is None or not low <= value <= high:
            return False
    return True


def _keywords(check: KeywordCheck, fields: Mapping[str, str]) -> bool:
    text = fields.get(check.field, "").strip()
    return all(any(keyword in text for keyword in group) for group in check.groups)


def check_passes(check: QuizCheck, fields: Mapping[str, str]) -> bool:
    """Evaluate one check descriptor against submitted field values."""
    match check:
        case FreeTextCheck():
            return _free_text(check, fields)
        case ChoicePairCheck():
            return _choice_pair(check, fields)
        case NumericRangeCheck():
            return _numeric_range(check, fields)
        case KeywordCheck():
            return _keywords(check, fields)
    raise TypeError(f"unsupported quiz check: {type(check).__name__}")


class QuizVerifier:
    """Stateless verifier over the loaded mission catalogue.

    Every comparison rule lives in the mission's quiz descriptor, so the
    verifier never branches on mission identity.
    """

    def __init__(self, missions: Iterable[Mission]) -> None:
        self._missions: dict[MissionId, Mission] = {m.id: m for m in missions}

    def _mission(self, mission_id: MissionId) -> Mission:
        try:
            return self._missions[mission_id]
        except KeyError:
            raise MissionNotFoundError(mission_id) from None

    def verify(self, mission_id: MissionId, fields: Mapping[str, str]) -> bool:
        """True when every check of the mission's quiz passes."""
        mission = self._mission(mission_id)
        if mission.quiz is None:
            return True
        with logfire.span("quiz.verify", mission_id=mission_id) as span:
            result = all(check_passes(check, fields) for check in mission.quiz.checks)
            span.set_attribute("correct", result)
            return result

    def verify_check(self, mission_id: MissionId, check_id: CheckId, fields: Mapping[str, str]) -> bool:
        """Evaluate a single sub-check of the mission's quiz."""
        mission = self._mission(mission_id)
        check = mission.quiz.check(check_id) if mission.quiz is not None else None
        if check is None:
            raise QuizCheckNotFoundError(mission_id, check_id)
        with logfire.span("quiz.verify_check", mission_id=mission_id, check_id=check_id) as span:
            result = check_passes(check, fields)
            span.set_attribute("correct", result)
            return result
