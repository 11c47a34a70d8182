"""Type aliases for GeoQuest.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from typing import Literal

# Third-party (alphabetical)
from typing_extensions import TypeAliasType

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "MissionId",
    "CheckId",
    "FieldName",
    "FragmentId",
    "MissionKind",
    "Difficulty",
    "GpsStatus",
    "SampleStatus",
    "ErrorCategory",
    "RecoveryStrategy",
)

# =============================================================================
# Section 3: Type Aliases
# =============================================================================
MissionId = TypeAliasType("MissionId", str)
CheckId = TypeAliasType("CheckId", str)
FieldName = TypeAliasType("FieldName", str)
FragmentId = TypeAliasType("FragmentId", int)

MissionKind = TypeAliasType("MissionKind", Literal["main", "side"])
Difficulty = TypeAliasType("Difficulty", Literal["Novice", "Geologist", "Expert"])
GpsStatus = TypeAliasType("GpsStatus", Literal["searching", "locked", "error"])
SampleStatus = TypeAliasType(
    "SampleStatus",
    Literal["ok", "denied", "timeout", "unavailable"],
)
ErrorCategory = TypeAliasType(
    "ErrorCategory",
    Literal["transient", "recoverable", "fatal"],
)
RecoveryStrategy = TypeAliasType(
    "RecoveryStrategy",
    Literal["retry", "dismiss", "abort"],
)
