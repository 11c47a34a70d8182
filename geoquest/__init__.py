"""GeoQuest package initialization.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Local imports (core first, then alphabetical)
from ._version import __version__
from .content import load_missions
from .game import GameSession
from .mission.ledger import ProgressionLedger
from .mission.machine import MissionStateMachine

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "__version__",
    "GameSession",
    "MissionStateMachine",
    "ProgressionLedger",
    "load_missions",
)
