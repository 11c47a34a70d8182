"""Mission lifecycle components.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Local imports (core first, then alphabetical)
from .ledger import ProgressionLedger
from .machine import MissionStateMachine
from .state import MissionSession
from .store import SessionStore

__all__ = (
    "MissionSession",
    "MissionStateMachine",
    "ProgressionLedger",
    "SessionStore",
)
