"""Module-level constants for GeoQuest.

All constants are declared with Final type annotation for immutability
and IDE support.
"""
from __future__ import annotations

from typing import Final

# =============================================================================
# Section 1: Module Exports
# =============================================================================
__all__ = [
    # Progression
    'XP_PER_LEVEL',
    'FIELD_XP_BONUS',
    'MISSION_MANA_COST',
    'MAX_MANA',
    'INITIAL_MANA',
    'INITIAL_SOS_COUNT',
    'RANK_TITLES',
    # Geofencing
    'EARTH_RADIUS_M',
    'DEFAULT_REVEAL_RADIUS_M',
    'DEFAULT_MAX_ACCURACY_M',
    'DEFAULT_SAMPLE_BUFFER_SIZE',
    # Image editing
    'DEFAULT_IMAGE_MODEL',
    'DEFAULT_GEMINI_BASE_URL',
    'DEFAULT_IMAGE_MIME_TYPE',
    'IMAGE_EDIT_TIMEOUT_SECONDS',
    # Flags
    'TUTORIAL_FLAG',
]

# =============================================================================
# Section 2: Progression Constants
# =============================================================================
XP_PER_LEVEL: Final[int] = 500
FIELD_XP_BONUS: Final[int] = 100
MISSION_MANA_COST: Final[int] = 15
MAX_MANA: Final[int] = 100
INITIAL_MANA: Final[int] = 75
INITIAL_SOS_COUNT: Final[int] = 1

# Index is the rank tier: level 1 -> 0, 2 -> 1, 3 -> 2, >= 4 -> 3
RANK_TITLES: Final[tuple[str, ...]] = (
    '小小地質學家',
    '地形線索搜查員',
    '地質現象調查員',
    '永春大地守護者',
)

# =============================================================================
# Section 3: Geofencing Constants
# =============================================================================
EARTH_RADIUS_M: Final[float] = 6_371_000.0
DEFAULT_REVEAL_RADIUS_M: Final[float] = 75.0
DEFAULT_MAX_ACCURACY_M: Final[float] = 100.0
DEFAULT_SAMPLE_BUFFER_SIZE: Final[int] = 64

# =============================================================================
# Section 4: Image Editing Constants
# =============================================================================
DEFAULT_IMAGE_MODEL: Final[str] = 'gemini-2.5-flash-image'
DEFAULT_GEMINI_BASE_URL: Final[str] = 'https://generativelanguage.googleapis.com/v1beta'
DEFAULT_IMAGE_MIME_TYPE: Final[str] = 'image/jpeg'
IMAGE_EDIT_TIMEOUT_SECONDS: Final[float] = 60.0

# =============================================================================
# Section 5: Flag Constants
# =============================================================================
TUTORIAL_FLAG: Final[str] = 'tutorial_seen'
