"""Infrastructure concerns for GeoQuest.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Local imports (core first, then alphabetical)
from .config import load_settings
from .flags import JsonFlagStore, MemoryFlagStore
from .instrumentation import configure_instrumentation, get_logger, traced

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "load_settings",
    "configure_instrumentation",
    "get_logger",
    "traced",
    "JsonFlagStore",
    "MemoryFlagStore",
)
