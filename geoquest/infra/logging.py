"""Centralized logging utilities.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Third-party (alphabetical)
import logfire

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("get_logger",)

SERVICE_TAG = "geoquest"


# =============================================================================
# Section 12: Functions
# =============================================================================
def get_logger(component: str, **tags: str) -> logfire.Logfire:
    """Return a logger tagged with the service, its component and any extra tags.

    Extra tags are rendered as ``key:value`` so related components can be
    filtered together, e.g. ``get_logger("geo.fog", stream="position")``.
    """
    extra = [f"{key}:{value}" for key, value in sorted(tags.items())]
    return logfire.with_settings(tags=[SERVICE_TAG, f"component:{component}", *extra])
