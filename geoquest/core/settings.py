"""Base settings configuration.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from pathlib import Path

# Third-party (alphabetical)
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Local imports (core first, then alphabetical)
from .constants import DEFAULT_MAX_ACCURACY_M, DEFAULT_REVEAL_RADIUS_M, DEFAULT_SAMPLE_BUFFER_SIZE

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("GeoQuestSettings",)


# =============================================================================
# Section 11: Classes
# =============================================================================
class GeoQuestSettings(BaseSettings):
    """Engine settings read from ``GEOQUEST_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GEOQUEST_",
        env_file=".env",
        extra="ignore",
        validate_default=True,
    )

    environment: str = Field(default="development")
    reveal_radius_m: float = Field(default=DEFAULT_REVEAL_RADIUS_M, gt=0.0)
    max_accuracy_m: float = Field(default=DEFAULT_MAX_ACCURACY_M, gt=0.0)
    sample_buffer_size: int = Field(default=DEFAULT_SAMPLE_BUFFER_SIZE, ge=1)
    flag_path: Path = Field(default=Path("~/.geoquest/flags.json"))
