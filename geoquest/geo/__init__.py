"""Position sampling and fog-of-war."""
from __future__ import annotations

from .fog import ProximityEngine, distance_m
from .sampler import GeolocationSampler

__all__ = ['GeolocationSampler', 'ProximityEngine', 'distance_m']
