"""Quiz answer verification."""
from __future__ import annotations

from .verifier import QuizVerifier, check_passes, parse_measurement

__all__ = ['QuizVerifier', 'check_passes', 'parse_measurement']
