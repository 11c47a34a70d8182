"""Image-edit collaborator implementations."""
from __future__ import annotations

from .gemini import GeminiImageEditor, GeminiSettings

__all__ = [
    'GeminiImageEditor',
    'GeminiSettings',
]
