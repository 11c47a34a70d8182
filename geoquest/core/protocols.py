"""Protocol definitions for external collaborators.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable

__all__ = ("ImageEditor", "FlagStore")


@runtime_checkable
class ImageEditor(Protocol):
    """Protocol for the generative image-edit collaborator.

    The engine treats the editor as a plain call/response: it issues at most
    one call per evidence attempt and never retries on its own.

    Example Implementation:
        >>> class EchoEditor:
        ...     async def edit(self, image: bytes, prompt: str, mime_type: str = 'image/jpeg') -> bytes:
        ...         return image
    """

    @abstractmethod
    async def edit(self, image: bytes, prompt: str, mime_type: str = "image/jpeg") -> bytes:
        """Edit an image according to a free-text prompt.

        Args:
            image: Raw image payload.
            prompt: Free-text edit instruction.
            mime_type: Mime type of ``image``.

        Returns:
            The edited image payload.

        Raises:
            ImageEditError: If the remote edit fails, with a readable message.
        """
        ...


@runtime_checkable
class FlagStore(Protocol):
    """Protocol for the small set of booleans that outlive a session."""

    @abstractmethod
    def get(self, name: str) -> bool:
        """Return the flag value, False when it was never written."""
        ...

    @abstractmethod
    def set(self, name: str, value: bool = True) -> None:
        """Persist a flag value."""
        ...
