"""Gemini image-edit adapter.

Sends the player's photo plus a free-text instruction to the Gemini
``generateContent`` endpoint and returns the first inline image of the reply.
"""
from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx
import logfire
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.constants import (
    DEFAULT_GEMINI_BASE_URL,
    DEFAULT_IMAGE_MIME_TYPE,
    DEFAULT_IMAGE_MODEL,
    IMAGE_EDIT_TIMEOUT_SECONDS,
)
from ..core.exceptions import ImageEditError

__all__ = ['GeminiImageEditor', 'GeminiSettings']


class GeminiSettings(BaseSettings):
    """Configuration for the Gemini adapter, read from ``GEOQUEST_GEMINI_*``."""

    model_config = SettingsConfigDict(
        env_prefix='GEOQUEST_GEMINI_',
        env_file='.env',
        extra='ignore',
    )

    api_key: SecretStr | None = Field(default=None)
    model: str = DEFAULT_IMAGE_MODEL
    base_url: str = DEFAULT_GEMINI_BASE_URL
    timeout: float = Field(default=IMAGE_EDIT_TIMEOUT_SECONDS, gt=0)


class GeminiImageEditor:
    """Image-edit collaborator backed by Gemini.

    Implements the ``ImageEditor`` protocol. There is no retry policy here:
    every failure is reported once as an ``ImageEditError`` with a message
    the player can read, and the game decides what to do next.

    Example:
        >>> settings = GeminiSettings(api_key='...')
        >>> async with GeminiImageEditor(settings) as editor:
        ...     edited = await editor.edit(photo, 'highlight drainage holes in red')
    """

    def __init__(self, settings: GeminiSettings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings or GeminiSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
        )

    async def __aenter__(self) -> GeminiImageEditor:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def edit(self, image: bytes, prompt: str, mime_type: str = DEFAULT_IMAGE_MIME_TYPE) -> bytes:
        """Return the edited image for ``image`` and ``prompt``."""
        api_key = self.settings.api_key
        if api_key is None:
            raise ImageEditError('Image editing is not configured (missing API key)')

        payload = {
            'contents': [
                {
                    'parts': [
                        {'inlineData': {'mimeType': mime_type, 'data': base64.b64encode(image).decode('ascii')}},
                        {'text': prompt},
                    ],
                },
            ],
        }

        with logfire.span('gemini.edit_image', model=self.settings.model, image_bytes=len(image)):
            try:
                response = await self._client.post(
                    f'/models/{self.settings.model}:generateContent',
                    params={'key': api_key.get_secret_value()},
                    json=payload,
                )
            except httpx.TimeoutException as e:
                raise ImageEditError('Image edit timed out. Please try again.') from e
            except httpx.HTTPError as e:
                raise ImageEditError(f'Image edit request failed: {e}') from e

            if response.status_code != 200:
                raise ImageEditError(self._error_message(response), status_code=response.status_code)

            try:
                return self._extract_image(response.json())
            except (ValueError, AttributeError, TypeError) as e:
                raise ImageEditError('Image edit returned an unreadable response') from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f'Image edit failed with HTTP {response.status_code}'
        error = body.get('error') if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
        return f'Image edit failed with HTTP {response.status_code}'

    @staticmethod
    def _extract_image(body: dict[str, Any]) -> bytes:
        candidates = body.get('candidates') or []
        if candidates:
            parts = (candidates[0].get('content') or {}).get('parts') or []
            for part in parts:
                inline = part.get('inlineData') or part.get('inline_data')
                if inline and inline.get('data'):
                    try:
                        return base64.b64decode(inline['data'], validate=True)
                    except (binascii.Error, ValueError) as e:
                        raise ImageEditError('Image edit returned corrupt image data') from e
        raise ImageEditError('No image generated in response. The model might have returned only text.')
