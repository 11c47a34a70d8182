"""FastAPI application exposing a game session to the map / HUD front-end.

Every route is a coroutine so requests are handled one at a time on the event
loop; the image-edit call is the only point where a request suspends.
"""
from __future__ import annotations

import base64
import binascii
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import logfire
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from ..adapters.gemini import GeminiImageEditor
from ..core.constants import DEFAULT_IMAGE_MIME_TYPE
from ..core.exceptions import (
    EditInProgressError,
    FieldLockedError,
    GeoQuestError,
    GeolocationError,
    MissionBusyError,
    MissionNotFoundError,
    MissionReadOnlyError,
    NoActiveMissionError,
    QuizError,
    StateTransitionError,
    classify_error,
)
from ..core.models import (
    CompletionNotice,
    CompletionResult,
    EditOutcome,
    HudView,
    MarkerView,
    MissionView,
)
from ..core.types import SampleStatus
from ..game import GameSession
from ..infra.config import load_settings

__all__ = ['create_app', 'PositionRequest', 'FieldsRequest', 'ImageRequest']

_STATUS_BY_ERROR: tuple[tuple[type[GeoQuestError], int], ...] = (
    (MissionNotFoundError, 404),
    (MissionBusyError, 409),
    (NoActiveMissionError, 409),
    (MissionReadOnlyError, 409),
    (FieldLockedError, 409),
    (StateTransitionError, 409),
    (EditInProgressError, 409),
    (QuizError, 422),
    (GeolocationError, 422),
)


class PositionRequest(BaseModel):
    """A fix from the device position stream."""

    lat: float
    lng: float
    accuracy_m: float | None = Field(default=None, ge=0)


class PositionErrorRequest(BaseModel):
    """A failure from the device position stream."""

    status: SampleStatus


class FogRequest(BaseModel):
    enabled: bool


class FieldsRequest(BaseModel):
    """Current values of one or more answer fields."""

    values: dict[str, str]


class VerifyRequest(BaseModel):
    check_id: str | None = None


class ImageRequest(BaseModel):
    """Base64 encoded photo evidence."""

    data: str = Field(..., min_length=1)
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE

    @field_validator('data')
    @classmethod
    def validate_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError('image data is not valid base64') from e
        return value

    def payload(self) -> bytes:
        return base64.b64decode(self.data)


class PromptRequest(BaseModel):
    prompt: str


class EditResponse(BaseModel):
    """Outcome of an image edit with the edited photo base64 encoded."""

    success: bool
    error: str | None = None
    discarded: bool = False
    edited_image: str | None = None

    @classmethod
    def from_outcome(cls, outcome: EditOutcome) -> EditResponse:
        edited = base64.b64encode(outcome.image.data).decode('ascii') if outcome.image is not None else None
        return cls(success=outcome.success, error=outcome.error, discarded=outcome.discarded, edited_image=edited)


def _status_for(exc: GeoQuestError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def create_app(session: GameSession | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an explicit session, one is built from ``GEOQUEST_*`` settings with
    the Gemini image editor attached.
    """
    owned_editor: GeminiImageEditor | None = None
    if session is None:
        owned_editor = GeminiImageEditor()
        session = GameSession.from_settings(load_settings(), image_editor=owned_editor)
    game = session

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if owned_editor is not None:
            await owned_editor.aclose()

    app = FastAPI(
        title='GeoQuest',
        description='Mission progression and geofencing engine for a location-based field game',
        version='0.1.0',
        lifespan=lifespan,
    )
    app.state.game = game

    app.add_middleware(
        CORSMiddleware,
        allow_origins=['*'],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.exception_handler(GeoQuestError)
    async def handle_geoquest_error(request: Request, exc: GeoQuestError) -> JSONResponse:
        _, recovery = classify_error(exc)
        logfire.info('request_rejected', path=request.url.path, error=exc.code, recovery=recovery, message=str(exc))
        return JSONResponse(
            status_code=_status_for(exc),
            content={'error': exc.code, 'message': str(exc), 'recovery': recovery},
        )

    @app.get('/health')
    async def health_check() -> dict[str, str]:
        return {'status': 'healthy'}

    # ------------------------------------------------------------------
    # Position and map
    # ------------------------------------------------------------------
    @app.post('/api/position')
    async def push_position(request: PositionRequest) -> dict[str, str]:
        game.push_position(request.lat, request.lng, request.accuracy_m)
        return {'gpsStatus': game.tick()}

    @app.post('/api/position/error')
    async def push_position_error(request: PositionErrorRequest) -> dict[str, str]:
        game.push_failure(request.status)
        return {'gpsStatus': game.tick()}

    @app.get('/api/map')
    async def get_map() -> dict[str, Any]:
        return {
            'gpsStatus': game.gps_status,
            'fogEnabled': game.proximity.fog_enabled,
            'markers': [marker.model_dump(mode='json') for marker in game.map_view()],
            'sideMissions': [mission.id for mission in game.side_missions()],
        }

    @app.post('/api/fog')
    async def set_fog(request: FogRequest) -> list[MarkerView]:
        game.set_fog(request.enabled)
        return game.map_view()

    @app.get('/api/hud')
    async def get_hud() -> HudView:
        return game.hud()

    # ------------------------------------------------------------------
    # Active mission
    # ------------------------------------------------------------------
    @app.post('/api/missions/{mission_id}/select')
    async def select_mission(mission_id: str) -> MissionView:
        return game.select_mission(mission_id)

    @app.get('/api/mission')
    async def get_mission() -> MissionView:
        return game.machine.view()

    @app.put('/api/mission/fields')
    async def update_fields(request: FieldsRequest) -> MissionView:
        game.machine.update_fields(request.values)
        return game.machine.view()

    @app.post('/api/mission/verify')
    async def verify(request: VerifyRequest) -> dict[str, Any]:
        correct = game.machine.verify(request.check_id)
        return {'correct': correct, 'mission': game.machine.view().model_dump(mode='json')}

    @app.post('/api/mission/image')
    async def attach_image(request: ImageRequest) -> MissionView:
        game.machine.attach_image(request.payload(), request.mime_type)
        return game.machine.view()

    @app.delete('/api/mission/image')
    async def remove_image() -> MissionView:
        game.machine.remove_image()
        return game.machine.view()

    @app.put('/api/mission/prompt')
    async def set_prompt(request: PromptRequest) -> MissionView:
        game.machine.set_prompt(request.prompt)
        return game.machine.view()

    @app.post('/api/mission/edit')
    async def edit_image() -> EditResponse:
        return EditResponse.from_outcome(await game.machine.edit_image())

    @app.post('/api/mission/error/dismiss')
    async def dismiss_error() -> MissionView:
        game.machine.dismiss_error()
        return game.machine.view()

    @app.post('/api/mission/submit')
    async def submit() -> CompletionNotice:
        return game.machine.submit()

    @app.post('/api/mission/acknowledge')
    async def acknowledge(next_photo: bool = False) -> CompletionResult:
        if next_photo:
            return game.machine.acknowledge_and_continue()
        return game.machine.acknowledge()

    @app.post('/api/mission/back')
    async def back() -> dict[str, str]:
        game.machine.back()
        return {'status': 'returned'}

    # ------------------------------------------------------------------
    # Tutorial
    # ------------------------------------------------------------------
    @app.get('/api/tutorial')
    async def get_tutorial() -> dict[str, bool]:
        return {'show': game.should_show_tutorial()}

    @app.post('/api/tutorial/dismiss')
    async def dismiss_tutorial() -> dict[str, bool]:
        game.dismiss_tutorial()
        return {'show': False}

    return app
