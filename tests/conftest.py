"""Shared test fixtures and helpers for GeoQuest tests.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

import os
from typing import TYPE_CHECKING, Any

import pytest

from geoquest.content import load_missions
from geoquest.core.exceptions import ImageEditError
from geoquest.core.models import (
    ChoicePairCheck,
    Coordinate,
    FreeTextCheck,
    Mission,
    Quiz,
)
from geoquest.infra.flags import MemoryFlagStore
from geoquest.mission.ledger import ProgressionLedger
from geoquest.mission.machine import MissionStateMachine
from geoquest.mission.store import SessionStore

if TYPE_CHECKING:
    from collections.abc import Iterator


__all__ = (
    "TestEnv",
    "FakeImageEditor",
    "BASE",
)

BASE = Coordinate(lat=25.0300, lng=121.5800)
"""Reference point used by synthetic missions."""


class TestEnv:
    """Helper for managing environment variables in tests."""

    __test__ = False  # Prevent pytest from collecting this class

    def __init__(self) -> None:
        self.envars: dict[str, str | None] = {}

    def set(self, name: str, value: str) -> None:
        """Set an environment variable, saving the original value."""
        self.envars[name] = os.getenv(name)
        os.environ[name] = value

    def remove(self, name: str) -> None:
        """Remove an environment variable, saving the original value."""
        self.envars[name] = os.environ.pop(name, None)

    def reset(self) -> None:
        """Reset all modified environment variables to original values."""
        for name, value in self.envars.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value


class FakeImageEditor:
    """Image editor double that records calls and returns canned output."""

    def __init__(self, result: bytes = b"edited", error: str | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[bytes, str, str]] = []
        self.before_return: Any = None

    async def edit(self, image: bytes, prompt: str, mime_type: str = "image/jpeg") -> bytes:
        self.calls.append((image, prompt, mime_type))
        if self.before_return is not None:
            self.before_return()
        if self.error is not None:
            raise ImageEditError(self.error)
        return self.result


@pytest.fixture
def env() -> Iterator[TestEnv]:
    """Fixture for managing environment variables in tests."""
    test_env = TestEnv()
    yield test_env
    test_env.reset()


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def missions() -> tuple[Mission, ...]:
    """The reference mission content."""
    return load_missions()


@pytest.fixture
def ledger() -> ProgressionLedger:
    return ProgressionLedger()


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def image_editor() -> FakeImageEditor:
    return FakeImageEditor()


@pytest.fixture
def machine(
    missions: tuple[Mission, ...],
    ledger: ProgressionLedger,
    store: SessionStore,
    image_editor: FakeImageEditor,
) -> MissionStateMachine:
    """State machine over the reference content with a fake image editor."""
    return MissionStateMachine(missions, ledger=ledger, store=store, image_editor=image_editor)


@pytest.fixture
def flags() -> MemoryFlagStore:
    return MemoryFlagStore()


@pytest.fixture
def near_mission() -> Mission:
    """Main mission placed at the reference point."""
    return Mission(
        id="near",
        title="Near",
        target=BASE,
        xp_reward=100,
        fragment_id=0,
        quiz=Quiz(question="Which layer?", checks=(FreeTextCheck(expected="南港層"),)),
    )


@pytest.fixture
def far_mission() -> Mission:
    """Main mission roughly 1.1 km north of the reference point."""
    return Mission(
        id="far",
        title="Far",
        target=Coordinate(lat=BASE.lat + 0.01, lng=BASE.lng),
        xp_reward=100,
        fragment_id=1,
        quiz=Quiz(
            question="How was the climb?",
            checks=(
                ChoicePairCheck(
                    first_options=("密集", "稀疏"),
                    second_options=("累", "不累"),
                    accepted=(("密集", "累"), ("稀疏", "不累")),
                ),
            ),
        ),
    )
