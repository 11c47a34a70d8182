"""Tests for the in-memory session store.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

from geoquest.core.models import MissionProgress
from geoquest.mission.store import SessionStore

__all__ = ()


class TestSessionStore:
    """Tests for SessionStore."""

    def test_load_missing(self, store: SessionStore) -> None:
        assert store.load("1") is None
        assert "1" not in store

    def test_save_and_load(self, store: SessionStore) -> None:
        store.save("1", MissionProgress(answers={"tiger": "140"}, solved={"heights": True}))

        loaded = store.load("1")

        assert loaded is not None
        assert loaded.answers == {"tiger": "140"}
        assert loaded.is_solved("heights")
        assert len(store) == 1

    def test_snapshots_are_copies(self, store: SessionStore) -> None:
        """Mutating a working copy never changes the saved snapshot."""
        progress = MissionProgress(answers={"answer": "南港"})
        store.save("2", progress)
        progress.answers["answer"] = "changed"

        loaded = store.load("2")
        assert loaded is not None
        loaded.answers["answer"] = "also changed"

        again = store.load("2")
        assert again is not None
        assert again.answers == {"answer": "南港"}

    def test_clear(self, store: SessionStore) -> None:
        store.save("s1", MissionProgress(prompt="x"))

        store.clear("s1")
        store.clear("s1")

        assert store.load("s1") is None
