"""Boolean flag stores.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
import json
from dataclasses import dataclass, field
from pathlib import Path

# Third-party (alphabetical)
import logfire

__all__ = ("JsonFlagStore", "MemoryFlagStore")


@dataclass
class MemoryFlagStore:
    """Flags kept in memory only; used by tests and ephemeral sessions."""

    flags: dict[str, bool] = field(default_factory=dict)

    def get(self, name: str) -> bool:
        return self.flags.get(name, False)

    def set(self, name: str, value: bool = True) -> None:
        self.flags[name] = value


class JsonFlagStore:
    """Flags persisted as a single JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path.expanduser()

    def get(self, name: str) -> bool:
        return bool(self._read().get(name, False))

    def set(self, name: str, value: bool = True) -> None:
        with logfire.span("flags.set", flag=name, value=value):
            data = self._read()
            data[name] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _read(self) -> dict[str, bool]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logfire.warning("flags.corrupt_file", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(data, dict):
            logfire.warning("flags.unexpected_payload", path=str(self.path))
            return {}
        return {str(k): bool(v) for k, v in data.items()}
