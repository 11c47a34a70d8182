"""Geolocation sampler.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from collections import deque
from typing import TYPE_CHECKING

# Local imports (core first, then alphabetical)
from ..core.constants import DEFAULT_SAMPLE_BUFFER_SIZE
from ..core.exceptions import InvalidSampleError
from ..core.models import Coordinate, PositionSample
from ..infra.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..core.types import SampleStatus

__all__ = ("GeolocationSampler",)

logger = get_logger("geo.sampler", stream="position")


class GeolocationSampler:
    """Bounded buffer between the platform position callback and the engine.

    Callbacks push samples at whatever rate the device delivers them; the game
    loop drains them on its own tick. When the buffer is full the oldest sample
    is dropped, since only the most recent fixes matter for proximity.
    """

    def __init__(self, maxlen: int = DEFAULT_SAMPLE_BUFFER_SIZE) -> None:
        if maxlen < 1:
            raise ValueError("maxlen must be at least 1")
        self._queue: deque[PositionSample] = deque(maxlen=maxlen)
        self._last: PositionSample | None = None
        self.dropped = 0

    @property
    def last_sample(self) -> PositionSample | None:
        return self._last

    def __len__(self) -> int:
        return len(self._queue)

    def publish(self, sample: PositionSample) -> None:
        """Queue one sample from the position stream."""
        if len(self._queue) == self._queue.maxlen:
            self.dropped += 1
        self._queue.append(sample)
        self._last = sample

    def publish_fix(self, lat: float, lng: float, accuracy_m: float | None = None) -> PositionSample:
        """Queue a successful fix."""
        try:
            coordinate = Coordinate(lat=lat, lng=lng)
        except ValueError as exc:
            raise InvalidSampleError(f"coordinate out of range ({lat}, {lng})") from exc
        sample = PositionSample(status="ok", coordinate=coordinate, accuracy_m=accuracy_m)
        self.publish(sample)
        return sample

    def publish_failure(self, status: SampleStatus) -> PositionSample:
        """Queue a sensor failure (permission denied, timeout, no sensor)."""
        if status == "ok":
            raise InvalidSampleError("failure samples cannot have status 'ok'")
        sample = PositionSample(status=status)
        logger.warning("geolocation failure {status}", status=status)
        self.publish(sample)
        return sample

    def drain(self) -> Iterator[PositionSample]:
        """Yield queued samples oldest first, emptying the buffer."""
        while self._queue:
            yield self._queue.popleft()
