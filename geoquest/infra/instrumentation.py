"""Centralized instrumentation for GeoQuest.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
import inspect
import os
from enum import Enum
from functools import wraps
from typing import TYPE_CHECKING, Any, Literal, ParamSpec, TypeVar, cast

# Third-party (alphabetical)
import logfire

# Local imports (core first, then alphabetical)
from .logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

P = ParamSpec("P")
"""Parameter specification for traced decorators."""

R = TypeVar("R")
"""Type variable for traced return values."""

__all__ = ("configure_instrumentation", "get_logger", "traced")


def configure_instrumentation(
    *,
    service_name: str = "geoquest",
    environment: str | None = None,
    send_to_logfire: bool | Literal["if-token-present"] | None = "if-token-present",
) -> None:
    """Configure global instrumentation settings.

    This function should be called once at application startup.

    Args:
        service_name: Name of the service for tracing.
        environment: Deployment environment (dev, staging, prod).
        send_to_logfire: Whether to send telemetry to Logfire.
    """
    environment = environment or os.getenv("ENVIRONMENT", "development")

    logfire.configure(service_name=service_name, environment=environment, send_to_logfire=send_to_logfire)

    # Outbound image-edit calls
    logfire.instrument_httpx()


# =============================================================================
# Span Decorators
# =============================================================================
def traced(
    name: str | None = None,
    *,
    capture: Sequence[str] = (),
    record_result: bool = True,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator to wrap a game operation in a span.

    Args:
        name: Span name (defaults to module and function name).
        capture: Parameter names recorded as span attributes, e.g. ``mission_id``.
        record_result: Whether to record ``mission_id`` and ``stage`` of the
            returned view, or the value itself when it is a scalar.

    Returns:
        Decorated function with tracing.

    Example:
        >>> @traced('game.select_mission', capture=('mission_id',))
        ... def select_mission(self, mission_id: str) -> MissionView: ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        span_name = name or f"{func.__module__}.{func.__name__}"
        signature = inspect.signature(func)

        def span_attributes(args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
            if not capture:
                return {}
            bound = signature.bind_partial(*args, **kwargs).arguments
            return {key: _span_value(bound[key]) for key in capture if key in bound}

        def finish(span: logfire.LogfireSpan, result: Any) -> None:
            if record_result:
                for key, value in _result_attributes(result).items():
                    span.set_attribute(key, value)

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with logfire.span(span_name, **span_attributes(args, kwargs)) as span:
                try:
                    async_func = cast("Callable[P, Awaitable[R]]", func)
                    result = await async_func(*args, **kwargs)
                except Exception as e:
                    span.set_attribute("error_type", type(e).__name__)
                    span.set_attribute("error_code", getattr(e, "code", "unexpected"))
                    raise
                finish(span, result)
                return result

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with logfire.span(span_name, **span_attributes(args, kwargs)) as span:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_attribute("error_type", type(e).__name__)
                    span.set_attribute("error_code", getattr(e, "code", "unexpected"))
                    raise
                finish(span, result)
                return result

        if inspect.iscoroutinefunction(func):
            return cast("Callable[P, R]", async_wrapper)
        return cast("Callable[P, R]", sync_wrapper)

    return decorator


# =============================================================================
# Helper Functions
# =============================================================================
_SCALARS = (str, int, float, bool)


def _span_value(value: Any) -> Any:
    """Reduce a value to something a span attribute can hold."""
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, _SCALARS):
        return value
    return repr(value)[:200]


def _result_attributes(result: Any) -> dict[str, Any]:
    """Span attributes describing a returned view or scalar."""
    if result is None:
        return {}
    if isinstance(result, _SCALARS + (Enum,)):
        return {"result": _span_value(result)}
    attributes: dict[str, Any] = {}
    for key in ("mission_id", "stage", "xp_awarded"):
        value = getattr(result, key, None)
        if value is not None:
            attributes[key] = _span_value(value)
    return attributes
