"""Call tracing for the service layer.

With ``--verbose`` each ``@traced`` service call records a span tree: the
call itself plus every ``trace_span`` block opened inside it, such as the
locked store mutation or the shortest-path search. The tree lands in
``ServiceResult.meta["telemetry"]`` and each finished call is logged at
debug level. With tracing off a call costs one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from routemap.services.result import ServiceResult

_tracing: ContextVar[bool] = ContextVar("routemap_tracing", default=False)
_active_span: ContextVar[Span | None] = ContextVar("routemap_active_span", default=None)

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    """One timed step of a service call."""

    name: str
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def tracing_enabled() -> bool:
    return _tracing.get()


def enable_telemetry() -> None:
    """Turn tracing on for the current context (AppContext does this for --verbose)."""
    _tracing.set(True)


def disable_telemetry() -> None:
    _tracing.set(False)


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    """Make *span* the parent of nested spans until the block exits."""
    token = _active_span.set(span)
    try:
        yield span
    finally:
        span.finished = time.perf_counter()
        _active_span.reset(token)


@contextmanager
def trace_span(name: str, **annotations: Any) -> Iterator[Span | None]:
    """Open a child span under the running ``@traced`` call.

    Yields None when tracing is off or no traced call is running, so callers
    guard annotations with ``if span:``.
    """
    parent = _active_span.get() if _tracing.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name, annotations=dict(annotations))
    parent.children.append(child)
    with _activate(child):
        yield child


def _log_call(span: Span, *, ok: bool) -> None:
    structlog.get_logger("routemap.telemetry").debug(
        "service.call",
        call=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        steps=[child.name for child in span.children],
    )


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:
    """Trace a service method and attach its span tree to the returned result.

    A failed ServiceResult is annotated with its error code.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _tracing.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        try:
            with _activate(span):
                result = func(*args, **kwargs)
        except Exception:
            _log_call(span, ok=False)
            raise

        if not isinstance(result, ServiceResult):
            _log_call(span, ok=True)
            return result

        if result.error is not None:
            span.annotate("error", result.error.code)
        _log_call(span, ok=result.ok)
        meta = {**(result.meta or {}), "telemetry": span.to_dict()}
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper
