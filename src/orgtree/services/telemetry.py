"""Telemetry — timing spans for service calls.

Off unless ``--verbose``; then :func:`traced` opens a root span per
service call, :func:`trace_span` nests child spans (load, resolve,
build), and the finished tree lands in ``ServiceResult.meta["telemetry"]``.
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

from orgtree.services.result import ServiceResult

log = structlog.get_logger("orgtree.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started_ns: int = field(default_factory=time.perf_counter_ns)
    elapsed_ns: int | None = None

    @property
    def duration_ms(self) -> float:
        """Elapsed milliseconds; 0.0 while the span is still open."""
        return (self.elapsed_ns or 0) / 1_000_000

    def finish(self) -> None:
        self.elapsed_ns = time.perf_counter_ns() - self.started_ns

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    """Make *span* current for the block, then close it."""
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.finish()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Nest a child span under the active one.

    Yields None when telemetry is off or no traced call is running, so
    callers guard annotations with ``if span:``.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    child = Span(name=name)
    parent.children.append(child)
    with _activate(child):
        yield child


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Decorator: time a service method and attach its span tree to the result."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        outcome = "error"
        try:
            with _activate(root):
                result = func(*args, **kwargs)
            if isinstance(result, ServiceResult):
                outcome = "ok" if result.ok else "failed"
                meta = {**(result.meta or {}), "telemetry": root.to_dict()}
                return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
            outcome = "ok"
            return result
        finally:
            log.debug(
                "span.complete",
                span_name=root.name,
                duration_ms=round(root.duration_ms, 2),
                outcome=outcome,
                children=len(root.children),
            )

    return wrapper


def enable_telemetry() -> None:
    """Turn telemetry on for the current context (the CLI does this on --verbose)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The active span, for ad-hoc annotation; None when telemetry is off."""
    return _current_span.get() if _enabled.get() else None
