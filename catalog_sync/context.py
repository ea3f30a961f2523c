"""Utilities for tracing the phases of a sync run.

Phases are logged at debug level as they are entered and exited. When a
`TraceCollector` is active, the duration of every phase is also accumulated
so a caller can report where a run spent its time.
"""

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

__all__ = [
    "TraceCollector",
    "trace_collector",
    "trace_context",
]


@dataclass
class TraceCollector:
    """Accumulated duration and number of calls of each traced phase."""

    timings: dict[str, float] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)

    def add(self, name: str, duration: float) -> None:
        self.timings[name] = self.timings.get(name, 0.0) + duration
        self.counts[name] = self.counts.get(name, 0) + 1


_trace: contextvars.ContextVar[list[str]] = contextvars.ContextVar("trace")
_collector: contextvars.ContextVar[TraceCollector | None] = contextvars.ContextVar(
    "trace_collector", default=None
)


@contextmanager
def trace_collector() -> Generator[TraceCollector, None, None]:
    """Collect the durations of the phases traced within the context."""
    collector = TraceCollector()
    token = _collector.set(collector)
    try:
        yield collector
    finally:
        _collector.reset(token)


@contextmanager
def trace_context(name: str) -> Generator[None, None, None]:
    stack = _trace.get([])
    token = _trace.set(stack + [name])
    label = " > ".join(stack + [name])
    t1 = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield
    finally:
        duration = perf_counter() - t1
        _trace.reset(token)
        _LOGGER.debug("[Trace] < %s (%0.2fs)", label, duration)
        if (collector := _collector.get()) is not None:
            collector.add(name, duration)
