"""Tests for the tracing context."""

from catalog_sync.context import trace_collector, trace_context


def test_trace_collector() -> None:
    """Durations of nested phases are recorded by name."""
    with trace_collector() as collector:
        with trace_context("Sync"):
            with trace_context("Build nginx"):
                pass
            with trace_context("Build nginx"):
                pass
    assert set(collector.timings) == {"Sync", "Build nginx"}
    assert collector.counts == {"Sync": 1, "Build nginx": 2}
    assert collector.timings["Sync"] >= collector.timings["Build nginx"]


def test_trace_without_collector() -> None:
    with trace_context("Sync"):
        pass
    with trace_collector() as collector:
        pass
    assert collector.timings == {}
