"""Latency timing and in-memory tool trace collection."""

from __future__ import annotations

import time
from collections import deque

from docs_agent.types import ToolTrace


class Timer:
    """Simple context timer used by the dispatcher."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0


class TraceBuffer:
    """Bounded buffer of recent tool traces; usable as a registry observer."""

    def __init__(self, maxlen: int = 200) -> None:
        self._traces: deque[ToolTrace] = deque(maxlen=maxlen)

    def __call__(self, trace: ToolTrace) -> None:
        self._traces.append(trace)

    def list_recent(self, limit: int = 20) -> list[ToolTrace]:
        if limit <= 0:
            return []
        return list(self._traces)[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate latency figures for the metrics endpoint."""
        traces = list(self._traces)
        if not traces:
            return {"total_calls": 0, "avg_latency_ms": 0.0, "p95_latency_ms": 0.0}

        latencies = sorted(trace.latency_ms for trace in traces)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_calls": len(traces),
            "avg_latency_ms": sum(latencies) / len(latencies),
            "p95_latency_ms": latencies[p95_index],
        }
