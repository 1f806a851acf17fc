import math
import threading
import time
from collections import deque
from collections.abc import Generator
from contextlib import contextmanager


DEFAULT_LATENCY_WINDOW = 1000


class MetricsRecorder:
    """In-process counters for AI call latency and workflow trigger outcomes.

    Percentiles cover the most recent ``window_size`` latency samples only.
    """

    def __init__(self, window_size: int = DEFAULT_LATENCY_WINDOW) -> None:
        self._ai_latencies: deque[float] = deque(maxlen=window_size)
        self._workflow_outcomes = {"success": 0, "failure": 0}
        self._lock = threading.Lock()

    def record_ai_latency(self, duration_ms: float) -> None:
        with self._lock:
            self._ai_latencies.append(duration_ms)

    def record_workflow_outcome(self, outcome: str) -> None:
        """Count a trigger attempt. Outcomes other than success/failure are ignored."""
        with self._lock:
            if outcome in self._workflow_outcomes:
                self._workflow_outcomes[outcome] += 1

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            latencies = sorted(self._ai_latencies)
            outcomes = dict(self._workflow_outcomes)
        return {
            "count": len(latencies),
            "p50": _percentile(latencies, 50),
            "p95": _percentile(latencies, 95),
            "workflowOutcomes": outcomes,
        }


class Timer:
    duration_ms: float = 0.0


@contextmanager
def timed() -> Generator[Timer, None, None]:
    """Measure the wall time of a block; read ``duration_ms`` after it exits."""
    timer = Timer()
    start = time.perf_counter()
    try:
        yield timer
    finally:
        timer.duration_ms = (time.perf_counter() - start) * 1000


def _percentile(sorted_values: list[float], p: int) -> float | None:
    # nearest-rank
    if not sorted_values:
        return None
    index = math.ceil(p / 100 * len(sorted_values)) - 1
    return sorted_values[max(0, index)]
