"""A stop watch that records named phases and writes timing statistics."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass

_NS_PER_MS = 1_000_000


@dataclass(frozen=True)
class _Metric:
    name: str
    duration_ns: int

    @property
    def millis(self) -> int:
        return self.duration_ns // _NS_PER_MS


class StopWatch:
    """Measures the time between consecutive ``record`` calls."""

    def __init__(self) -> None:
        self._last_instant = time.perf_counter_ns()
        self.metrics: list[_Metric] = []
        self._lwidth = 0

    @classmethod
    def start(cls) -> StopWatch:
        """Create a stop watch that starts counting now."""
        return cls()

    def record(self, what: str) -> None:
        """Record the time elapsed since the previous record (or the start) under ``what``."""
        now = time.perf_counter_ns()
        duration = now - self._last_instant
        self._last_instant = now
        self._lwidth = max(self._lwidth, len(what))
        self.metrics.append(_Metric(what, duration))

    def write_stats_to(self, to_file: str | os.PathLike[str]) -> None:
        """Write one line per recorded phase, a separator and the total to ``to_file``."""
        total = _Metric("total", sum(m.duration_ns for m in self.metrics))
        rwidth = len(str(total.millis))

        lines = [self._format(metric, rwidth) for metric in self.metrics]
        lines.append("-" * (self._lwidth + rwidth + 5))
        lines.append(self._format(total, rwidth))

        with open(to_file, "w", encoding="utf-8", newline="\n") as out:
            out.writelines(f"{line}\n" for line in lines)

    def _format(self, metric: _Metric, rwidth: int) -> str:
        return f"{metric.name:>{self._lwidth}}: {metric.millis:>{rwidth}} ms"