from __future__ import annotations
import time
from collections import deque
from contextlib import contextmanager

from .logging import get_logger

_profiler = None


def get_profiler():
    global _profiler
    if _profiler is None:
        _profiler = Profiler()
    return _profiler


class Profiler:
    """Per-stage wall-clock timings, smoothed with an exponential moving average."""

    def __init__(self, ema_alpha=0.1, maxlen=100):
        self._timings = {}
        self._w_stats = {}
        self.ema_alpha = ema_alpha
        self.maxlen = maxlen
        self.logger = get_logger("Profiler")

    @contextmanager
    def record(self, name: str):
        start_t = time.perf_counter()
        try:
            yield
        finally:
            self._add(name, time.perf_counter() - start_t)

    def _add(self, name: str, dt: float):
        self._timings.setdefault(name, deque(maxlen=self.maxlen)).append(dt)
        if name not in self._w_stats:
            self._w_stats[name] = dt
        else:
            self._w_stats[name] = (
                self.ema_alpha * dt + (1.0 - self.ema_alpha) * self._w_stats[name]
            )

    def get_timings(self):
        return self._w_stats.copy()

    def history(self, name: str) -> list[float]:
        return list(self._timings.get(name, ()))

    def reset(self):
        self._timings.clear()
        self._w_stats.clear()

    def check_budget(self, name: str, budget_ms: float) -> bool:
        """Warn and return True when the smoothed timing of ``name`` is over budget."""
        t = self._w_stats.get(name)
        if t is None or t * 1000.0 <= budget_ms:
            return False
        self.logger.warning(
            f"{name} over budget: {t * 1000.0:.2f}ms > {budget_ms:.2f}ms"
        )
        return True

    def summary(self) -> str:
        return " | ".join(
            f"{k}: {v * 1000:.2f}ms" for k, v in sorted(self._w_stats.items())
        )

    def log_stats(self):
        self.logger.info(self.summary())
