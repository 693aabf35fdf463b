"""
Operation timing — how long each native package operation took.

Each named operation (``apt-get``, ``apt-get-update``, ``yum_install``,
``zypper_install``) gets a histogram of durations in seconds.
``summary()`` feeds the CLI ``--timings`` report.
"""

from __future__ import annotations

import builtins
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)


@dataclass
class Histogram:
    """Simple histogram tracking min, max, sum, count."""

    name: str
    _values: list[float] = field(default_factory=list)

    def observe(self, value: float) -> None:
        self._values.append(value)

    @property
    def count(self) -> int:
        return len(self._values)

    @property
    def total(self) -> float:
        return sum(self._values)

    @property
    def max(self) -> float:
        return builtins.max(self._values) if self._values else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "count": self.count,
            "total": round(self.total, 3),
            "max": round(self.max, 3),
        }


class OperationTimer:
    """Registry of per-operation duration histograms."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._histograms: dict[str, Histogram] = {}

    def histogram(self, name: str) -> Histogram:
        """Get or create the histogram for ``name``."""
        if name not in self._histograms:
            self._histograms[name] = Histogram(name=name)
        return self._histograms[name]

    @contextmanager
    def time(self, name: str) -> Iterator[None]:
        """Time the enclosed block under ``name``, even if it raises."""
        start = self._clock()
        try:
            yield
        finally:
            elapsed = self._clock() - start
            self.histogram(name).observe(elapsed)
            logger.debug("%s took %.2fs", name, elapsed)

    def summary(self) -> list[dict[str, Any]]:
        return [h.to_dict() for h in sorted(self._histograms.values(), key=lambda h: h.name)]

    def reset(self) -> None:
        self._histograms.clear()


_timer = OperationTimer()


def get_timer() -> OperationTimer:
    """Return the process-wide operation timer."""
    return _timer
