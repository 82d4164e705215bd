"""
Render profiling for DazzleCache.

Collects wall-clock time and call counts per component identity so users can
see which components are worth caching. Timings are inclusive: a component's
time includes every nested render it triggered.
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class ProfileEntry:
    """Accumulated timings for one component identity."""
    identity: str
    total_ms: float = 0.0
    count: int = 0
    max_ms: float = 0.0

    @property
    def average_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


class ProfileTimer:
    """
    Scoped timer handle returned by Profiler.start().

    Can be stopped explicitly through the profiler or used as a context
    manager. A timer whose clock failed to start records nothing.
    """

    __slots__ = ('identity', 'started_at', '_profiler', '_stopped')

    def __init__(self, profiler: 'Profiler', identity: str, started_at: Optional[float]):
        self._profiler = profiler
        self.identity = identity
        self.started_at = started_at
        self._stopped = False

    def __enter__(self) -> 'ProfileTimer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._profiler.stop(self)
        return None


class Profiler:
    """
    Per-identity render timing table.

    Example:
        profiler = Profiler()
        timer = profiler.start("Hello")
        markup = render()
        profiler.stop(timer)
        profiler.report()["Hello"]["count"]  # 1
    """

    def __init__(self, clock=time.perf_counter):
        """
        Initialize an empty profiler.

        Args:
            clock: Zero-argument callable returning seconds as a float
        """
        self._clock = clock
        self._entries: Dict[str, ProfileEntry] = {}

    def start(self, identity: str) -> ProfileTimer:
        """Start timing one render of a component."""
        try:
            started_at = self._clock()
        except (OSError, RuntimeError) as e:
            logger.debug("Profiling clock unavailable for %s: %s", identity, e)
            started_at = None
        return ProfileTimer(self, identity, started_at)

    def stop(self, timer: ProfileTimer) -> float:
        """
        Stop a timer and fold its elapsed time into the identity's entry.

        Stopping a timer twice has no further effect.

        Returns:
            Elapsed milliseconds (0.0 when nothing was recorded)
        """
        if timer._stopped or timer.started_at is None:
            return 0.0
        timer._stopped = True

        try:
            elapsed_ms = (self._clock() - timer.started_at) * 1000.0
        except (OSError, RuntimeError) as e:
            logger.debug("Profiling clock unavailable for %s: %s", timer.identity, e)
            return 0.0

        entry = self._entries.get(timer.identity)
        if entry is None:
            entry = self._entries[timer.identity] = ProfileEntry(timer.identity)
        entry.total_ms += elapsed_ms
        entry.count += 1
        if elapsed_ms > entry.max_ms:
            entry.max_ms = elapsed_ms
        return elapsed_ms

    def clear(self):
        """Reset all profile entries."""
        self._entries.clear()

    def report(self) -> Dict[str, Dict[str, float]]:
        """
        Snapshot of the collected timings.

        Returns:
            {identity: {'total_ms', 'count', 'average_ms', 'max_ms'}}
        """
        return {
            identity: {
                'total_ms': entry.total_ms,
                'count': entry.count,
                'average_ms': entry.average_ms,
                'max_ms': entry.max_ms,
            }
            for identity, entry in self._entries.items()
        }

    def __len__(self) -> int:
        return len(self._entries)
