from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class Timer:
    interval_ms: int
    callback: Callable[[], None]
    elapsed_ms: int = 0


class DropScheduler:
    """Single-timer scheduler driven by caller-supplied time.

    At most one timer exists. Arming always discards the previous timer and
    starts the new one from zero; nothing carries over between timers.
    """

    def __init__(self) -> None:
        self.timer: Optional[Timer] = None

    @property
    def active(self) -> bool:
        return self.timer is not None

    @property
    def interval_ms(self) -> Optional[int]:
        return self.timer.interval_ms if self.timer is not None else None

    def arm(self, interval_ms: int, callback: Callable[[], None]) -> Timer:
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")
        self.cancel()
        self.timer = Timer(interval_ms=int(interval_ms), callback=callback)
        return self.timer

    def cancel(self) -> None:
        self.timer = None

    def advance(self, elapsed_ms: int) -> int:
        """Feed ``elapsed_ms`` of time and fire the timer for each full period.

        Returns the number of callbacks fired. If a callback re-arms or
        cancels the timer, the rest of ``elapsed_ms`` is dropped.
        """
        timer = self.timer
        if timer is None or elapsed_ms <= 0:
            return 0
        fired = 0
        timer.elapsed_ms += int(elapsed_ms)
        while timer.elapsed_ms >= timer.interval_ms:
            timer.elapsed_ms -= timer.interval_ms
            timer.callback()
            fired += 1
            if self.timer is not timer:
                break
        return fired
