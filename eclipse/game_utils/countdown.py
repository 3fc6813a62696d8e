from __future__ import annotations

from dataclasses import dataclass

from mashumaro.mixins.json import DataClassJSONMixin

TICKS_PER_SECOND = 20


@dataclass
class CountdownTimer(DataClassJSONMixin):
    """Logical-clock countdown (ticks at 20/s)."""
    ticks_remaining: int = 0

    def start(self, seconds: int) -> None:
        self.ticks_remaining = max(0, seconds) * TICKS_PER_SECOND

    def tick(self) -> bool:
        """Advance one tick. Returns True on the tick the timer expires."""
        if self.ticks_remaining <= 0:
            return False
        self.ticks_remaining -= 1
        return self.ticks_remaining == 0

    def seconds_remaining(self) -> int:
        if self.ticks_remaining <= 0:
            return 0
        return (self.ticks_remaining + TICKS_PER_SECOND - 1) // TICKS_PER_SECOND
