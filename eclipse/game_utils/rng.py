"""
Injectable random source for the game engine.

Every die roll, shuffle and AI probability check goes through a GameRandom
instance that the engine passes down to the rules functions. This keeps
games reproducible:
- Seeding: GameRandom(seed) replays the same game for the same intents
- Logging: every roll is logged at DEBUG level with its reason
- Scripting: tests can queue exact outcomes with ScriptedRandom

Usage:
    rng = GameRandom(seed=42)
    attack_roll = rng.roll_die(reason="attack")
    if rng.chance(0.4):
        ...
"""

from __future__ import annotations

import logging
import random
from typing import Any, MutableSequence, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GameRandom:
    """Seedable wrapper around random.Random with game-oriented helpers."""

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)
        self._roll_count = 0

    def random(self) -> float:
        """Return a float in [0, 1)."""
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        """Return an integer in [a, b], inclusive."""
        return self._random.randint(a, b)

    def roll_die(self, sides: int = 6, reason: str = "") -> int:
        """
        Roll a single die.

        Args:
            sides: Number of faces on the die.
            reason: Why this roll is being made (for logging).

        Returns:
            A value in [1, sides].
        """
        value = self.randint(1, sides)
        self._roll_count += 1
        logger.debug("d%d roll #%d (%s): %d", sides, self._roll_count, reason, value)
        return value

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        if probability <= 0:
            return False
        if probability >= 1:
            return True
        return self.random() < probability

    def choice(self, seq: Sequence[T]) -> T:
        """Pick one element uniformly at random.

        Built on randint() so ScriptedRandom can script the pick.
        """
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randint(0, len(seq) - 1)]

    def shuffle(self, items: MutableSequence[Any]) -> None:
        """Shuffle a list in place.

        Fisher-Yates over randint(), so ScriptedRandom can script the order.
        """
        for i in range(len(items) - 1, 0, -1):
            j = self.randint(0, i)
            items[i], items[j] = items[j], items[i]


class ScriptedRandom(GameRandom):
    """
    GameRandom that replays queued values before falling back to a seed.

    Queued floats feed random()/chance(), queued ints feed randint() (and
    therefore roll_die(), choice() and shuffle()). Useful for tests that must
    force an exact die result or AI decision.

    Usage:
        rng = ScriptedRandom(ints=[3, 5])  # attacker rolls 3, defender rolls 5
    """

    def __init__(
        self,
        floats: Sequence[float] | None = None,
        ints: Sequence[int] | None = None,
        seed: int | None = 0,
    ):
        super().__init__(seed)
        self.floats: list[float] = list(floats or [])
        self.ints: list[int] = list(ints or [])

    def random(self) -> float:
        if self.floats:
            return self.floats.pop(0)
        return super().random()

    def randint(self, a: int, b: int) -> int:
        if self.ints:
            value = self.ints.pop(0)
            return max(a, min(b, value))
        return super().randint(a, b)
