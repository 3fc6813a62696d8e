"""Pacing for AI seats on the logical clock.

A bot's pacing lives on its Player (bot_think_ticks, bot_pending_action)
so it is carried along with every snapshot.
"""

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..game.state import Player


class BotHelper:
    """Think, hold, then execute: one step per tick for an AI seat."""

    @staticmethod
    def jolt_bot(player: "Player", ticks: int) -> None:
        """Pause a bot for some ticks and drop whatever it was about to do."""
        if player.is_bot:
            player.bot_think_ticks = ticks
            player.bot_pending_action = None

    @staticmethod
    def process_bot_action(
        bot: "Player",
        think_fn: Callable[[], str | None],
        execute_fn: Callable[[str], None],
    ) -> bool:
        """Run one tick of a bot's cycle.

        While think ticks remain they count down. A held action runs on the
        next free tick; otherwise think_fn picks the action to hold.

        Returns:
            True if the bot executed or chose an action this tick.
        """
        if bot.bot_think_ticks > 0:
            bot.bot_think_ticks -= 1
            return False

        if bot.bot_pending_action:
            action_id = bot.bot_pending_action
            bot.bot_pending_action = None
            execute_fn(action_id)
            return True

        action_id = think_fn()
        if not action_id:
            return False
        bot.bot_pending_action = action_id
        return True
