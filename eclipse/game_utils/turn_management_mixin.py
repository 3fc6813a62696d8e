"""Mixin providing turn order for the game state."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..game.state import Player


class TurnManagementMixin:
    """Turn order over player ids, skipping empires that are out of the round.

    Expects on the state class:
        - self.turn_order: list[int]
        - self.turn_order_index: int
        - self.get_player(player_id) -> Player | None
    """

    @property
    def current_player(self) -> "Player | None":
        """Get the player whose turn it is."""
        if not self.turn_order:
            return None
        index = self.turn_order_index % len(self.turn_order)
        return self.get_player(self.turn_order[index])

    def set_turn_order(self, player_ids: list[int]) -> None:
        """Replace the turn order and start again from its first player."""
        self.turn_order = list(player_ids)
        self.turn_order_index = 0

    def next_open_index(self, start: int | None = None) -> int | None:
        """Find the next turn index (after start) whose player can still act.

        A player can act when they are neither passed nor eliminated. The
        search wraps around and may land on the starting index itself.

        Returns:
            The index, or None if nobody can act.
        """
        if not self.turn_order:
            return None
        origin = self.turn_order_index if start is None else start
        for step in range(1, len(self.turn_order) + 1):
            index = (origin + step) % len(self.turn_order)
            player = self.get_player(self.turn_order[index])
            if player and not player.has_passed and not player.is_eliminated:
                return index
        return None

    @property
    def turn_players(self) -> list["Player"]:
        """Get the players in turn order."""
        return [
            p
            for player_id in self.turn_order
            if (p := self.get_player(player_id)) is not None
        ]
