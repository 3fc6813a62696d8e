"""Victory points and income for Eclipse of Empires."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mashumaro.mixins.json import DataClassJSONMixin

from .objectives import check_objective, get_objective
from .state import (
    CAPITAL_YIELD,
    FORTIFICATION_VP,
    RELIC_TOKEN_VP,
    TILE_RESOURCE,
    TILE_VP,
    RelicPower,
    Resource,
    TileType,
)

if TYPE_CHECKING:
    from .state import GameState, Player


@dataclass
class ScoreBreakdown(DataClassJSONMixin):
    """Where a player's victory points come from."""

    player_id: int
    name: str
    tile_vp: int = 0
    fort_vp: int = 0
    relic_vp: int = 0
    objective_vp: int = 0
    secret_objective_met: bool = False

    @property
    def total(self) -> int:
        return self.tile_vp + self.fort_vp + self.relic_vp + self.objective_vp


def calculate_score(state: GameState, player: Player) -> ScoreBreakdown:
    """Compute a player's score from the map and their holdings.

    Tiles count by their true type, whatever was declared.
    """
    score = ScoreBreakdown(player_id=player.id, name=player.name)
    for tile in state.owned_tiles(player.id):
        score.tile_vp += TILE_VP.get(tile.true_type, 0)
    score.fort_vp = len(state.fortified_tiles(player.id)) * FORTIFICATION_VP
    score.relic_vp = player.resources.relic * RELIC_TOKEN_VP

    for objective_id in player.secret_objectives:
        if check_objective(objective_id, player, state):
            score.objective_vp += get_objective(objective_id).vp
            score.secret_objective_met = True
    for objective_id in state.public_objectives:
        if check_objective(objective_id, player, state):
            score.objective_vp += get_objective(objective_id).vp
    return score


def update_scores(state: GameState) -> None:
    """Recompute every player's VP from scratch."""
    for player in state.players:
        player.vp = calculate_score(state, player).total


def final_standings(state: GameState) -> list[ScoreBreakdown]:
    """Get every player's score breakdown, best first."""
    scores = [calculate_score(state, p) for p in state.players]
    scores.sort(key=lambda s: (-s.total, s.player_id))
    return scores


def income_rates(state: GameState, player: Player, public: bool = False) -> dict[str, int]:
    """Resources a player collects per round.

    Args:
        public: Use declared tile types, i.e. what rivals believe.
    """
    rates = {r.value: 0 for r in Resource}
    for tile in state.owned_tiles(player.id):
        tile_type = tile.public_type if public else tile.true_type
        amount = 2 if tile.fortification is not None else 1
        if tile_type == TileType.CAPITAL:
            for resource in CAPITAL_YIELD:
                rates[resource.value] += amount
        elif tile_type in TILE_RESOURCE:
            rates[Resource(TILE_RESOURCE[tile_type]).value] += amount

    if player.relic_power == RelicPower.PASSIVE_INCOME or player.status.passive_income:
        rates[Resource.GRAIN.value] += 1
        rates[Resource.GOLD.value] += 1
    return rates
