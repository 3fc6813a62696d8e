"""Secret and public objectives for Eclipse of Empires."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from mashumaro.mixins.json import DataClassJSONMixin

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom
    from .state import GameState, Player


@dataclass(frozen=True)
class Objective:
    """An objective card. Shared by the secret and public decks."""

    id: str
    name: str
    description: str
    vp: int
    condition: Callable[[Player, GameState], bool]
    progress: Callable[[Player, GameState], str]


def _owned_of_type(player: Player, state: GameState, tile_type: str) -> int:
    return sum(
        1
        for t in state.tiles.values()
        if t.owner_id == player.id and t.true_type == tile_type
    )


def _counter(target: int, measure: Callable[[Player, GameState], int]):
    """Build a condition/progress pair for an "n of k" objective."""

    def condition(player: Player, state: GameState) -> bool:
        return measure(player, state) >= target

    def progress(player: Player, state: GameState) -> str:
        return f"{measure(player, state)}/{target}"

    return condition, progress


def _keep_at_zero(measure: Callable[[Player, GameState], int], ok_label: str):
    """Build a condition/progress pair for an objective that fails once broken."""

    def condition(player: Player, state: GameState) -> bool:
        return measure(player, state) == 0

    def progress(player: Player, state: GameState) -> str:
        return ok_label if measure(player, state) == 0 else "Failed"

    return condition, progress


def _objective(objective_id: str, name: str, description: str, vp: int, rule) -> Objective:
    condition, progress = rule
    return Objective(objective_id, name, description, vp, condition, progress)


OBJECTIVES: list[Objective] = [
    _objective(
        "o1", "Keeper of the Harvest", "Control 3 Plains", 3,
        _counter(3, lambda p, s: _owned_of_type(p, s, "plains")),
    ),
    _objective(
        "o2", "Master of the Forge", "Collect 5 Stone", 2,
        _counter(5, lambda p, s: p.resources.stone),
    ),
    _objective(
        "o3", "Warlord's Dominion", "Win 3 Battles", 3,
        _counter(3, lambda p, s: p.stats.battles_won),
    ),
    _objective(
        "o4", "Architect of Ages", "Build 3 Forts", 3,
        _counter(3, lambda p, s: len(s.fortified_tiles(p.id))),
    ),
    _objective(
        "o5", "Merchant Prince", "Hold 12 Resources", 3,
        _counter(12, lambda p, s: p.resources.total()),
    ),
    _objective(
        "o6", "Treasurer of Empires", "Hold 6 Gold", 2,
        _counter(6, lambda p, s: p.resources.gold),
    ),
    _objective(
        "o7", "Reaver of Realms", "Attack 2 different players", 4,
        _counter(2, lambda p, s: len(p.stats.unique_players_attacked)),
    ),
    _objective(
        "o8", "Shadow Empire", "Lose 0 tiles", 4,
        _keep_at_zero(lambda p, s: p.stats.tiles_lost, "Safe"),
    ),
    _objective(
        "o9", "Silent Pactkeeper", "Make 0 Attacks", 3,
        _keep_at_zero(lambda p, s: p.stats.attacks_made, "Peaceful"),
    ),
    _objective(
        "o10", "Pathfinder's Legacy", "Reveal 5 Tiles", 3,
        _counter(5, lambda p, s: p.stats.tiles_revealed),
    ),
    _objective(
        "o11", "Relic Hoarder", "Hold 3 Relics", 4,
        _counter(3, lambda p, s: p.resources.relic),
    ),
    _objective(
        "o12", "Prophet of the Eclipse", "Trigger 1 Relic Event", 2,
        _counter(1, lambda p, s: p.stats.relic_events_triggered),
    ),
    _objective(
        "o13", "Relic Cartographer", "Reveal 2 Relic Sites", 3,
        _counter(2, lambda p, s: p.stats.relic_sites_revealed),
    ),
]

_OBJECTIVES_BY_ID: dict[str, Objective] = {o.id: o for o in OBJECTIVES}


def get_objective(objective_id: str) -> Objective:
    """Look up an objective by id."""
    objective = _OBJECTIVES_BY_ID.get(objective_id)
    if objective is None:
        raise ValueError(f"Unknown objective: {objective_id}")
    return objective


def check_objective(objective_id: str, player: Player, state: GameState) -> bool:
    """Check if a player currently satisfies an objective."""
    return get_objective(objective_id).condition(player, state)


def objective_progress(objective_id: str, player: Player, state: GameState) -> str:
    """Get the progress text shown next to an objective."""
    return get_objective(objective_id).progress(player, state)


@dataclass
class ObjectiveDeck(DataClassJSONMixin):
    """Objective draw pile, holding objective ids.

    Objectives are never discarded: a drawn objective is either held as a
    secret by one player or revealed as a public imperative.
    """

    draw_pile: list[str] = field(default_factory=list)

    def build_standard_deck(self) -> None:
        self.draw_pile = [o.id for o in OBJECTIVES]

    def shuffle(self, rng: GameRandom) -> None:
        rng.shuffle(self.draw_pile)

    def draw(self) -> str:
        """Draw the top objective, or the first objective if none are left."""
        if not self.draw_pile:
            return OBJECTIVES[0].id
        return self.draw_pile.pop(0)

    def size(self) -> int:
        return len(self.draw_pile)
