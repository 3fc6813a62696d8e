"""Combat resolution for Eclipse of Empires."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .hexmap import count_adjacent_owned, is_adjacent_to_owner
from .state import (
    CitizenRole,
    DiceDetail,
    LogDetail,
    LogKind,
    RelicPower,
    Resource,
)

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom
    from .state import GameState, HexTile, Player

logger = logging.getLogger(__name__)

# Resources a victorious attacker can loot (Relics cannot be stolen)
LOOTABLE = [Resource.GRAIN, Resource.STONE, Resource.GOLD]


@dataclass
class BattleResult:
    """Outcome of one attack."""

    attacker_won: bool
    attack_strength: int
    defense_strength: int
    attack_roll: int
    defense_roll: int
    loot: str | None = None

    @property
    def attack_total(self) -> int:
        return self.attack_strength + self.attack_roll

    @property
    def defense_total(self) -> int:
        return self.defense_strength + self.defense_roll

    def dice(self) -> DiceDetail:
        return DiceDetail(
            att=self.attack_strength,
            def_=self.defense_strength,
            att_roll=self.attack_roll,
            def_roll=self.defense_roll,
        )


def validate_attack(state: GameState, player: Player, tile_id: str | None) -> str | None:
    """Check if a player may attack a tile. Returns error code or None."""
    if not player.status.can_attack:
        return "attacks-blocked"
    tile = state.get_tile(tile_id)
    if tile is None:
        return "unknown-tile"
    if tile.owner_id is None:
        return "neutral-tile"
    if tile.owner_id == player.id:
        return "own-tile"
    if not is_adjacent_to_owner(state.tiles, tile.id, player.id):
        return "not-adjacent"
    return None


def attack_strength(state: GameState, attacker: Player, tile: HexTile) -> int:
    """Attacker strength before the die roll."""
    strength = 1
    if attacker.selected_citizen == CitizenRole.WARRIOR:
        strength += 1
    strength += count_adjacent_owned(state.tiles, tile.id, attacker.id)
    strength += attacker.status.combat_bonus
    if attacker.relic_power == RelicPower.WARLORD:
        strength += 1
    return strength


def defense_strength(state: GameState, defender_id: int, tile: HexTile) -> int:
    """Defender strength before the die roll."""
    strength = 1
    if tile.fortification is not None:
        strength += 1
    strength += count_adjacent_owned(state.tiles, tile.id, defender_id)
    return strength


def roll_battle(
    state: GameState, attacker: Player, tile: HexTile, rng: GameRandom
) -> BattleResult:
    """Compute strengths and roll one die per side. Ties go to the defender."""
    att = attack_strength(state, attacker, tile)
    dfn = defense_strength(state, tile.owner_id, tile)
    att_roll = rng.roll_die(reason="attack")
    def_roll = rng.roll_die(reason="defense")
    return BattleResult(
        attacker_won=att + att_roll > dfn + def_roll,
        attack_strength=att,
        defense_strength=dfn,
        attack_roll=att_roll,
        defense_roll=def_roll,
    )


def resolve_attack(
    state: GameState, attacker: Player, tile: HexTile, rng: GameRandom
) -> BattleResult:
    """Fight over a rival tile and apply the outcome.

    The action cost is paid by the caller before this runs.
    """
    defender = state.get_player(tile.owner_id)
    result = roll_battle(state, attacker, tile, rng)
    attacker.stats.record_attack(defender.id)

    if result.attacker_won:
        tile.owner_id = attacker.id
        tile.fortification = None
        tile.reveal()
        attacker.stats.battles_won += 1
        defender.stats.tiles_lost += 1

        text = f"{attacker.name} ATTACKS {defender.name} at {tile.label}!"
        stealable = [r for r in LOOTABLE if defender.resources.get(r) > 0]
        if stealable:
            stolen = rng.choice(stealable)
            defender.resources.remove(stolen, 1)
            attacker.gain(stolen, 1)
            result.loot = stolen
            text += f" Looted 1 {stolen.value.capitalize()}!"
    else:
        defender.stats.battles_won += 1
        text = f"{attacker.name} FAILS attack on {defender.name} at {tile.label}."

    logger.debug(
        "Battle at %s: %d+%d vs %d+%d, attacker %s",
        tile.id,
        result.attack_strength,
        result.attack_roll,
        result.defense_strength,
        result.defense_roll,
        "wins" if result.attacker_won else "loses",
    )
    state.add_log(
        text,
        LogKind.COMBAT,
        actor_id=attacker.id,
        target_id=defender.id,
        detail=LogDetail(dice=result.dice()),
    )
    return result
