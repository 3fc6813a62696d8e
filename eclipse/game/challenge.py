"""Declare and challenge protocol for Eclipse of Empires.

Claiming a neutral tile means announcing its type, truthfully or not.
Before the claim stands, a rival may call the bluff:
- Human claims are contested by AI empires rolling against their suspicion
- AI claims open a timed window in which the human may challenge
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .events import trigger_relic_event
from .state import (
    CHALLENGE_FINE,
    LogDetail,
    LogKind,
    PendingChallenge,
    Resource,
    TileType,
    Trait,
)

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom
    from .state import GameState, HexTile, Player

logger = logging.getLogger(__name__)

# Types a claimant may announce
DECLARABLE_TYPES = [
    TileType.PLAINS,
    TileType.MOUNTAINS,
    TileType.GOLDMINE,
    TileType.RELIC_SITE,
    TileType.RUINS,
]

TILE_LABELS: dict[str, str] = {
    TileType.PLAINS: "Plains",
    TileType.MOUNTAINS: "Mountains",
    TileType.GOLDMINE: "Goldmine",
    TileType.RELIC_SITE: "Relic Site",
    TileType.RUINS: "Ruins",
    TileType.CAPITAL: "Capital",
}


def tile_label(tile_type: str) -> str:
    return TILE_LABELS[TileType(tile_type)]


# ==========================================================================
# Challenge decisions
# ==========================================================================


def challenge_chance(state: GameState, ai: Player) -> float:
    """Probability that an AI challenges a human claim."""
    tuning = state.options.tuning
    mood = ai.ai_state
    if mood.suspicion >= 100:
        return 1.0

    chance = tuning.challenge_base
    if mood.suspicion > tuning.challenge_suspicion_threshold:
        chance += tuning.challenge_suspicion_bonus
    if mood.has_trait(Trait.PARANOID):
        chance += tuning.challenge_paranoid_bonus
    if mood.has_trait(Trait.GREEDY):
        chance += tuning.challenge_greedy_bonus
    if state.options.is_hard:
        chance += tuning.challenge_hard_bonus
    return chance


def find_challenger(state: GameState, declarer: Player, rng: GameRandom) -> Player | None:
    """Let each eligible AI roll in turn order; the first success challenges."""
    for player in state.turn_players:
        if player.id == declarer.id or player.is_human or player.ai_state is None:
            continue
        if player.is_eliminated or player.status.turn_lost:
            continue
        if rng.chance(challenge_chance(state, player)):
            logger.debug("Player %d challenges claim by %d", player.id, declarer.id)
            return player
    return None


def human_can_challenge(state: GameState, declarer: Player) -> Player | None:
    """Get the human if they are in a position to contest an AI claim."""
    human = state.human
    if human is None or human.id == declarer.id:
        return None
    if human.is_eliminated or human.has_passed or human.status.turn_lost:
        return None
    return human


# ==========================================================================
# Claim flow
# ==========================================================================


def start_claim(
    state: GameState,
    player: Player,
    tile: HexTile,
    declared_type: str,
    rng: GameRandom,
) -> None:
    """Announce a claim. The claim cost has already been paid.

    Either resolves the claim immediately or leaves a pending challenge
    on the state for the human to answer.
    """
    declared = TileType(declared_type)
    logger.debug(
        "Player %d claims %s as %s (true %s)", player.id, tile.id, declared, tile.true_type
    )

    if player.is_human:
        challenger = find_challenger(state, player, rng)
        if challenger is None:
            finalize_claim(state, player, tile, declared, rng)
        else:
            resolve_challenge(state, player, challenger, tile, declared, rng)
        return

    human = human_can_challenge(state, player)
    if human is None:
        finalize_claim(state, player, tile, declared, rng)
        return

    pending = PendingChallenge(
        declarer_id=player.id,
        tile_id=tile.id,
        declared_type=declared,
        true_type=tile.true_type,
    )
    pending.timer.start(state.options.challenge_window_seconds)
    state.pending_challenge = pending
    state.add_log(
        f"{player.name} is attempting to claim {tile.label}...",
        LogKind.INFO,
        actor_id=player.id,
    )


def finalize_claim(
    state: GameState,
    player: Player,
    tile: HexTile,
    declared_type: str,
    rng: GameRandom,
) -> None:
    """Let an unchallenged claim stand."""
    tile.owner_id = player.id
    tile.is_revealed = True
    tile.public_type = declared_type
    player.stats.tiles_revealed += 1

    state.add_log(
        f"{player.name} claims {tile.label} as {tile_label(declared_type)}.",
        LogKind.BLUFF,
        actor_id=player.id,
        detail=LogDetail(declared_type=declared_type),
    )
    if tile.true_type == TileType.RELIC_SITE and declared_type == TileType.RELIC_SITE:
        _secure_relic(state, player, rng)


def resolve_challenge(
    state: GameState,
    declarer: Player,
    challenger: Player,
    tile: HexTile,
    declared_type: str,
    rng: GameRandom,
) -> bool:
    """Settle a contested claim. Returns True if the declarer was lying."""
    lied = declared_type != tile.true_type
    text = f"CHALLENGE! {challenger.name} disputes {declarer.name}'s claim at {tile.label}."
    detail = LogDetail(tile_type=tile.true_type, declared_type=declared_type)

    if lied:
        challenger.vp += 1
        declarer.vp = max(0, declarer.vp - 1)
        tile.clear_owner()
        tile.reveal()
        text += f" Caught lying! (Real: {tile_label(tile.true_type)}) Tile neutralized."
        state.add_log(
            text, LogKind.BLUFF, actor_id=challenger.id, target_id=declarer.id, detail=detail
        )
        return True

    text += " But the claim was true!"
    if state.options.is_casual:
        if challenger.resources.has(Resource.GOLD, CHALLENGE_FINE):
            challenger.resources.remove(Resource.GOLD, CHALLENGE_FINE)
            declarer.gain(Resource.GOLD, CHALLENGE_FINE)
            text += f" {challenger.name} pays {CHALLENGE_FINE} Gold in reparations."
        else:
            challenger.vp = max(0, challenger.vp - 1)
            text += f" {challenger.name} loses Reputation (VP)."
    else:
        challenger.status.turn_lost = True
        text += f" Penalty: {challenger.name} loses their next turn!"

    tile.owner_id = declarer.id
    tile.reveal()
    declarer.stats.tiles_revealed += 1
    state.add_log(
        text, LogKind.BLUFF, actor_id=challenger.id, target_id=declarer.id, detail=detail
    )
    if tile.true_type == TileType.RELIC_SITE:
        _secure_relic(state, declarer, rng)
    return False


def respond_to_challenge(
    state: GameState, player: Player, challenge: bool, rng: GameRandom
) -> str | None:
    """Answer a pending AI claim. Returns error code or None."""
    pending = state.pending_challenge
    if pending is None:
        return "no-pending-challenge"
    if not player.is_human:
        return "not-your-turn"

    state.pending_challenge = None
    declarer = state.get_player(pending.declarer_id)
    tile = state.get_tile(pending.tile_id)
    if challenge:
        resolve_challenge(state, declarer, player, tile, pending.declared_type, rng)
    else:
        state.add_log(f"You trusted {declarer.name}'s claim.", LogKind.BLUFF, actor_id=player.id)
        finalize_claim(state, declarer, tile, pending.declared_type, rng)
    return None


def expire_challenge(state: GameState, rng: GameRandom) -> None:
    """Trust the pending claim once the challenge window closes."""
    pending = state.pending_challenge
    if pending is None:
        return
    state.pending_challenge = None
    declarer = state.get_player(pending.declarer_id)
    state.add_log(f"No challenge to {declarer.name}'s claim.", LogKind.INFO)
    finalize_claim(state, declarer, state.get_tile(pending.tile_id), pending.declared_type, rng)


def _secure_relic(state: GameState, player: Player, rng: GameRandom) -> None:
    player.gain(Resource.RELIC, 1)
    player.stats.relic_sites_revealed += 1
    state.add_log(f"{player.name} secures a Relic Site!", LogKind.EVENT, actor_id=player.id)
    trigger_relic_event(state, player, rng)
