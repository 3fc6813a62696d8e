"""Action resolution for Eclipse of Empires.

Every action after a player's first in a round costs one more unit of its
primary resource (fatigue). The emergency market is exempt.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .challenge import DECLARABLE_TYPES, start_claim
from .combat import resolve_attack, validate_attack
from .events import apply_scavenge_event, draw_event, trigger_relic_event
from .hexmap import is_adjacent_to_owner
from .state import (
    ACTION_COSTS,
    ACTION_ROLES,
    MARKET_RATE,
    SURPLUS_GRAIN,
    ActionKind,
    Fortification,
    GamePhase,
    LogDetail,
    LogKind,
    PendingDeclaration,
    RelicPower,
    Resource,
    TileType,
)

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom
    from .state import GameState, HexTile, Player

logger = logging.getLogger(__name__)


# ==========================================================================
# Costs
# ==========================================================================


def fatigue_cost(player: Player, kind: str) -> int:
    """Base cost of an action plus fatigue. Market has no fatigue."""
    kind = ActionKind(kind)
    if kind == ActionKind.MARKET:
        return MARKET_RATE
    if kind == ActionKind.ACTIVATE_RELIC:
        return 0
    _, base = ACTION_COSTS[kind]
    return base + player.fatigue


def is_free(player: Player, kind: str) -> bool:
    """Check if a relic power or status makes the next action free."""
    if kind == ActionKind.TRADE:
        return player.status.free_trades > 0
    if kind == ActionKind.FORTIFY:
        if player.status.free_fortify:
            return True
        return player.relic_power == RelicPower.FREE_FORTIFY and player.actions_taken == 0
    return False


def action_cost(player: Player, kind: str) -> tuple[str, int] | None:
    """Get (resource, amount) a role action would cost right now.

    Returns None for actions without a fixed resource (market, relic).
    """
    kind = ActionKind(kind)
    if kind not in ACTION_COSTS:
        return None
    resource, _ = ACTION_COSTS[kind]
    if is_free(player, kind):
        return resource, 0
    return resource, fatigue_cost(player, kind)


def can_afford(player: Player, kind: str) -> bool:
    cost = action_cost(player, kind)
    if cost is None:
        return True
    resource, amount = cost
    return player.resources.has(resource, amount)


def _pay(player: Player, kind: str) -> int:
    """Pay for a role action. Returns the amount paid."""
    resource, amount = action_cost(player, kind)
    player.resources.remove(resource, amount)
    return amount


# ==========================================================================
# Validation
# ==========================================================================


def validate_action(
    state: GameState,
    player: Player,
    kind: str,
    tile_id: str | None = None,
    payload: dict[str, Any] | None = None,
) -> str | None:
    """Check if an action may be performed. Returns error code or None."""
    if state.phase != GamePhase.ACTION:
        return "wrong-phase"
    try:
        action = ActionKind(kind)
    except ValueError:
        return "unknown-action"

    required_role = ACTION_ROLES.get(action)
    if action == ActionKind.TRADE and player.resources.grain > SURPLUS_GRAIN:
        required_role = None
    if required_role is not None:
        if player.selected_citizen is None:
            return "role-not-selected"
        if player.selected_citizen != required_role:
            return "wrong-role"

    if action == ActionKind.FORTIFY:
        tile = state.get_tile(tile_id)
        if tile is None:
            return "unknown-tile"
        if tile.owner_id != player.id:
            return "not-owner"
        if tile.fortification is not None:
            return "already-fortified"

    elif action == ActionKind.ATTACK:
        error = validate_attack(state, player, tile_id)
        if error:
            return error

    elif action == ActionKind.EXPLORE:
        tile = state.get_tile(tile_id)
        if tile is None:
            return "unknown-tile"
        if tile.owner_id is not None:
            return "tile-owned"
        if not is_adjacent_to_owner(state.tiles, tile.id, player.id):
            return "not-adjacent"
        declared = (payload or {}).get("declared_type")
        if declared is not None and declared not in DECLARABLE_TYPES:
            return "invalid-tile-type"

    elif action == ActionKind.ACTIVATE_RELIC:
        tile = state.get_tile(tile_id)
        if tile is None:
            return "unknown-tile"
        if tile.owner_id != player.id:
            return "not-owner"
        if not _is_hidden_relic(tile):
            return "not-hidden-relic"

    elif action == ActionKind.MARKET:
        cost_resource = _market_cost(payload)
        if cost_resource is None:
            return "invalid-resource"
        if not player.resources.has(cost_resource, MARKET_RATE):
            return "insufficient-resources"
        return None

    elif action != ActionKind.TRADE:
        raise ValueError(f"Unhandled action kind: {action}")

    if not can_afford(player, action):
        return "insufficient-resources"
    return None


def _is_hidden_relic(tile: HexTile) -> bool:
    return tile.true_type == TileType.RELIC_SITE and tile.public_type != TileType.RELIC_SITE


def _market_cost(payload: dict[str, Any] | None) -> Resource | None:
    """Get the resource paid at the market. The market only sells Grain."""
    try:
        cost_resource = Resource((payload or {}).get("cost"))
    except ValueError:
        return None
    if cost_resource == Resource.GRAIN:
        return None
    return cost_resource


# ==========================================================================
# Resolution
# ==========================================================================


def perform_action(
    state: GameState,
    player: Player,
    kind: str,
    tile_id: str | None,
    payload: dict[str, Any] | None,
    rng: GameRandom,
) -> str | None:
    """Validate and apply an action. Returns error code or None.

    On success the state may be left suspended on a pending declaration,
    challenge or event choice; the caller advances the turn once it clears.
    """
    error = validate_action(state, player, kind, tile_id, payload)
    if error:
        logger.warning("Player %d action %s rejected: %s", player.id, kind, error)
        return error

    action = ActionKind(kind)
    tile = state.get_tile(tile_id)

    if action == ActionKind.TRADE:
        _trade(state, player)
    elif action == ActionKind.FORTIFY:
        _fortify(state, player, tile)
    elif action == ActionKind.ATTACK:
        _pay(player, action)
        player.actions_taken += 1
        resolve_attack(state, player, tile, rng)
    elif action == ActionKind.EXPLORE:
        _explore(state, player, tile, (payload or {}).get("declared_type"), rng)
    elif action == ActionKind.ACTIVATE_RELIC:
        _activate_relic(state, player, tile, rng)
    elif action == ActionKind.MARKET:
        _market(state, player, payload)
    else:
        raise ValueError(f"Unhandled action kind: {action}")

    player.update_max_resources()
    return None


def _trade(state: GameState, player: Player) -> None:
    if is_free(player, ActionKind.TRADE):
        player.status.free_trades -= 1
        text = f"{player.name} uses a Free Trade: +1 Gold."
    else:
        paid = _pay(player, ActionKind.TRADE)
        text = f"{player.name} trades {paid} Grain for 1 Gold."
    player.resources.add(Resource.GOLD, 1)
    player.actions_taken += 1
    state.add_log(text, LogKind.INFO, actor_id=player.id)


def _fortify(state: GameState, player: Player, tile: HexTile) -> None:
    free = is_free(player, ActionKind.FORTIFY)
    _pay(player, ActionKind.FORTIFY)
    if player.status.free_fortify:
        player.status.free_fortify = False
    tile.fortification = Fortification(owner_id=player.id, level=1)
    player.actions_taken += 1
    state.add_log(
        f"{player.name} fortifies {tile.label}{' (Free)' if free else ''}.",
        LogKind.INFO,
        actor_id=player.id,
    )


def _explore(
    state: GameState,
    player: Player,
    tile: HexTile,
    declared_type: str | None,
    rng: GameRandom,
) -> None:
    if tile.true_type == TileType.RUINS:
        _scavenge(state, player, tile, rng)
        return

    if declared_type is None:
        if player.is_human:
            # Wait for the human to announce what they found
            state.pending_declaration = PendingDeclaration(player_id=player.id, tile_id=tile.id)
            return
        declared_type = tile.true_type

    _pay(player, ActionKind.EXPLORE)
    player.actions_taken += 1
    start_claim(state, player, tile, declared_type, rng)


def _scavenge(state: GameState, player: Player, tile: HexTile, rng: GameRandom) -> None:
    """Search Ruins once. They collapse into neutral Plains."""
    _pay(player, ActionKind.EXPLORE)
    player.actions_taken += 1
    card = draw_event(state, rng)
    tile.true_type = TileType.PLAINS
    tile.public_type = TileType.PLAINS
    tile.is_revealed = True
    state.add_log(
        f"{player.name} explores the Ruins at {tile.label}. They collapse into Plains. "
        f"Found: {card.title}",
        LogKind.EVENT,
        actor_id=player.id,
        detail=LogDetail(card=card.title),
    )
    apply_scavenge_event(state, card, player, rng)


def _activate_relic(
    state: GameState, player: Player, tile: HexTile, rng: GameRandom
) -> None:
    tile.public_type = TileType.RELIC_SITE
    player.stats.relic_sites_revealed += 1
    player.actions_taken += 1
    state.add_log(
        f"{player.name} unveils a Hidden Relic at {tile.label}!",
        LogKind.EVENT,
        actor_id=player.id,
    )
    trigger_relic_event(state, player, rng)


def _market(state: GameState, player: Player, payload: dict[str, Any] | None) -> None:
    cost_resource = _market_cost(payload)
    player.resources.remove(cost_resource, MARKET_RATE)
    player.resources.add(Resource.GRAIN, 1)
    player.actions_taken += 1
    state.add_log(
        f"Emergency Market: {player.name} trades {MARKET_RATE} "
        f"{cost_resource.value.capitalize()} for 1 Grain.",
        LogKind.INFO,
        actor_id=player.id,
    )


# ==========================================================================
# Human declaration
# ==========================================================================


def declare_tile_type(
    state: GameState, player: Player, declared_type: str, rng: GameRandom
) -> str | None:
    """Announce the type of the tile awaiting declaration. Returns error or None."""
    pending = state.pending_declaration
    if pending is None:
        return "no-pending-declaration"
    if pending.player_id != player.id:
        return "not-your-turn"
    if declared_type not in DECLARABLE_TYPES:
        return "invalid-tile-type"
    if not can_afford(player, ActionKind.EXPLORE):
        return "insufficient-resources"

    state.pending_declaration = None
    tile = state.get_tile(pending.tile_id)
    _pay(player, ActionKind.EXPLORE)
    player.actions_taken += 1
    start_claim(state, player, tile, declared_type, rng)
    return None


def cancel_declaration(state: GameState, player: Player) -> str | None:
    """Back out of a claim before announcing it. Nothing has been paid yet."""
    pending = state.pending_declaration
    if pending is None:
        return "no-pending-declaration"
    if pending.player_id != player.id:
        return "not-your-turn"
    state.pending_declaration = None
    return None
