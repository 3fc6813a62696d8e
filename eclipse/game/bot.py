"""Bot AI for Eclipse of Empires.

Each AI empire keeps a persistent mood toward the human seat (fear,
suspicion and a diplomatic stance) that it updates every turn before
choosing an action.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .actions import action_cost, can_afford
from .hexmap import frontier_ids
from .state import (
    SURPLUS_GRAIN,
    ActionKind,
    CitizenRole,
    GamePhase,
    Resource,
    Stance,
    TileType,
    Trait,
)

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom
    from .state import GameState, Player

logger = logging.getLogger(__name__)

AI_DIALOGUE: dict[str, list[str]] = {
    "coalition": [
        "We must unite against the leader.",
        "They are too strong to ignore.",
        "An alliance of necessity.",
    ],
    "fear_attack": [
        "I strike out of fear!",
        "Don't come any closer!",
        "Pre-emptive defense!",
    ],
    "attack": [
        "This territory is mine!",
        "Yield or perish.",
        "Your weakness is my opportunity.",
    ],
    "fortify": [
        "Defense is the best offense.",
        "Safe behind walls.",
        "Try to breach this.",
    ],
    "expand": [
        "New horizons.",
        "Claiming this for the glory of the faction.",
        "Manifest destiny.",
    ],
}

# Resources an AI will spend at the emergency market, in order of preference
RATION_SOURCES = [Resource.GOLD, Resource.STONE]

# Tiles worth lying about, and the lies told about them
BLUFFABLE = [TileType.PLAINS, TileType.MOUNTAINS]
BLUFF_TYPES = [TileType.GOLDMINE, TileType.RELIC_SITE]


def _clamp(value: float) -> int:
    return int(max(0, min(100, value)))


def bot_think(state: GameState, player: Player, rng: GameRandom) -> str | None:
    """Main bot AI decision function. Returns action ID or None.

    During the Action phase this also updates the bot's mood, since every
    turn starts by re-reading the board.
    """
    if player.is_eliminated or player.ai_state is None:
        return None

    if state.phase == GamePhase.CITIZEN_CHOICE:
        if player.selected_citizen is None:
            return f"select_role:{choose_role(state, player, rng).value}"
        return None

    if state.phase == GamePhase.ACTION:
        if state.is_suspended or state.current_player != player or player.has_passed:
            return None
        update_psychology(state, player, rng)
        return bot_select_action(state, player, rng)

    return None


# ==========================================================================
# Role selection
# ==========================================================================


def choose_role(state: GameState, player: Player, rng: GameRandom) -> CitizenRole:
    """Pick a citizen role from resource pressure."""
    tuning = state.options.tuning
    if state.round == 1:
        return CitizenRole.EXPLORER

    res = player.resources
    if res.grain < 1 and res.gold < 2:
        return CitizenRole.MERCHANT
    if res.stone >= 2 and rng.chance(tuning.builder_chance):
        return CitizenRole.BUILDER
    if res.grain >= 2 and rng.chance(tuning.warrior_chance):
        return CitizenRole.WARRIOR
    return CitizenRole.EXPLORER


# ==========================================================================
# Psychology
# ==========================================================================


def tracked_rival(state: GameState, ai: Player) -> Player | None:
    """Get the seat whose strength this AI watches (seat 0)."""
    rival = state.get_player(0)
    if rival is None or rival.id == ai.id:
        return None
    return rival


def strength_ratio(state: GameState, ai: Player, rival: Player) -> float:
    """Rival strength relative to the AI. Above 1 means the rival looks stronger."""
    rival_power = len(state.owned_tiles(rival.id)) + rival.resources.grain / 2
    ai_power = len(state.owned_tiles(ai.id)) + ai.resources.grain / 2 + 0.1
    return rival_power / ai_power


def was_attacked_by(ai: Player, rival: Player) -> bool:
    """Check if the rival has attacked this AI without being attacked first."""
    return ai.id in rival.stats.unique_players_attacked and (
        rival.id not in ai.stats.unique_players_attacked
    )


def update_psychology(state: GameState, ai: Player, rng: GameRandom) -> None:
    """Re-evaluate fear, suspicion and stance toward the tracked rival."""
    mood = ai.ai_state
    rival = tracked_rival(state, ai)
    if mood is None or rival is None:
        return

    tuning = state.options.tuning
    ratio = strength_ratio(state, ai, rival)
    fear = mood.fear
    suspicion = mood.suspicion

    if ratio > tuning.fear_ratio_high:
        fear += tuning.fear_rise
    if ratio < tuning.fear_ratio_low:
        fear -= tuning.fear_fall

    attacked = was_attacked_by(ai, rival)
    if attacked:
        suspicion = 100
    elif ratio > tuning.suspicion_ratio:
        suspicion += tuning.suspicion_rise

    if mood.has_trait(Trait.PARANOID):
        suspicion += tuning.paranoid_suspicion
    if mood.has_trait(Trait.CAUTIOUS):
        fear += tuning.cautious_fear

    if state.options.is_hard:
        fear += tuning.hard_drift
        suspicion += tuning.hard_drift
        if rival.vp > ai.vp + tuning.hard_vp_lead and mood.stance != Stance.WAR:
            mood.stance = Stance.WAR
            mood.pending_dialogue = rng.choice(AI_DIALOGUE["coalition"])

    fear = _clamp(fear)
    suspicion = _clamp(suspicion)

    # Stance only escalates
    old_stance = mood.stance
    stance = old_stance
    if stance != Stance.WAR:
        if fear > tuning.war_threshold and suspicion > tuning.war_threshold:
            stance = Stance.WAR
        elif attacked:
            stance = Stance.WAR
        elif suspicion > tuning.hostile_threshold:
            stance = Stance.HOSTILE

    if not mood.pending_dialogue:
        category = None
        if stance == Stance.WAR and old_stance != Stance.WAR:
            category = "fear_attack"
        elif stance == Stance.WAR:
            category = "attack"
        elif ai.selected_citizen == CitizenRole.BUILDER and fear > 50:
            category = "fortify"
        elif ai.selected_citizen == CitizenRole.EXPLORER:
            category = "expand"
        if category:
            mood.pending_dialogue = rng.choice(AI_DIALOGUE[category])

    if stance != old_stance:
        logger.debug("Player %d stance %s -> %s", ai.id, old_stance, stance)
    mood.fear = fear
    mood.suspicion = suspicion
    mood.stance = stance


# ==========================================================================
# Action selection
# ==========================================================================


def bot_select_action(state: GameState, player: Player, rng: GameRandom) -> str:
    """Pick the first affordable action in priority order."""
    # Priority-based decision making:
    # 1. Emergency rations if Grain is below what the role needs
    # 2. Unveil a hidden relic (sometimes)
    # 3. Trade if Merchant or swimming in Grain
    # 4. Fortify if Builder
    # 5. Attack if Warrior
    # 6. Explore if Explorer
    # 7. Pass
    tuning = state.options.tuning
    role = player.selected_citizen

    rations = bot_emergency_rations(player)
    if rations:
        return rations

    hidden_relics = [
        t
        for t in state.owned_tiles(player.id)
        if t.true_type == TileType.RELIC_SITE and t.public_type != TileType.RELIC_SITE
    ]
    if hidden_relics and rng.chance(tuning.relic_unveil_chance):
        return f"activate_relic:{hidden_relics[0].id}"

    if role == CitizenRole.MERCHANT or player.resources.grain > SURPLUS_GRAIN:
        if can_afford(player, ActionKind.TRADE):
            return "trade"

    if role == CitizenRole.BUILDER and can_afford(player, ActionKind.FORTIFY):
        unfortified = [t for t in state.owned_tiles(player.id) if t.fortification is None]
        if unfortified:
            return f"fortify:{rng.choice(unfortified).id}"

    if (
        role == CitizenRole.WARRIOR
        and player.status.can_attack
        and can_afford(player, ActionKind.ATTACK)
    ):
        target = bot_pick_attack_target(state, player, rng)
        if target:
            return f"attack:{target}"

    if role == CitizenRole.EXPLORER and can_afford(player, ActionKind.EXPLORE):
        explore = bot_pick_exploration(state, player, rng)
        if explore:
            return explore

    return "pass"


def bot_emergency_rations(player: Player) -> str | None:
    """Buy 1 Grain at the market if the role can't be played otherwise."""
    role = player.selected_citizen
    if role not in (CitizenRole.WARRIOR, CitizenRole.EXPLORER):
        return None
    kind = ActionKind.ATTACK if role == CitizenRole.WARRIOR else ActionKind.EXPLORE
    _, required = action_cost(player, kind)
    if player.resources.grain >= required:
        return None
    for source in RATION_SOURCES:
        if player.resources.has(source, 3):
            return f"market:{source.value}"
    return None


def bot_pick_attack_target(state: GameState, player: Player, rng: GameRandom) -> str | None:
    """Pick a rival tile next to our territory. At war, the tracked rival comes first."""
    enemy_ids = [
        tid
        for tid in frontier_ids(state.tiles, player.id)
        if state.tiles[tid].owner_id not in (None, player.id)
    ]
    if not enemy_ids:
        return None

    rival = tracked_rival(state, player)
    if rival is not None:
        rival_ids = [tid for tid in enemy_ids if state.tiles[tid].owner_id == rival.id]
        mood = player.ai_state
        at_war = mood.stance == Stance.WAR
        vengeful = mood.has_trait(Trait.VENGEFUL)
        if rival_ids and (
            at_war or (vengeful and rng.chance(state.options.tuning.vengeance_chance))
        ):
            return rng.choice(rival_ids)
    return rng.choice(enemy_ids)


def bot_pick_exploration(state: GameState, player: Player, rng: GameRandom) -> str | None:
    """Pick a neutral tile to scavenge or claim, deciding whether to bluff."""
    neutral_ids = [
        tid for tid in frontier_ids(state.tiles, player.id) if state.tiles[tid].owner_id is None
    ]
    if not neutral_ids:
        return None

    ruins = [tid for tid in neutral_ids if state.tiles[tid].true_type == TileType.RUINS]
    if ruins and rng.chance(state.options.tuning.ruin_preference):
        return f"explore:{ruins[0]}"

    claimable = [
        tid
        for tid in neutral_ids
        if tid not in ruins and state.tiles[tid].true_type != TileType.CAPITAL
    ] or ruins
    if not claimable:
        return None
    target = rng.choice(claimable)
    true_type = state.tiles[target].true_type
    if true_type == TileType.RUINS:
        return f"explore:{target}"
    return f"explore:{target}:{bot_declare(state, true_type, rng).value}"


def bot_declare(state: GameState, true_type: TileType, rng: GameRandom) -> TileType:
    """Announce a tile's type, sometimes inflating a plain tile into a rich one."""
    if true_type in BLUFFABLE and rng.chance(state.options.tuning.bluff_chance):
        return rng.choice(BLUFF_TYPES)
    return TileType(true_type)
