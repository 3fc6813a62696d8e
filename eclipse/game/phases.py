"""Round and turn flow for Eclipse of Empires.

A round runs Income -> CitizenChoice -> Action -> Events -> Scoring, then
either rolls over into the next round's Income or ends the game. Phase
changes that wait on the human (Income, CitizenChoice, Events, Scoring)
happen through advance_phase(); the Action phase ends by itself once
every empire has passed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .bot import choose_role
from .events import apply_global_event, draw_event
from .hexmap import generate_map, place_capitals
from .objectives import get_objective
from .scoring import final_standings, income_rates, update_scores
from .state import (
    CAPITAL_SITE_BONUS,
    DEFAULT_SITE_BONUS,
    FACTION_TRAITS,
    FACTIONS,
    STARTING_RESOURCES,
    AiState,
    CitizenRole,
    GamePhase,
    LogKind,
    Player,
    RelicPower,
    Resource,
    ResourcePool,
    TileType,
)

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom
    from .state import GameState

logger = logging.getLogger(__name__)

# Rounds in which a new public objective is revealed
PUBLIC_OBJECTIVE_ROUNDS = (2, 3, 4)

# Resources an AI may receive as its wild income
WILD_RESOURCES = [Resource.GRAIN, Resource.STONE, Resource.GOLD]


# ==========================================================================
# Setup
# ==========================================================================


def setup_game(state: GameState, rng: GameRandom) -> None:
    """Generate the map, decks and empires. Leaves the game in round 1 Income."""
    options = state.options
    count = options.player_count

    state.tiles = generate_map(count, rng)
    capitals = place_capitals(state.tiles, count, rng)

    state.event_deck.build_standard_deck()
    state.event_deck.shuffle(rng)
    state.objective_deck.build_standard_deck()
    state.objective_deck.shuffle(rng)

    state.players = [
        create_player(state, seat, replaced) for seat, (_, replaced) in enumerate(capitals)
    ]
    for player in state.players:
        player.secret_objectives = [state.objective_deck.draw()]

    state.phase = GamePhase.INCOME
    state.round = 1
    state.set_turn_order([p.id for p in state.players])
    state.pass_order = []
    state.add_log(
        f"Eclipse 1 Begins. Rules: {'Casual' if options.is_casual else 'Standard'}. "
        f"AI: {'Hard' if options.is_hard else 'Standard'}.",
        LogKind.PHASE,
    )
    logger.info("Game set up with %d players", count)


def create_player(state: GameState, seat: int, replaced_type: str) -> Player:
    """Build the empire sitting at a seat, given the hex its capital replaced."""
    options = state.options
    faction = FACTIONS[seat]
    is_human = seat == 0 and not options.spectate

    resources = ResourcePool()
    for resource, amount in STARTING_RESOURCES.items():
        resources.add(resource, amount)
    bonus = CAPITAL_SITE_BONUS.get(TileType(replaced_type), DEFAULT_SITE_BONUS)
    for resource, amount in bonus.items():
        resources.add(resource, amount)

    ai_state = None
    if not is_human:
        mood = options.tuning.hard_starting_mood if options.is_hard else 0
        ai_state = AiState(
            fear=mood,
            suspicion=mood,
            traits=list(FACTION_TRAITS[faction.name]),
        )

    return Player(
        id=seat,
        name="You" if is_human else faction.name,
        faction=faction,
        is_human=is_human,
        resources=resources,
        ai_state=ai_state,
        bot_think_ticks=options.bot_think_ticks,
    )


# ==========================================================================
# Phase machine
# ==========================================================================


def advance_phase(state: GameState, rng: GameRandom) -> str | None:
    """Acknowledge the current phase and move to the next. Returns error or None."""
    if state.is_over:
        return "game-over"
    if state.is_suspended:
        return "awaiting-input"

    phase = state.phase
    if phase == GamePhase.INCOME:
        enter_citizen_choice(state, rng)
    elif phase == GamePhase.CITIZEN_CHOICE:
        human = state.human
        if human and not human.is_eliminated and human.selected_citizen is None:
            return "human-must-choose-role"
        enter_action(state, rng)
    elif phase == GamePhase.ACTION:
        # The Action phase only ends when everyone has passed
        return "wrong-phase"
    elif phase == GamePhase.EVENTS:
        enter_scoring(state)
    elif phase == GamePhase.SCORING:
        if state.round >= state.options.total_rounds:
            enter_end_game(state)
        else:
            start_next_round(state, rng)
    else:
        raise ValueError(f"Unhandled phase: {phase}")
    return None


def enter_citizen_choice(state: GameState, rng: GameRandom) -> None:
    """Clear last round's roles and let the AI empires pick theirs."""
    state.phase = GamePhase.CITIZEN_CHOICE
    for player in state.players:
        player.selected_citizen = None
    for player in state.get_active_players():
        if player.is_bot:
            player.selected_citizen = choose_role(state, player, rng)
            logger.debug("Player %d picks %s", player.id, player.selected_citizen)
    logger.debug("Round %d: citizen choice", state.round)


def enter_action(state: GameState, rng: GameRandom) -> None:
    """Reveal roles, fix the turn order and start the turn cycle."""
    check_eliminations(state)
    state.phase = GamePhase.ACTION

    active = state.get_active_players()
    state.set_turn_order(compute_turn_order(state))
    if state.round > 1 and state.pass_order:
        order = " → ".join(state.get_player(pid).name for pid in state.turn_order)
        state.add_log(f"Turn Order determined by passing: {order}", LogKind.INFO)
    elif state.turn_order:
        first = state.get_player(state.turn_order[0])
        state.add_log(f"Turn Order updated. {first.name} goes first.", LogKind.INFO)
    state.pass_order = []

    state.add_log("Council Session - Citizens Revealed", LogKind.PHASE)
    for player in active:
        if player.is_bot and player.selected_citizen:
            state.add_log(
                f"{player.name} is a {CitizenRole(player.selected_citizen).value.capitalize()}",
                LogKind.INFO,
                actor_id=player.id,
            )
    logger.debug("Round %d: action phase, order %s", state.round, state.turn_order)

    if all(p.has_passed for p in active):
        enter_events(state, rng)


def compute_turn_order(state: GameState) -> list[int]:
    """Get this round's turn order.

    From round 2 the first empire to pass last round goes first; empires
    that never passed follow in id order. Otherwise seats rotate by round.
    """
    active_ids = sorted(p.id for p in state.get_active_players())
    if not active_ids:
        return []
    if state.round > 1 and state.pass_order:
        passed = [pid for pid in state.pass_order if pid in active_ids]
        missing = [pid for pid in active_ids if pid not in passed]
        return passed + missing
    shift = (state.round - 1) % len(active_ids)
    return active_ids[shift:] + active_ids[:shift]


def enter_events(state: GameState, rng: GameRandom) -> None:
    """Draw the round's event card and apply it to every surviving empire.

    The state stays suspended if the human has to pick resources.
    """
    check_eliminations(state)
    state.phase = GamePhase.EVENTS
    card = draw_event(state, rng)
    apply_global_event(state, card, rng)
    logger.debug("Round %d: events phase, drew %s", state.round, card.id)


def enter_scoring(state: GameState) -> None:
    check_eliminations(state)
    state.phase = GamePhase.SCORING
    update_scores(state)
    logger.debug("Round %d: scoring", state.round)


def enter_end_game(state: GameState) -> None:
    """Score the game one last time and lock it."""
    state.phase = GamePhase.END_GAME
    state.active_event = None
    update_scores(state)
    standings = final_standings(state)
    winner = standings[0]
    state.add_log(
        f"The Eclipse ends. {winner.name} prevails with {winner.total} VP.", LogKind.PHASE
    )
    logger.info("Game over after %d rounds, winner %s", state.round, winner.name)


def start_next_round(state: GameState, rng: GameRandom) -> None:
    """Roll over into the next round's Income phase.

    Income is collected with the statuses of the round that just ended
    (a passive-income event still pays out), then every round-scoped
    status is cleared and relic powers re-arm.
    """
    state.round += 1
    state.phase = GamePhase.INCOME
    state.active_event = None
    state.add_log(f"Eclipse {state.round}", LogKind.PHASE)

    if state.round in PUBLIC_OBJECTIVE_ROUNDS and state.objective_deck.size() > 0:
        objective_id = state.objective_deck.draw()
        state.public_objectives.append(objective_id)
        state.add_log(
            f"Public Imperative Revealed: {get_objective(objective_id).name}", LogKind.PHASE
        )

    for player in state.players:
        if not player.is_eliminated:
            collect_income(state, player, rng)
        reset_round(player)
    logger.debug("Round %d begins", state.round)


def collect_income(state: GameState, player: Player, rng: GameRandom) -> None:
    for resource, amount in income_rates(state, player).items():
        player.resources.add(resource, amount)
    if player.is_bot:
        player.resources.add(rng.choice(WILD_RESOURCES), 1)
    player.update_max_resources()


def reset_round(player: Player) -> None:
    """Clear round-scoped state and re-arm relic powers."""
    player.status.reset()
    player.has_passed = player.is_eliminated
    player.actions_taken = 0
    if player.is_eliminated:
        return
    if player.relic_power == RelicPower.TRADE_BARON:
        player.status.free_trades = 1
    if player.relic_power == RelicPower.DOUBLE_TIME:
        player.status.extra_actions = 1


def check_eliminations(state: GameState) -> list[Player]:
    """Eliminate every empire that owns no tiles. Returns the newly eliminated."""
    eliminated = []
    for player in state.players:
        if player.is_eliminated or state.owned_tiles(player.id):
            continue
        player.is_eliminated = True
        player.has_passed = True
        player.selected_citizen = None
        eliminated.append(player)
        state.add_log(
            f"{player.name} has been eliminated from the game!",
            LogKind.COMBAT,
            target_id=player.id,
        )
        logger.info("Player %d eliminated in round %d", player.id, state.round)
    return eliminated


# ==========================================================================
# Citizen choice
# ==========================================================================


def select_role(state: GameState, player: Player, role: str) -> str | None:
    """Pick the player's citizen role for the round. Returns error or None."""
    if state.phase != GamePhase.CITIZEN_CHOICE:
        return "wrong-phase"
    try:
        chosen = CitizenRole(role)
    except ValueError:
        return "invalid-role"
    if player.selected_citizen is not None:
        return "role-already-selected"
    player.selected_citizen = chosen
    logger.debug("Player %d selects %s", player.id, chosen)
    return None


# ==========================================================================
# Action-phase turn cycle
# ==========================================================================


def record_pass(state: GameState, player: Player) -> None:
    player.has_passed = True
    if player.id not in state.pass_order:
        state.pass_order.append(player.id)


def pass_turn(state: GameState, player: Player, rng: GameRandom) -> str | None:
    """Pass for the rest of the round. Returns error or None."""
    if state.phase != GamePhase.ACTION:
        return "wrong-phase"
    if state.current_player != player:
        return "not-your-turn"
    if player.has_passed:
        return "already-passed"

    record_pass(state, player)
    state.add_log(f"{player.name} passes.", LogKind.INFO, actor_id=player.id)
    end_turn(state, rng)
    return None


def end_turn(state: GameState, rng: GameRandom) -> None:
    """Move the turn cycle along after the current player acted or passed.

    Order of checks:
    1. An extra action lets the same player go again
    2. If everyone has passed the Action phase ends
    3. Players under the turn-lost penalty are passed over
    4. Sunset rule: a player who acted while every rival had passed must pass
    """
    player = state.current_player
    if player and player.status.extra_actions > 0 and not player.has_passed:
        player.status.extra_actions -= 1
        state.add_log(f"{player.name} takes an extra action.", LogKind.INFO, actor_id=player.id)
        return

    active = state.get_active_players()
    if all(p.has_passed for p in active):
        state.add_log("All players passed. Events Phase beginning.", LogKind.PHASE)
        enter_events(state, rng)
        return

    index = state.next_open_index()
    following = state.get_player(state.turn_order[index])
    while following.status.turn_lost:
        following.status.turn_lost = False
        record_pass(state, following)
        state.add_log(
            f"{following.name} serves Penalty: Turn Lost.", LogKind.ALERT, actor_id=following.id
        )
        if all(p.has_passed for p in active):
            state.add_log("All players passed. Events Phase beginning.", LogKind.PHASE)
            enter_events(state, rng)
            return
        index = state.next_open_index(index)
        following = state.get_player(state.turn_order[index])

    if player and len(active) > 1 and following.id == player.id and not player.has_passed:
        record_pass(state, player)
        state.add_log("Sunset Rule: All rivals passed. Round ends.", LogKind.PHASE)
        enter_events(state, rng)
        return

    state.turn_order_index = index
