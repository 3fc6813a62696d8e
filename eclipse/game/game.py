"""Eclipse of Empires engine facade.

The presentation layer talks to the engine through EclipseGame: it reads
snapshots from `state` and sends intents (select_role, perform_action,
pass_turn, ...). Every intent is applied to a deep copy of the current
state and committed only if it succeeds, so a rejected intent never
leaves a half-applied state behind.

AI seats and the challenge countdown run on a logical clock advanced by
on_tick() (20 ticks per second). run_until_input() drives the same logic
synchronously, without think delays, for batch play and tests.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..game_utils.bot_helper import BotHelper
from ..game_utils.rng import GameRandom
from . import actions as rules
from .bot import bot_think
from .challenge import expire_challenge, respond_to_challenge
from .events import choose_event_resource
from .options import EclipseOptions
from .phases import advance_phase, end_turn, pass_turn, select_role, setup_game
from .scoring import ScoreBreakdown, final_standings
from .state import GamePhase, GameState, Player

logger = logging.getLogger(__name__)

# Phases that only wait for an acknowledgement
ACKNOWLEDGE_PHASES = (GamePhase.INCOME, GamePhase.EVENTS, GamePhase.SCORING)


@dataclass
class IntentResult:
    """Outcome of an intent: the current snapshot and an error code, if any."""

    state: GameState
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class EclipseGame:
    """
    Single-player Eclipse of Empires engine.

    Usage:
        game = EclipseGame(EclipseOptions(player_count=2), GameRandom(seed=1))
        game.start()
        game.advance_phase()                 # Income -> CitizenChoice
        game.select_role("explorer")
        game.advance_phase()                 # CitizenChoice -> Action
        result = game.perform_action("explore", "0,1", {"declared_type": "plains"})
        if result.error:
            ...
    """

    def __init__(self, options: EclipseOptions | None = None, rng: GameRandom | None = None):
        self.options = options or EclipseOptions()
        self.rng = rng or GameRandom()
        self.ticks = 0
        self._state = GameState(options=copy.deepcopy(self.options))

    # ==========================================================================
    # Snapshots
    # ==========================================================================

    @property
    def state(self) -> GameState:
        """The current snapshot. Replaced, never mutated, by every transition."""
        return self._state

    def snapshot(self) -> GameState:
        """Get a detached copy of the current snapshot."""
        return self._state.copy()

    def start(self) -> GameState:
        """Set up a new game: round 1, Income phase."""
        state = GameState(options=copy.deepcopy(self.options))
        setup_game(state, self.rng)
        self.ticks = 0
        self._state = state
        return self._state

    def final_standings(self) -> list[ScoreBreakdown]:
        """Get score breakdowns, best first."""
        return final_standings(self._state)

    # ==========================================================================
    # Intents
    # ==========================================================================

    def select_role(self, role: str) -> IntentResult:
        def apply(state: GameState, human: Player) -> str | None:
            return select_role(state, human, role)

        return self._human_intent("select_role", apply)

    def perform_action(
        self,
        kind: str,
        target_tile_id: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> IntentResult:
        """Take one action on the human's turn."""

        def apply(state: GameState, human: Player) -> str | None:
            error = self._check_turn(state, human)
            if error:
                return error
            error = rules.perform_action(state, human, kind, target_tile_id, payload, self.rng)
            if error:
                return error
            self._resume_turn(state)
            return None

        return self._human_intent("perform_action", apply)

    def pass_turn(self) -> IntentResult:
        def apply(state: GameState, human: Player) -> str | None:
            error = self._check_turn(state, human)
            if error:
                return error
            return pass_turn(state, human, self.rng)

        return self._human_intent("pass_turn", apply)

    def respond_to_challenge(self, challenge: bool) -> IntentResult:
        """Trust (False) or challenge (True) the pending AI claim."""

        def apply(state: GameState, human: Player) -> str | None:
            error = respond_to_challenge(state, human, challenge, self.rng)
            if error:
                return error
            self._resume_turn(state)
            return None

        return self._human_intent("respond_to_challenge", apply, allow_suspended=True)

    def declare_tile_type(self, tile_type: str) -> IntentResult:
        """Announce the type of the tile being claimed."""

        def apply(state: GameState, human: Player) -> str | None:
            error = rules.declare_tile_type(state, human, tile_type, self.rng)
            if error:
                return error
            self._resume_turn(state)
            return None

        return self._human_intent("declare_tile_type", apply, allow_suspended=True)

    def cancel_declaration(self) -> IntentResult:
        def apply(state: GameState, human: Player) -> str | None:
            return rules.cancel_declaration(state, human)

        return self._human_intent("cancel_declaration", apply, allow_suspended=True)

    def choose_event_resource(self, resource: str) -> IntentResult:
        """Take one unit of a resource for the pending event choice."""

        def apply(state: GameState, human: Player) -> str | None:
            pending = state.pending_choice
            resume = pending is not None and pending.resume_turn
            error = choose_event_resource(state, human, resource)
            if error:
                return error
            # A choice raised mid-turn hands the turn on once it is complete
            if resume:
                self._resume_turn(state)
            return None

        return self._human_intent("choose_event_resource", apply, allow_suspended=True)

    def advance_phase(self) -> IntentResult:
        """Acknowledge the current phase. Works without a human seat."""
        draft = self._state.copy()
        error = advance_phase(draft, self.rng)
        return self._commit("advance_phase", draft, error)

    def _human_intent(
        self,
        name: str,
        apply: Callable[[GameState, Player], str | None],
        allow_suspended: bool = False,
    ) -> IntentResult:
        """Run an intent for the human seat against a draft of the state."""
        if self._state.is_over:
            return self._reject(name, "game-over")
        if self._state.is_suspended and not allow_suspended:
            return self._reject(name, "awaiting-input")

        draft = self._state.copy()
        human = draft.human
        if human is None:
            return self._reject(name, "not-your-turn")
        if human.is_eliminated:
            return self._reject(name, "eliminated")
        return self._commit(name, draft, apply(draft, human))

    def _commit(self, name: str, draft: GameState, error: str | None) -> IntentResult:
        if error:
            return self._reject(name, error)
        self._state = draft
        return IntentResult(self._state)

    def _reject(self, name: str, error: str) -> IntentResult:
        logger.warning("Intent %s rejected: %s", name, error)
        return IntentResult(self._state, error)

    @staticmethod
    def _check_turn(state: GameState, player: Player) -> str | None:
        if state.phase != GamePhase.ACTION:
            return "wrong-phase"
        if state.current_player != player:
            return "not-your-turn"
        if player.has_passed:
            return "already-passed"
        return None

    def _resume_turn(self, state: GameState) -> None:
        """Move the turn cycle on once an action has fully resolved."""
        if state.phase == GamePhase.ACTION and not state.is_suspended:
            end_turn(state, self.rng)

    # ==========================================================================
    # Logical clock
    # ==========================================================================

    def on_tick(self) -> None:
        """Advance the logical clock by one tick."""
        if self._state.is_over:
            return
        self.ticks += 1
        draft = self._state.copy()

        pending = draft.pending_challenge
        if pending is not None:
            if pending.timer.tick():
                expire_challenge(draft, self.rng)
                self._resume_turn(draft)
            self._state = draft
            return

        if not draft.is_suspended:
            for bot in self._bots_to_act(draft):
                BotHelper.process_bot_action(
                    bot=bot,
                    think_fn=lambda bot=bot: bot_think(draft, bot, self.rng),
                    execute_fn=lambda action_id, bot=bot: self._run_bot_action(
                        draft, bot, action_id
                    ),
                )
            if draft.options.auto_advance:
                self._auto_advance(draft)

        self._state = draft

    def run_until_input(self, max_steps: int = 10_000) -> GameState:
        """Play AI turns and automatic phase changes until the human must act.

        Think delays are skipped. Stops early when the game ends or after
        max_steps transitions.
        """
        draft = self._state.copy()
        for _ in range(max_steps):
            if not self._step(draft):
                break
        self._state = draft
        return self._state

    def _step(self, state: GameState) -> bool:
        """Make one synchronous transition. Returns False if none is possible."""
        if state.is_over or state.is_suspended:
            return False

        for bot in self._bots_to_act(state):
            action_id = bot_think(state, bot, self.rng)
            if action_id:
                self._run_bot_action(state, bot, action_id)
                return True

        if state.options.auto_advance:
            return self._auto_advance(state)
        return False

    def _bots_to_act(self, state: GameState) -> list[Player]:
        if state.phase == GamePhase.CITIZEN_CHOICE:
            return [
                p
                for p in state.get_active_players()
                if p.is_bot and p.selected_citizen is None
            ]
        if state.phase == GamePhase.ACTION:
            player = state.current_player
            if player and player.is_bot and not player.has_passed:
                return [player]
        return []

    def _auto_advance(self, state: GameState) -> bool:
        """Acknowledge the phase on the human's behalf. Returns True if it advanced."""
        if state.is_suspended or state.is_over:
            return False
        if state.phase in ACKNOWLEDGE_PHASES or state.phase == GamePhase.CITIZEN_CHOICE:
            return advance_phase(state, self.rng) is None
        return False

    # ==========================================================================
    # Bot actions
    # ==========================================================================

    def _run_bot_action(self, state: GameState, bot: Player, action_id: str) -> None:
        """Execute a bot action id, passing the bot's turn if it was refused."""
        error = self._execute_bot_action(state, bot, action_id)
        if error:
            logger.warning("Bot %d action %s refused: %s", bot.id, action_id, error)
            if state.phase == GamePhase.ACTION and state.current_player == bot:
                pass_turn(state, bot, self.rng)
        BotHelper.jolt_bot(bot, state.options.bot_think_ticks)

    def _execute_bot_action(self, state: GameState, bot: Player, action_id: str) -> str | None:
        """Apply an action id of the form `kind[:arg[:arg]]`."""
        kind, _, rest = action_id.partition(":")
        args = rest.split(":") if rest else []

        if kind == "select_role":
            return select_role(state, bot, args[0])
        if kind == "pass":
            return pass_turn(state, bot, self.rng)

        error = self._check_turn(state, bot)
        if error:
            return error

        tile_id = None
        payload: dict[str, Any] = {}
        if kind == "market":
            payload = {"cost": args[0]}
        elif args:
            tile_id = args[0]
            if len(args) > 1:
                payload = {"declared_type": args[1]}

        error = rules.perform_action(state, bot, kind, tile_id, payload, self.rng)
        if error:
            return error
        self._resume_turn(state)
        return None
