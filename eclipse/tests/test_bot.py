"""Tests for the AI empires."""

import pytest

from eclipse.game.bot import (
    AI_DIALOGUE,
    bot_select_action,
    bot_think,
    choose_role,
    strength_ratio,
    tracked_rival,
    update_psychology,
)
from eclipse.game.state import (
    CitizenRole,
    GamePhase,
    Stance,
    TileType,
)
from eclipse.game_utils.rng import GameRandom, ScriptedRandom


def own(state, player_id, *tile_ids):
    for tid in tile_ids:
        state.tiles[tid].owner_id = player_id


class TestChooseRole:
    """Tests for AI role selection."""

    def test_first_round_explores(self, state):
        ai = state.players[1]
        state.round = 1
        ai.resources.stone = 5
        assert choose_role(state, ai, GameRandom(1)) == CitizenRole.EXPLORER

    def test_broke_ai_trades(self, state):
        ai = state.players[1]
        state.round = 2
        ai.resources.gold = 1
        assert choose_role(state, ai, GameRandom(1)) == CitizenRole.MERCHANT

    def test_stone_suggests_builder(self, state):
        ai = state.players[1]
        state.round = 2
        ai.resources.grain = 1
        ai.resources.stone = 2
        assert choose_role(state, ai, ScriptedRandom(floats=[0.1])) == CitizenRole.BUILDER

    def test_grain_suggests_warrior(self, state):
        ai = state.players[1]
        state.round = 3
        ai.resources.grain = 2
        assert choose_role(state, ai, ScriptedRandom(floats=[0.1])) == CitizenRole.WARRIOR

    def test_fallback_explorer(self, state):
        ai = state.players[1]
        state.round = 3
        ai.resources.grain = 2
        ai.resources.stone = 2
        rng = ScriptedRandom(floats=[0.9, 0.9])
        assert choose_role(state, ai, rng) == CitizenRole.EXPLORER


class TestPsychology:
    """Tests for fear, suspicion and stance."""

    def test_tracks_seat_zero(self, state):
        assert tracked_rival(state, state.players[1]) is state.players[0]
        assert tracked_rival(state, state.players[0]) is None

    def test_strength_ratio(self, state, center, ring):
        human, ai = state.players
        own(state, human.id, center, ring[0])
        human.resources.grain = 4
        # Human: 3 hexes + 2; AI: 1 hex + 0.1
        assert strength_ratio(state, ai, human) == pytest.approx(5 / 1.1)

    def test_strong_rival_raises_fear_and_suspicion(self, state, center, ring):
        human, ai = state.players
        own(state, human.id, center, ring[0])
        human.resources.grain = 4
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.fear == 5
        assert ai.ai_state.suspicion == 2
        assert ai.ai_state.stance == Stance.NEUTRAL

    def test_weak_rival_calms_fear(self, state, center, ring):
        human, ai = state.players
        own(state, ai.id, center, ring[0], ring[1])
        ai.ai_state.fear = 10
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.fear == 8

    def test_unprovoked_attack_means_war(self, state):
        """Test that being attacked first sets suspicion to 100 and declares war."""
        human, ai = state.players
        human.stats.record_attack(ai.id)
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.suspicion == 100
        assert ai.ai_state.stance == Stance.WAR
        assert ai.ai_state.pending_dialogue in AI_DIALOGUE["fear_attack"]

    def test_retaliation_is_not_provocation(self, state):
        human, ai = state.players
        ai.stats.record_attack(human.id)
        human.stats.record_attack(ai.id)
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.suspicion < 100
        assert ai.ai_state.stance == Stance.NEUTRAL

    def test_hostile_threshold(self, state, center, ring):
        human, ai = state.players
        own(state, human.id, center, ring[0])
        human.resources.grain = 4
        ai.ai_state.suspicion = 49
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.suspicion == 51
        assert ai.ai_state.stance == Stance.HOSTILE

    def test_stance_never_deescalates(self, state):
        ai = state.players[1]
        ai.ai_state.stance = Stance.WAR
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.fear == 0
        assert ai.ai_state.stance == Stance.WAR

    def test_values_are_clamped(self, state, center, ring):
        human, ai = state.players
        own(state, human.id, center, ring[0])
        human.resources.grain = 4
        ai.ai_state.fear = 99
        ai.ai_state.suspicion = 99
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.fear == 100
        assert ai.ai_state.suspicion == 100
        assert ai.ai_state.stance == Stance.WAR

    def test_paranoid_trait(self, make_state):
        state = make_state(player_count=4)
        jovian = state.players[3]
        update_psychology(state, jovian, GameRandom(1))
        assert jovian.ai_state.suspicion == 10

    def test_hard_mode_coalition(self, make_state):
        """Test that hard AIs go to war against a runaway leader."""
        state = make_state(ai_difficulty="hard")
        human, ai = state.players
        ai.ai_state.fear = 0
        ai.ai_state.suspicion = 0
        human.vp = 10
        update_psychology(state, ai, GameRandom(1))
        assert ai.ai_state.stance == Stance.WAR
        assert ai.ai_state.pending_dialogue in AI_DIALOGUE["coalition"]
        assert ai.ai_state.fear == 2
        assert ai.ai_state.suspicion == 2

    def test_dialogue_is_spoken_once(self, state):
        human, ai = state.players
        human.stats.record_attack(ai.id)
        update_psychology(state, ai, GameRandom(1))
        line = ai.ai_state.pending_dialogue
        entry = state.add_log("Mars Confederacy passes.", actor_id=ai.id)
        assert entry.text == f'"{line}" - Mars Confederacy passes.'
        assert ai.ai_state.pending_dialogue is None

    def test_spectated_seat_zero_has_no_rival(self, make_state):
        state = make_state(spectate=True)
        seat0 = state.players[0]
        seat0.ai_state.fear = 7
        update_psychology(state, seat0, GameRandom(1))
        assert seat0.ai_state.fear == 7


class TestSelectAction:
    """Tests for the AI's action priorities."""

    def test_emergency_rations(self, state):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.WARRIOR
        ai.resources.gold = 3
        assert bot_select_action(state, ai, GameRandom(1)) == "market:gold"

        ai.resources.gold = 0
        ai.resources.stone = 3
        assert bot_select_action(state, ai, GameRandom(1)) == "market:stone"

    def test_no_rations_for_merchant(self, state):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.MERCHANT
        ai.resources.gold = 3
        assert bot_select_action(state, ai, GameRandom(1)) == "pass"

    def test_unveil_hidden_relic(self, state, ring):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.BUILDER
        own(state, ai.id, ring[0])
        state.tiles[ring[0]].true_type = TileType.RELIC_SITE
        action = bot_select_action(state, ai, ScriptedRandom(floats=[0.1]))
        assert action == f"activate_relic:{ring[0]}"

    def test_merchant_trades(self, state):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.MERCHANT
        ai.resources.grain = 2
        assert bot_select_action(state, ai, GameRandom(1)) == "trade"

    def test_builder_fortifies(self, state, homes):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.BUILDER
        ai.resources.stone = 2
        assert bot_select_action(state, ai, GameRandom(1)) == f"fortify:{homes[1]}"

    def test_warrior_attacks(self, state, center, ring):
        human, ai = state.players
        ai.selected_citizen = CitizenRole.WARRIOR
        ai.resources.grain = 1
        own(state, ai.id, center)
        own(state, human.id, ring[0])
        # Not at war and the vengeance roll fails: any rival hex will do
        action = bot_select_action(state, ai, ScriptedRandom(floats=[0.9]))
        assert action == f"attack:{ring[0]}"

    def test_at_war_prefers_tracked_rival(self, make_state, center, ring):
        state = make_state(player_count=4)
        human, ai, venus = state.players[0], state.players[1], state.players[2]
        ai.selected_citizen = CitizenRole.WARRIOR
        ai.resources.grain = 1
        ai.ai_state.stance = Stance.WAR
        own(state, ai.id, center)
        own(state, venus.id, ring[1], ring[2])
        own(state, human.id, ring[4])
        action = bot_select_action(state, ai, ScriptedRandom(ints=[0]))
        assert action == f"attack:{ring[4]}"

    def test_blocked_warrior_passes(self, state, center, ring):
        human, ai = state.players
        ai.selected_citizen = CitizenRole.WARRIOR
        ai.resources.grain = 1
        ai.status.can_attack = False
        own(state, ai.id, center)
        own(state, human.id, ring[0])
        assert bot_select_action(state, ai, GameRandom(1)) == "pass"

    def test_explorer_prefers_ruins(self, state, center, ring):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.EXPLORER
        ai.resources.grain = 1
        own(state, ai.id, center)
        state.tiles[ring[2]].true_type = TileType.RUINS
        state.tiles[ring[2]].public_type = TileType.RUINS
        action = bot_select_action(state, ai, ScriptedRandom(floats=[0.1]))
        assert action == f"explore:{ring[2]}"

    def test_explorer_bluffs(self, state, center):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.EXPLORER
        ai.resources.grain = 1
        own(state, ai.id, center)
        action = bot_select_action(state, ai, ScriptedRandom(floats=[0.1], ints=[0, 1]))
        kind, target, declared = action.split(":")
        assert kind == "explore"
        assert state.tiles[target].owner_id is None
        assert declared == "relic_site"

    def test_explorer_tells_truth(self, state, center):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.EXPLORER
        ai.resources.grain = 1
        own(state, ai.id, center)
        action = bot_select_action(state, ai, ScriptedRandom(floats=[0.9]))
        assert action.endswith(":plains")

    def test_explorer_skips_neutral_capitals(self, state):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.EXPLORER
        ai.resources.grain = 1
        # Only the AI's corner home; every neighbor is an abandoned capital
        for tile in state.tiles.values():
            if tile.owner_id is None:
                tile.true_type = TileType.CAPITAL
        assert bot_select_action(state, ai, GameRandom(1)) == "pass"

    def test_nothing_to_do(self, state):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.EXPLORER
        assert bot_select_action(state, ai, GameRandom(1)) == "pass"


class TestBotThink:
    """Tests for the bot entry point."""

    def test_citizen_choice(self, state):
        ai = state.players[1]
        state.phase = GamePhase.CITIZEN_CHOICE
        state.round = 1
        assert bot_think(state, ai, GameRandom(1)) == "select_role:explorer"
        ai.selected_citizen = CitizenRole.EXPLORER
        assert bot_think(state, ai, GameRandom(1)) is None

    def test_waits_for_its_turn(self, state):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.MERCHANT
        assert state.current_player.id == 0
        assert bot_think(state, ai, GameRandom(1)) is None

        state.set_turn_order([1, 0])
        assert bot_think(state, ai, GameRandom(1)) == "pass"

    def test_eliminated_bot_does_nothing(self, state):
        ai = state.players[1]
        ai.is_eliminated = True
        state.set_turn_order([1, 0])
        assert bot_think(state, ai, GameRandom(1)) is None

    def test_silent_in_other_phases(self, state):
        ai = state.players[1]
        state.phase = GamePhase.SCORING
        assert bot_think(state, ai, GameRandom(1)) is None
