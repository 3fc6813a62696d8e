"""Tests for action validation and resolution."""

from eclipse.game.actions import (
    action_cost,
    can_afford,
    cancel_declaration,
    declare_tile_type,
    fatigue_cost,
    perform_action,
    validate_action,
)
from eclipse.game.state import (
    CitizenRole,
    Fortification,
    GamePhase,
    LogKind,
    RelicPower,
    Resource,
    TileType,
)
from eclipse.game_utils.rng import ScriptedRandom

# An AI that never challenges
NO_CHALLENGE = [0.99]


def explorer(state, center, grain=3):
    """Make the human an Explorer holding the center hex."""
    human = state.players[0]
    human.selected_citizen = CitizenRole.EXPLORER
    human.resources.grain = grain
    state.tiles[center].owner_id = human.id
    return human


class TestCosts:
    """Tests for action costs and fatigue."""

    def test_first_action_at_base_cost(self, state):
        human = state.players[0]
        assert fatigue_cost(human, "explore") == 1
        assert fatigue_cost(human, "trade") == 2
        assert fatigue_cost(human, "fortify") == 2
        assert fatigue_cost(human, "attack") == 1

    def test_fatigue_after_first_action(self, state):
        """Test that every action after the first costs one more."""
        human = state.players[0]
        human.actions_taken = 1
        assert fatigue_cost(human, "explore") == 2
        assert fatigue_cost(human, "trade") == 3
        human.actions_taken = 4
        assert fatigue_cost(human, "fortify") == 3

    def test_market_has_no_fatigue(self, state):
        human = state.players[0]
        assert fatigue_cost(human, "market") == 3
        human.actions_taken = 2
        assert fatigue_cost(human, "market") == 3

    def test_action_cost_resources(self, state):
        human = state.players[0]
        assert action_cost(human, "trade") == (Resource.GRAIN, 2)
        assert action_cost(human, "fortify") == (Resource.STONE, 2)
        assert action_cost(human, "market") is None
        assert action_cost(human, "activate_relic") is None

    def test_free_trade_costs_nothing(self, state):
        human = state.players[0]
        human.status.free_trades = 1
        assert action_cost(human, "trade") == (Resource.GRAIN, 0)
        assert can_afford(human, "trade")

    def test_free_fortify_power_only_first_action(self, state):
        human = state.players[0]
        human.relic_power = RelicPower.FREE_FORTIFY
        assert action_cost(human, "fortify") == (Resource.STONE, 0)
        human.actions_taken = 1
        assert action_cost(human, "fortify") == (Resource.STONE, 3)


class TestValidation:
    """Tests for action validation error codes."""

    def test_wrong_phase(self, state, center, ring):
        explorer(state, center)
        state.phase = GamePhase.EVENTS
        assert validate_action(state, state.players[0], "explore", ring[0]) == "wrong-phase"

    def test_unknown_action(self, state):
        assert validate_action(state, state.players[0], "dance") == "unknown-action"

    def test_role_not_selected(self, state, center, ring):
        human = explorer(state, center)
        human.selected_citizen = None
        assert validate_action(state, human, "explore", ring[0]) == "role-not-selected"

    def test_wrong_role(self, state, center, ring):
        human = explorer(state, center)
        human.selected_citizen = CitizenRole.BUILDER
        assert validate_action(state, human, "explore", ring[0]) == "wrong-role"

    def test_explore_targets(self, state, center, ring, homes):
        human = explorer(state, center)
        assert validate_action(state, human, "explore", "99,99") == "unknown-tile"
        assert validate_action(state, human, "explore", homes[1]) == "tile-owned"
        state.tiles[ring[0]].owner_id = 1
        assert validate_action(state, human, "explore", ring[0]) == "tile-owned"

    def test_not_adjacent(self, state, center, homes):
        human = explorer(state, center)
        # The home corners are far from the center
        state.tiles[homes[1]].owner_id = None
        assert validate_action(state, human, "explore", homes[1]) == "not-adjacent"

    def test_invalid_declared_type(self, state, center, ring):
        human = explorer(state, center)
        error = validate_action(state, human, "explore", ring[0], {"declared_type": "capital"})
        assert error == "invalid-tile-type"
        error = validate_action(state, human, "explore", ring[0], {"declared_type": "castle"})
        assert error == "invalid-tile-type"

    def test_insufficient_resources(self, state, center, ring):
        human = explorer(state, center, grain=0)
        assert validate_action(state, human, "explore", ring[0]) == "insufficient-resources"

    def test_rejected_action_changes_nothing(self, state, center, ring):
        human = explorer(state, center, grain=0)
        before = state.to_dict()
        error = perform_action(
            state, human, "explore", ring[0], {"declared_type": "plains"}, ScriptedRandom()
        )
        assert error == "insufficient-resources"
        assert state.to_dict() == before


class TestExplore:
    """Tests for claiming and scavenging neutral hexes."""

    def test_truthful_claim(self, state, center, ring):
        """Test an unchallenged Explorer claim in a two-empire game."""
        human = explorer(state, center, grain=3)
        error = perform_action(
            state,
            human,
            "explore",
            ring[0],
            {"declared_type": "plains"},
            ScriptedRandom(floats=NO_CHALLENGE),
        )
        assert error is None
        tile = state.tiles[ring[0]]
        assert tile.owner_id == human.id
        assert tile.public_type == TileType.PLAINS
        assert tile.is_revealed
        assert not tile.is_bluffed
        assert human.resources.grain == 2
        assert human.actions_taken == 1
        assert human.stats.tiles_revealed == 1
        assert state.logs[-1].kind == LogKind.BLUFF

    def test_second_claim_costs_more(self, state, center, ring):
        human = explorer(state, center, grain=3)
        rng = ScriptedRandom(floats=[0.99, 0.99])
        perform_action(state, human, "explore", ring[0], {"declared_type": "plains"}, rng)
        perform_action(state, human, "explore", ring[1], {"declared_type": "plains"}, rng)
        assert human.resources.grain == 0
        assert human.actions_taken == 2

    def test_unchallenged_bluff_stands(self, state, center, ring):
        human = explorer(state, center)
        state.tiles[ring[0]].true_type = TileType.MOUNTAINS
        state.tiles[ring[0]].public_type = TileType.MOUNTAINS
        perform_action(
            state,
            human,
            "explore",
            ring[0],
            {"declared_type": "goldmine"},
            ScriptedRandom(floats=NO_CHALLENGE),
        )
        tile = state.tiles[ring[0]]
        assert tile.owner_id == human.id
        assert tile.public_type == TileType.GOLDMINE
        assert tile.true_type == TileType.MOUNTAINS
        assert tile.is_bluffed

    def test_human_claim_waits_for_declaration(self, state, center, ring):
        """Test that a human claim without a type suspends before paying."""
        human = explorer(state, center, grain=1)
        assert perform_action(state, human, "explore", ring[0], None, ScriptedRandom()) is None
        assert state.pending_declaration.tile_id == ring[0]
        assert state.is_suspended
        assert human.resources.grain == 1
        assert human.actions_taken == 0

        error = declare_tile_type(state, human, "goldmine", ScriptedRandom(floats=NO_CHALLENGE))
        assert error is None
        assert state.pending_declaration is None
        assert human.resources.grain == 0
        assert human.actions_taken == 1
        assert state.tiles[ring[0]].public_type == TileType.GOLDMINE

    def test_cancel_declaration(self, state, center, ring):
        human = explorer(state, center, grain=1)
        perform_action(state, human, "explore", ring[0], None, ScriptedRandom())
        assert cancel_declaration(state, human) is None
        assert state.pending_declaration is None
        assert state.tiles[ring[0]].owner_id is None
        assert human.resources.grain == 1
        assert cancel_declaration(state, human) == "no-pending-declaration"

    def test_declaration_errors(self, state, center, ring):
        human = explorer(state, center, grain=1)
        rng = ScriptedRandom(floats=NO_CHALLENGE)
        assert declare_tile_type(state, human, "plains", rng) == "no-pending-declaration"

        perform_action(state, human, "explore", ring[0], None, rng)
        assert declare_tile_type(state, human, "capital", rng) == "invalid-tile-type"
        assert declare_tile_type(state, state.players[1], "plains", rng) == "not-your-turn"
        human.resources.grain = 0
        assert declare_tile_type(state, human, "plains", rng) == "insufficient-resources"
        assert state.pending_declaration is not None

    def test_scavenge_ruins(self, state, center, ring):
        """Test that Ruins yield an event card and collapse into neutral Plains."""
        human = explorer(state, center, grain=1)
        tile = state.tiles[ring[0]]
        tile.true_type = TileType.RUINS
        tile.public_type = TileType.RUINS
        state.event_deck.draw_pile = ["e6"]
        state.event_deck.discard_pile = []

        assert perform_action(state, human, "explore", ring[0], None, ScriptedRandom()) is None
        assert tile.true_type == TileType.PLAINS
        assert tile.public_type == TileType.PLAINS
        assert tile.is_revealed
        assert tile.owner_id is None
        # Paid 1 Grain, found 1 Grain and 1 Gold
        assert human.resources.grain == 1
        assert human.resources.gold == 1
        assert human.actions_taken == 1
        assert state.pending_declaration is None

    def test_ai_claim_without_type_declares_truth(self, state, center, ring):
        ai = state.players[1]
        ai.selected_citizen = CitizenRole.EXPLORER
        ai.resources.grain = 1
        state.tiles[center].owner_id = ai.id
        state.players[0].has_passed = True
        perform_action(state, ai, "explore", ring[0], None, ScriptedRandom())
        assert state.tiles[ring[0]].owner_id == ai.id
        assert not state.tiles[ring[0]].is_bluffed


class TestTrade:
    """Tests for the Merchant trade."""

    def test_merchant_trade(self, state):
        human = state.players[0]
        human.selected_citizen = CitizenRole.MERCHANT
        human.resources.grain = 2
        assert perform_action(state, human, "trade", None, None, ScriptedRandom()) is None
        assert human.resources.grain == 0
        assert human.resources.gold == 1
        assert human.actions_taken == 1

    def test_surplus_grain_trade_any_role(self, state):
        """Test that a non-Merchant with more than 4 Grain may trade."""
        human = state.players[0]
        human.selected_citizen = CitizenRole.BUILDER
        human.resources.grain = 4
        assert validate_action(state, human, "trade") == "wrong-role"
        human.resources.grain = 5
        assert perform_action(state, human, "trade", None, None, ScriptedRandom()) is None
        assert human.resources.grain == 3
        assert human.resources.gold == 1

    def test_free_trade(self, state):
        human = state.players[0]
        human.selected_citizen = CitizenRole.MERCHANT
        human.status.free_trades = 1
        assert perform_action(state, human, "trade", None, None, ScriptedRandom()) is None
        assert human.resources.gold == 1
        assert human.status.free_trades == 0
        assert "Free Trade" in state.logs[-1].text


class TestFortify:
    """Tests for the Builder fortify."""

    def test_fortify(self, state, ring):
        human = state.players[0]
        human.selected_citizen = CitizenRole.BUILDER
        human.resources.stone = 2
        state.tiles[ring[0]].owner_id = human.id
        assert perform_action(state, human, "fortify", ring[0], None, ScriptedRandom()) is None
        assert state.tiles[ring[0]].fortification.owner_id == human.id
        assert human.resources.stone == 0

    def test_fortify_errors(self, state, ring, homes):
        human = state.players[0]
        human.selected_citizen = CitizenRole.BUILDER
        human.resources.stone = 5
        assert validate_action(state, human, "fortify", ring[0]) == "not-owner"
        assert validate_action(state, human, "fortify", homes[1]) == "not-owner"
        state.tiles[ring[0]].owner_id = human.id
        state.tiles[ring[0]].fortification = Fortification(owner_id=human.id)
        assert validate_action(state, human, "fortify", ring[0]) == "already-fortified"
        assert validate_action(state, human, "fortify", None) == "unknown-tile"

    def test_free_fortify_status_is_consumed(self, state, ring):
        human = state.players[0]
        human.selected_citizen = CitizenRole.BUILDER
        human.status.free_fortify = True
        state.tiles[ring[0]].owner_id = human.id
        state.tiles[ring[1]].owner_id = human.id
        assert perform_action(state, human, "fortify", ring[0], None, ScriptedRandom()) is None
        assert not human.status.free_fortify
        assert "(Free)" in state.logs[-1].text
        assert validate_action(state, human, "fortify", ring[1]) == "insufficient-resources"


class TestMarket:
    """Tests for the emergency market."""

    def test_market_any_role(self, state):
        human = state.players[0]
        human.selected_citizen = CitizenRole.WARRIOR
        human.resources.stone = 3
        payload = {"cost": "stone"}
        assert perform_action(state, human, "market", None, payload, ScriptedRandom()) is None
        assert human.resources.stone == 0
        assert human.resources.grain == 1
        assert human.actions_taken == 1
        assert state.logs[-1].text.startswith("Emergency Market")

    def test_market_needs_three(self, state):
        human = state.players[0]
        human.resources.gold = 2
        error = validate_action(state, human, "market", payload={"cost": "gold"})
        assert error == "insufficient-resources"

    def test_market_bad_resource(self, state):
        human = state.players[0]
        error = validate_action(state, human, "market", payload={"cost": "wood"})
        assert error == "invalid-resource"

    def test_market_only_sells_grain(self, state):
        """Test that a requested Relic is ignored and Grain is bought instead."""
        human = state.players[0]
        human.resources.gold = 3
        payload = {"cost": "gold", "target": "relic"}
        assert perform_action(state, human, "market", None, payload, ScriptedRandom()) is None
        assert human.resources.relic == 0
        assert human.resources.grain == 1
        assert human.resources.gold == 0
        assert state.logs[-1].text.endswith("for 1 Grain.")

    def test_grain_cannot_buy_grain(self, state):
        human = state.players[0]
        human.resources.grain = 3
        error = validate_action(state, human, "market", payload={"cost": "grain"})
        assert error == "invalid-resource"


class TestActivateRelic:
    """Tests for unveiling hidden relics."""

    def test_unveil_hidden_relic(self, state, ring):
        human = state.players[0]
        tile = state.tiles[ring[0]]
        tile.owner_id = human.id
        tile.true_type = TileType.RELIC_SITE
        state.event_deck.draw_pile = ["e5"]
        state.event_deck.discard_pile = []

        error = perform_action(state, human, "activate_relic", ring[0], None, ScriptedRandom())
        assert error is None
        assert tile.public_type == TileType.RELIC_SITE
        assert human.stats.relic_sites_revealed == 1
        assert human.stats.relic_events_triggered == 1
        assert human.relic_power == RelicPower.WARLORD
        assert human.actions_taken == 1

    def test_only_hidden_relics(self, state, ring):
        human = state.players[0]
        tile = state.tiles[ring[0]]
        tile.owner_id = human.id
        assert validate_action(state, human, "activate_relic", ring[0]) == "not-hidden-relic"
        tile.true_type = TileType.RELIC_SITE
        tile.public_type = TileType.RELIC_SITE
        assert validate_action(state, human, "activate_relic", ring[0]) == "not-hidden-relic"
        tile.owner_id = 1
        assert validate_action(state, human, "activate_relic", ring[0]) == "not-owner"
