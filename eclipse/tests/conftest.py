"""Shared fixtures for Eclipse of Empires tests.

Scenario tests run on a 7x7 board with every tile turned into hidden,
neutral Plains. Each empire keeps a single home tile in a board corner,
far from the hexes around the center, so tests can lay out territory
around CENTER without it touching anyone's home.
"""

import pytest

from eclipse.game.hexmap import HEX_DIRECTIONS, generate_map, hex_id
from eclipse.game.options import EclipseOptions
from eclipse.game.phases import setup_game
from eclipse.game.state import GamePhase, GameState, ResourcePool, TileType
from eclipse.game_utils.rng import GameRandom

BOARD = 7

# Center hex of the 7x7 board, and the six hexes around it
CENTER = hex_id(0, -1)
RING = [hex_id(dq, -1 + dr) for dq, dr in HEX_DIRECTIONS]


def offset_id(col: int, row: int) -> str:
    """Get the id of the hex at 0-based offset coordinates on the 7x7 board."""
    return hex_id(col - BOARD // 2, (row - BOARD // 2) - col // 2)


# One home per seat, in the four corners
HOMES = [
    offset_id(0, 0),
    offset_id(BOARD - 1, BOARD - 1),
    offset_id(0, BOARD - 1),
    offset_id(BOARD - 1, 0),
]


def build_state(player_count: int = 2, seed: int = 1, **overrides) -> GameState:
    """Set up a game, then clear the board down to one home tile per empire."""
    state = GameState(options=EclipseOptions(player_count=player_count, **overrides))
    setup_game(state, GameRandom(seed))
    state.tiles = generate_map(4, GameRandom(seed))
    for tile in state.tiles.values():
        tile.clear_owner()
        tile.true_type = TileType.PLAINS
        tile.public_type = TileType.PLAINS
        tile.is_revealed = False
    for player in state.players:
        player.resources = ResourcePool()
        home = state.tiles[HOMES[player.id]]
        home.true_type = TileType.CAPITAL
        home.public_type = TileType.CAPITAL
        home.is_revealed = True
        home.owner_id = player.id
    state.phase = GamePhase.ACTION
    state.set_turn_order([p.id for p in state.players])
    return state


@pytest.fixture
def make_state():
    """Factory for cleared-board states in the Action phase."""
    return build_state


@pytest.fixture
def state():
    """A two-empire cleared-board state in the Action phase."""
    return build_state()


@pytest.fixture
def center():
    return CENTER


@pytest.fixture
def ring():
    """Ids of the six hexes around CENTER, in direction order."""
    return list(RING)


@pytest.fixture
def homes():
    return list(HOMES)
