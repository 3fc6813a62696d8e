"""Hex map generation and adjacency for Eclipse of Empires.

The board is a rectangle of hexes stored with axial coordinates (q, r).
Offset column/row numbers (1-based) are kept on each tile for narration.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from .state import TILE_COUNTS, Fortification, HexTile, TileType

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom

logger = logging.getLogger(__name__)

# Axial neighbor offsets
HEX_DIRECTIONS: list[tuple[int, int]] = [
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
]

TILES_PER_SET = 25


def hex_id(q: int, r: int) -> str:
    """Get the stable id of the hex at (q, r)."""
    return f"{q},{r}"


def board_size(player_count: int) -> int:
    """Board width (and height) for a player count."""
    return 5 if player_count == 2 else 7


def neighbor_coords(q: int, r: int) -> list[tuple[int, int]]:
    """Get the axial coordinates of the six hexes around (q, r)."""
    return [(q + dq, r + dr) for dq, dr in HEX_DIRECTIONS]


def neighbors(tiles: dict[str, HexTile], tile_id: str) -> list[HexTile]:
    """Get the in-board neighbors of a tile."""
    tile = tiles.get(tile_id)
    if tile is None:
        return []
    result = []
    for q, r in neighbor_coords(tile.q, tile.r):
        neighbor = tiles.get(hex_id(q, r))
        if neighbor is not None:
            result.append(neighbor)
    return result


def is_adjacent_to_owner(
    tiles: dict[str, HexTile], tile_id: str, player_id: int
) -> bool:
    """Check if a tile touches any tile owned by a player."""
    return any(n.owner_id == player_id for n in neighbors(tiles, tile_id))


def count_adjacent_owned(
    tiles: dict[str, HexTile], tile_id: str, player_id: int
) -> int:
    """Count tiles owned by a player around a tile."""
    return sum(1 for n in neighbors(tiles, tile_id) if n.owner_id == player_id)


def frontier_ids(tiles: dict[str, HexTile], player_id: int) -> list[str]:
    """Get ids of all tiles adjacent to a player's territory (deduplicated)."""
    seen: list[str] = []
    for tile in tiles.values():
        if tile.owner_id != player_id:
            continue
        for neighbor in neighbors(tiles, tile.id):
            if neighbor.id not in seen:
                seen.append(neighbor.id)
    return seen


def edge_tile_ids(tiles: dict[str, HexTile]) -> list[str]:
    """Get ids of tiles with fewer than six in-board neighbors."""
    return [tid for tid in tiles if len(neighbors(tiles, tid)) < 6]


def build_tile_pool(total_tiles: int, rng: GameRandom) -> list[str]:
    """Build a shuffled tile-type pool large enough for the board.

    The base set is scaled up by whole sets to cover the board, then padded
    with Plains or truncated to exactly total_tiles.
    """
    multiplier = math.ceil(total_tiles / TILES_PER_SET)
    pool: list[str] = []
    for tile_type, count in TILE_COUNTS.items():
        pool.extend([tile_type] * (count * multiplier))
    rng.shuffle(pool)
    if len(pool) < total_tiles:
        pool.extend([TileType.PLAINS] * (total_tiles - len(pool)))
    return pool[:total_tiles]


def generate_map(player_count: int, rng: GameRandom) -> dict[str, HexTile]:
    """Generate a fresh board with every tile hidden and unowned."""
    width = height = board_size(player_count)
    pool = build_tile_pool(width * height, rng)

    tiles: dict[str, HexTile] = {}
    index = 0
    for col in range(width):
        for row in range(height):
            q = col - width // 2
            r = (row - height // 2) - col // 2
            tile_type = pool[index]
            index += 1
            tid = hex_id(q, r)
            tiles[tid] = HexTile(
                q=q,
                r=r,
                id=tid,
                col=col + 1,
                row=row + 1,
                true_type=tile_type,
                public_type=tile_type,
            )

    logger.debug("Generated %dx%d map", width, height)
    return tiles


def place_capitals(
    tiles: dict[str, HexTile], player_count: int, rng: GameRandom
) -> list[tuple[str, str]]:
    """Turn one random edge hex per player into a revealed, fortified capital.

    Returns:
        (tile_id, replaced_type) for each player, in player order.
    """
    edges = edge_tile_ids(tiles)
    rng.shuffle(edges)
    placed = []
    for player_id, tid in enumerate(edges[:player_count]):
        tile = tiles[tid]
        replaced = tile.true_type
        tile.true_type = TileType.CAPITAL
        tile.public_type = TileType.CAPITAL
        tile.is_revealed = True
        tile.owner_id = player_id
        tile.fortification = Fortification(owner_id=player_id, level=1)
        placed.append((tid, replaced))
    return placed
