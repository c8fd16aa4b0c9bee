from __future__ import annotations

from typing import Optional

from game_types import TilePos
from models import Tile, TileGrid

# All queries treat off-grid tiles as solid rock: never enterable, never
# something to stand on. A colored tile only exists in z-layer color - 1.


def _compatible(color: int, z: int) -> bool:
    return color == 0 or color - 1 == z


def _ladder(tile: Optional[Tile], z: int, w: int) -> bool:
    return tile is not None and tile.ladders[w] and _compatible(tile.ladder_colors[w], z)


def _blocking_wall(tile: Tile, z: int, w: int) -> bool:
    return tile.walls[w] and not (tile.wall_colors[w] != 0 and tile.wall_colors[w] - 1 == z)


def can_occupy(grid: TileGrid, x: int, y: int, z: int, w: int) -> bool:
    tile = grid.tile_at(x, y)
    if tile is None:
        return False
    if _ladder(tile, z, w):
        return True
    return not _blocking_wall(tile, z, w)


def can_stand_on(grid: TileGrid, x: int, y: int, z: int, w: int) -> bool:
    """True if an agent one tile above (x, y) is supported."""
    tile = grid.tile_at(x, y)
    if tile is None:
        return False
    if _ladder(tile, z, w):
        return True
    return _blocking_wall(tile, z, w)


def can_ascend(grid: TileGrid, x: int, y: int, z: int, w: int) -> bool:
    tile = grid.tile_at(x, y)
    if tile is None:
        return False
    if not _ladder(tile, z, w):
        return True
    return not tile.downward[w]


def can_descend(grid: TileGrid, x: int, y: int, z: int, w: int) -> bool:
    tile = grid.tile_at(x, y)
    if tile is None:
        return False
    if not _ladder(tile, z, w):
        return True
    return not tile.upward[w]


def move_permitted(grid: TileGrid, src: TilePos, dst: TilePos, z: int, w: int) -> bool:
    """Whether the agent may step from src to the neighbouring tile dst.

    dst must be enterable and supported from below; vertical steps also have to
    respect one-way ladders at the destination.
    """
    nx, ny = dst
    if not grid.in_bounds(nx, ny):
        return False
    if not can_occupy(grid, nx, ny, z, w):
        return False
    if not can_stand_on(grid, nx, ny - 1, z, w):
        return False
    if ny > src[1] and not can_ascend(grid, nx, ny, z, w):
        return False
    if ny < src[1] and not can_descend(grid, nx, ny, z, w):
        return False
    return True


def has_switch(grid: TileGrid, x: int, y: int, w: int) -> bool:
    tile = grid.tile_at(x, y)
    return tile is not None and tile.switches[w]


def has_door(grid: TileGrid, x: int, y: int, z: int) -> bool:
    tile = grid.tile_at(x, y)
    return tile is not None and tile.door and _compatible(tile.door_color, z)


def is_goal(grid: TileGrid, x: int, y: int) -> bool:
    tile = grid.tile_at(x, y)
    return tile is not None and tile.goal


def floor_number(grid: TileGrid, y: int) -> int:
    """1-based room row of tile row y, as shown on the HUD."""
    g = grid.geometry
    return (y - g.edge_offset) // g.room_tile_height + 1


def floor_count(grid: TileGrid) -> int:
    # the roof with the goal counts as the last floor
    return grid.size.height + 1
