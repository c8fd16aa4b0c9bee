"""Small hand-built room and tile grids for tests."""

from __future__ import annotations

import random

from models import BoardGeometry, BoardSize, GeneratorConfig, Tile, TileGrid
from room_generator import RoomGraph, generate_rooms

EASY = BoardSize(5, 5, 2, 1)
TWO_W = BoardSize(4, 4, 2, 2)


def generate_graph(size: BoardSize = EASY, seed: int = 1) -> RoomGraph:
    return generate_rooms(size, GeneratorConfig(), random.Random(seed))


def empty_tile_grid(width: int, height: int, depth0: int = 2, depth1: int = 1) -> TileGrid:
    size = BoardSize(1, 1, depth0, depth1)
    return TileGrid(
        width=width,
        height=height,
        size=size,
        geometry=BoardGeometry.for_board(size),
        tiles=[Tile.empty(depth1) for _ in range(width * height)],
    )


def floor_grid(width: int = 8, height: int = 4, depth0: int = 2, depth1: int = 1) -> TileGrid:
    """Bottom row and both side columns are walls in every w-layer."""
    grid = empty_tile_grid(width, height, depth0, depth1)
    for w in range(depth1):
        for x in range(width):
            set_wall(grid, x, 0, w)
        for y in range(height):
            set_wall(grid, 0, y, w)
            set_wall(grid, width - 1, y, w)
    return grid


def set_wall(grid: TileGrid, x: int, y: int, w: int = 0, color: int = 0) -> None:
    t = grid.tile_at(x, y)
    t.walls[w] = True
    t.wall_colors[w] = color


def set_ladder(
    grid: TileGrid,
    x: int,
    y: int,
    w: int = 0,
    color: int = 0,
    upward: bool = False,
    downward: bool = False,
) -> None:
    t = grid.tile_at(x, y)
    t.ladders[w] = True
    t.ladder_colors[w] = color
    t.upward[w] = upward
    t.downward[w] = downward
