"""
tile_compiler.py

Turns a finished room grid into the tile grid the field runs on.

Room layout (one room, depth1 == 1, room_tile_width == 6):

    ######   <- ceiling (top row)
    .H...#   <- x-axis wall in the last column
    .H.s.#   <- floor row: ladder, switch

Ladders alternate between columns 1 and 2 from one room row to the next so a
climb through several rooms never stacks ladders into one straight shaft.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from errors import InvariantViolation
from models import BoardGeometry, Coordinate, Passage, Room, RoomGrid, Tile, TileGrid

logger = logging.getLogger(__name__)


def layer_color(is_open: Sequence[bool]) -> int:
    """Describe a feature that is open in some z-layers and closed in others.

    Args:
        is_open: One flag per z-layer.

    Returns:
        0 when the feature is the same in every layer, otherwise 1 + the single
        layer in which it is open.
    """
    open_layers = [z for z, o in enumerate(is_open) if o]
    if not open_layers or len(open_layers) == len(is_open):
        return 0
    if len(open_layers) > 1:
        raise InvariantViolation(
            f"Feature open in layers {open_layers} of {len(is_open)} cannot be colored"
        )
    return open_layers[0] + 1


def wall_color(z_rooms: Sequence[Room]) -> Optional[int]:
    """Color of the x-axis wall of one room cell, or None when no wall is needed."""
    is_open = [r.passage_x.is_open for r in z_rooms]
    if all(is_open):
        return None
    return layer_color(is_open)


def ladder_color(z_rooms: Sequence[Room]) -> Optional[int]:
    """Color of the ladder of one room cell, or None when there is no ladder."""
    is_open = [r.passage_y.is_open for r in z_rooms]
    if not any(is_open):
        return None
    return layer_color(is_open)


def door_color(z_rooms: Sequence[Room]) -> Optional[int]:
    is_open = [r.passage_w.is_open for r in z_rooms]
    if not any(is_open):
        return None
    return layer_color(is_open)


def ladder_direction(z_rooms: Sequence[Room], where: Coordinate) -> Passage:
    """The y-passage shared by every z-layer that has one."""
    found = Passage.WALL
    for r in z_rooms:
        if r.passage_y is Passage.WALL:
            continue
        if found is not Passage.WALL and r.passage_y is not found:
            raise InvariantViolation(
                f"Room {(where.x, where.y)} w={where.w} mixes {found.name} and "
                f"{r.passage_y.name} y-passages"
            )
        found = r.passage_y
    return found


class TileCompiler:
    def __init__(self, rooms: RoomGrid, geometry: BoardGeometry) -> None:
        self.rooms = rooms
        self.size = rooms.size
        self.geometry = geometry
        self.width = self.size.width * geometry.room_tile_width + geometry.edge_offset
        self.height = self.size.height * geometry.room_tile_height + 2 * geometry.edge_offset
        self.tiles: List[Tile] = [
            Tile.empty(self.size.depth1) for _ in range(self.width * self.height)
        ]

    def tile(self, x: int, y: int) -> Tile:
        return self.tiles[y * self.width + x]

    def compile(self) -> TileGrid:
        self._outer_walls()
        for ry in range(self.size.height):
            for rx in range(self.size.width):
                self._room(rx, ry)

        grid = TileGrid(
            width=self.width,
            height=self.height,
            size=self.size,
            geometry=self.geometry,
            tiles=self.tiles,
        )
        logger.debug("compiled %sx%s tiles from %s rooms", self.width, self.height, self.size.room_count)
        return grid

    # ----------------------------
    # Pieces
    # ----------------------------

    def _set_wall(self, x: int, y: int, w: int, color: int = 0) -> None:
        t = self.tile(x, y)
        t.walls[w] = True
        t.wall_colors[w] = color

    def _outer_walls(self) -> None:
        depth1 = self.size.depth1
        for x in range(self.width):
            for w in range(depth1):
                self._set_wall(x, 0, w)
        for y in range(self.height):
            for w in range(depth1):
                self._set_wall(0, y, w)
        for w in range(depth1):
            self._set_wall(self.width - 1, self.height - 1, w)

        # the roof above the goal room's ladder
        goal_x = self.width - self.geometry.room_tile_width - 1
        self.tile(goal_x, self.height - 1).goal = True

    def _room(self, rx: int, ry: int) -> None:
        g = self.geometry
        depth1 = self.size.depth1
        left = rx * g.room_tile_width + g.edge_offset
        bottom = ry * g.room_tile_height + g.edge_offset

        z_cells = [self.rooms.z_slice(rx, ry, w) for w in range(depth1)]

        # x-axis walls on every row but the ceiling
        colors = [wall_color(z_rooms) for z_rooms in z_cells]
        wall_x = left + g.room_tile_width - depth1
        for row in range(g.room_tile_height - 1):
            y = bottom + row
            if all(c == 0 for c in colors):
                for w in range(depth1):
                    self._set_wall(wall_x + depth1 - 1, y, w)
                continue
            for w, color in enumerate(colors):
                if color is not None:
                    self._set_wall(wall_x + w, y, w, color)

        ceiling_y = bottom + g.room_tile_height - 1
        for x in range(left, left + g.room_tile_width):
            for w in range(depth1):
                self._set_wall(x, ceiling_y, w)

        for w, z_rooms in enumerate(z_cells):
            color = ladder_color(z_rooms)
            if color is None:
                continue
            direction = ladder_direction(z_rooms, Coordinate(rx, ry, 0, w))
            x = left + 1 + (ry + w) % 2
            for row in range(g.room_tile_height):
                t = self.tile(x, bottom + row)
                t.ladders[w] = True
                t.ladder_colors[w] = color
                t.upward[w] = direction is Passage.ONE_WAY_FORWARD
                t.downward[w] = direction is Passage.ONE_WAY_BACKWARD

        for w, z_rooms in enumerate(z_cells):
            if z_rooms[0].passage_z.is_open:
                self.tile(left + 3 + w, bottom).switches[w] = True

        # doors are carved from w-layer 0 only
        color = door_color(self.rooms.z_slice(rx, ry, 0))
        if color is not None:
            x = left + 5
            lower, upper = self.tile(x, bottom), self.tile(x, bottom + 1)
            lower.door = True
            upper.door_upper = True
            lower.door_color = upper.door_color = color


def compile_tiles(rooms: RoomGrid, geometry: Optional[BoardGeometry] = None) -> TileGrid:
    """Compile rooms into a tile grid. Deterministic: equal inputs give equal grids.

    Raises:
        InvariantViolation: If the room grid has passages that cannot be drawn.
    """
    if geometry is None:
        geometry = BoardGeometry.for_board(rooms.size)
    return TileCompiler(rooms, geometry).compile()
