"""
field.py

Runtime for one maze attempt: the compiled tile grid plus the agent walking it.

Public entry points (used by the pygame front end and the preview CLI):
- generate(difficulty) -> Field
- tick(field, intents) -> TickResult
- render_state(field, view) -> RenderState
- is_goal_reached(field) -> bool
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from game_types import TilePos
from models import BoardGeometry, Difficulty, FieldConfig, MazeConfig, Tile, TileGrid
from passability import floor_count, floor_number, has_door, has_switch, is_goal, move_permitted
from room_generator import RoomGraphGenerator
from tile_compiler import compile_tiles

logger = logging.getLogger(__name__)

# (dx, dy) in tile space, y grows upward
DIRECTIONS: List[Tuple[str, TilePos]] = [
    ("left", (-1, 0)),
    ("right", (1, 0)),
    ("up", (0, 1)),
    ("down", (0, -1)),
]

_EPS = 1e-9


class FieldState(Enum):
    IDLE = "idle"
    ANIMATING = "animating"
    GOAL_REACHED = "goal_reached"


@dataclass(frozen=True)
class Intents:
    """Input snapshot for one tick: held movement keys, just-pressed actions."""

    left: bool = False
    right: bool = False
    up: bool = False
    down: bool = False
    toggle: bool = False
    confirm: bool = False

    def held(self, name: str) -> bool:
        return bool(getattr(self, name))


@dataclass(frozen=True)
class TickResult:
    moved: bool = False  # the agent arrived on a new tile this tick
    toggled: bool = False
    goal_reached: bool = False


@dataclass(frozen=True)
class RenderState:
    tiles: List[Tuple[int, int, Tile]]
    agent_position: Tuple[float, float]
    z: int
    w: int
    goal_reached: bool


class Field:
    def __init__(
        self,
        grid: TileGrid,
        cfg: Optional[FieldConfig] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.grid = grid
        self.cfg = cfg or FieldConfig()
        self.seed = seed

        self.x, self.y = grid.start_position
        self.z = 0
        self.w = 0
        self.state = FieldState.IDLE

        self._step: TilePos = (0, 0)
        self._progress = 0.0

    @property
    def offset(self) -> Tuple[float, float]:
        """Sub-tile animation offset, in tiles."""
        return self._step[0] * self._progress, self._step[1] * self._progress

    @property
    def position(self) -> TilePos:
        return self.x, self.y

    @property
    def goal_reached(self) -> bool:
        return self.state is FieldState.GOAL_REACHED

    def floor_number(self) -> int:
        return floor_number(self.grid, self.y)

    def floor_count(self) -> int:
        return floor_count(self.grid)

    # ----------------------------
    # Tick
    # ----------------------------

    def tick(self, intents: Intents) -> TickResult:
        if self.state is FieldState.GOAL_REACHED:
            return TickResult(goal_reached=True)

        if self.state is FieldState.IDLE:
            if intents.toggle and self._toggle():
                return TickResult(toggled=True)
            if not self._start_move(intents):
                return TickResult()

        return self._advance()

    def _toggle(self) -> bool:
        if has_switch(self.grid, self.x, self.y, self.w):
            self.z = (self.z + 1) % self.grid.size.depth0
            logger.debug("switch at %s -> z=%s", self.position, self.z)
            return True
        if has_door(self.grid, self.x, self.y, self.z):
            self.w = (self.w + 1) % self.grid.size.depth1
            logger.debug("door at %s -> w=%s", self.position, self.w)
            return True
        return False

    def _start_move(self, intents: Intents) -> bool:
        for name, (dx, dy) in DIRECTIONS:
            if not intents.held(name):
                continue
            dst = (self.x + dx, self.y + dy)
            if move_permitted(self.grid, self.position, dst, self.z, self.w):
                self._step = (dx, dy)
                self._progress = 0.0
                self.state = FieldState.ANIMATING
                return True
            # only the first held direction is considered
            return False
        return False

    def _advance(self) -> TickResult:
        self._progress += self.cfg.move_speed
        if self._progress < 1.0 - _EPS:
            return TickResult()

        self.x += self._step[0]
        self.y += self._step[1]
        self._step = (0, 0)
        self._progress = 0.0

        if is_goal(self.grid, self.x, self.y):
            self.state = FieldState.GOAL_REACHED
            logger.info("goal reached at %s", self.position)
            return TickResult(moved=True, goal_reached=True)

        self.state = FieldState.IDLE
        return TickResult(moved=True)

    # ----------------------------
    # Drawing support
    # ----------------------------

    def render_state(self, view: Optional[Tuple[int, int, int, int]] = None) -> RenderState:
        """Snapshot for drawing.

        Args:
            view: Optional (x0, y0, x1, y1) tile rectangle, end-exclusive. Only
                tiles inside it are returned. Defaults to the whole grid.
        """
        if view is None:
            view = (0, 0, self.grid.width, self.grid.height)
        x0, y0, x1, y1 = view
        x0, y0 = max(0, x0), max(0, y0)
        x1, y1 = min(self.grid.width, x1), min(self.grid.height, y1)

        tiles = []
        for ty in range(y0, y1):
            for tx in range(x0, x1):
                tiles.append((tx, ty, self.grid.tiles[ty * self.grid.width + tx]))

        ox, oy = self.offset
        return RenderState(
            tiles=tiles,
            agent_position=(self.x + ox, self.y + oy),
            z=self.z,
            w=self.w,
            goal_reached=self.goal_reached,
        )


# ----------------------------
# Public API
# ----------------------------


def generate(
    difficulty: Difficulty,
    config: Optional[MazeConfig] = None,
    rng: Optional[random.Random] = None,
) -> Field:
    """Build a new field for difficulty. Slow on large boards; see FieldTask.

    Raises:
        GenerationError: If no attempt converged within the retry budget.
    """
    config = config or MazeConfig.default()
    size = config.board_size(difficulty)
    graph = RoomGraphGenerator(size, config.generator, rng).generate()
    grid = compile_tiles(graph.rooms, BoardGeometry.for_board(size))
    logger.info(
        "%s field ready: %sx%s tiles, %s one-way passages",
        difficulty.label,
        grid.width,
        grid.height,
        graph.one_way_count(),
    )
    return Field(grid, config.field, seed=graph.seed)


def tick(field: Field, intents: Intents) -> TickResult:
    return field.tick(intents)


def render_state(field: Field, view: Optional[Tuple[int, int, int, int]] = None) -> RenderState:
    return field.render_state(view)


def is_goal_reached(field: Field) -> bool:
    return field.goal_reached
