"""
room_generator.py

Grows the room graph of a multi-layer maze.

One attempt:
- Walks a single random path from the start room to the goal room.
- Inserts branches from visited rooms until enough rooms are visited.
- Every path (main or branch) needs at least one one-way passage.
- A branch must end on a room reached much earlier than its origin, so it is
  never a shortcut toward the goal.

Failed attempts are thrown away and retried with a fresh seed.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from errors import GenerationError, InvariantViolation
from models import BoardSize, Coordinate, GeneratorConfig, Passage, RoomGrid

logger = logging.getLogger(__name__)


# ----------------------------
# Goal conditions
# ----------------------------


@dataclass(frozen=True)
class ReachCoordinate:
    target: Coordinate


@dataclass(frozen=True)
class ReachVisitedBelowThreshold:
    origin: Coordinate
    origin_path_count: int
    ratio: Tuple[int, int] = (5, 4)


GoalCondition = Union[ReachCoordinate, ReachVisitedBelowThreshold]


def is_goal(cond: GoalCondition, grid: RoomGrid, c: Coordinate) -> bool:
    """Return True if a walk standing on c has satisfied cond."""
    if isinstance(cond, ReachCoordinate):
        return c == cond.target

    if isinstance(cond, ReachVisitedBelowThreshold):
        if c == cond.origin:
            return False
        count = grid.room(c).path_count
        if count == 0:
            return False
        # A branch must not be a shortcut: the target has to be clearly closer
        # to the start than the origin.
        num, den = cond.ratio
        return cond.origin_path_count > count * num // den

    raise TypeError(f"Unknown goal condition: {cond!r}")


# ----------------------------
# Moves
# ----------------------------


class Move(Enum):
    LEFT = (-1, 0, 0, 0)
    RIGHT = (1, 0, 0, 0)
    DOWN = (0, -1, 0, 0)
    UP = (0, 1, 0, 0)
    NEXT_Z = (0, 0, 1, 0)  # layers wrap around
    NEXT_W = (0, 0, 0, 1)

    def __init__(self, dx: int, dy: int, dz: int, dw: int) -> None:
        self.dx = dx
        self.dy = dy
        self.dz = dz
        self.dw = dw


def build_move_table(size: BoardSize) -> List[Move]:
    """Weighted move list: spatial moves three times as likely as layer moves."""
    table: List[Move] = []
    for m in (Move.LEFT, Move.RIGHT, Move.DOWN, Move.UP):
        table.extend([m] * 3)
    if size.depth0 > 1:
        table.append(Move.NEXT_Z)
    if size.depth1 > 1:
        table.append(Move.NEXT_W)
    return table


def apply_move(size: BoardSize, c: Coordinate, move: Move) -> Optional[Coordinate]:
    """Return the destination of move from c, or None if it leaves the board."""
    if move is Move.NEXT_Z:
        return c._replace(z=(c.z + 1) % size.depth0)
    if move is Move.NEXT_W:
        return c._replace(w=(c.w + 1) % size.depth1)
    nxt = c._replace(x=c.x + move.dx, y=c.y + move.dy)
    return nxt if size.contains(nxt) else None


@dataclass(frozen=True)
class Step:
    dest: Coordinate
    one_way: bool
    reaches_goal: bool


@dataclass
class PathResult:
    grid: RoomGrid
    end: Coordinate
    steps: int
    one_way_steps: int


# ----------------------------
# Path growth
# ----------------------------


class PathGrower:
    """Random walk that carves passages until a goal condition holds."""

    def __init__(self, size: BoardSize, cfg: GeneratorConfig, rng: random.Random) -> None:
        self.size = size
        self.cfg = cfg
        self.rng = rng
        self.moves = build_move_table(size)

    def grow(
        self, rooms: RoomGrid, start: Coordinate, cond: GoalCondition
    ) -> Optional[PathResult]:
        """Grow one path on a copy of rooms.

        Returns:
            The new grid and path summary, or None when the walk got stuck or
            never crossed a one-way passage. The input grid is left untouched.
        """
        grid = rooms.copy()
        pos = start
        count = grid.room(start).path_count
        steps = 0
        one_way_steps = 0

        while not is_goal(cond, grid, pos):
            step = self._sample_step(grid, pos, cond)
            if step is None:
                return None

            self._open_passage(grid, pos, step)
            self._stamp(grid, pos, step.dest, count)
            count += 1
            steps += 1
            if step.one_way:
                one_way_steps += 1

            pos = step.dest
            if step.reaches_goal:
                break

        if one_way_steps == 0:
            return None
        return PathResult(grid=grid, end=pos, steps=steps, one_way_steps=one_way_steps)

    def _sample_step(
        self, grid: RoomGrid, pos: Coordinate, cond: GoalCondition
    ) -> Optional[Step]:
        for _ in range(self.cfg.step_retries):
            move = self.rng.choice(self.moves)
            nxt = apply_move(self.size, pos, move)
            if nxt is None:
                continue

            one_way = False
            if move is Move.NEXT_Z:
                visited = self._layer_visited(grid.z_slice(nxt.x, nxt.y, nxt.w), pos.z)
            elif move is Move.NEXT_W:
                visited = self._layer_visited(grid.w_slice(nxt.x, nxt.y, nxt.z), pos.w)
            else:
                if move in (Move.UP, Move.DOWN):
                    scan = self._scan_y_edge(grid, pos, nxt)
                    if scan is None:
                        # a sibling layer already fixed this edge the other way
                        continue
                    all_wall, all_wall_or_one_way = scan
                    if all_wall:
                        one_way = self.rng.randrange(self.cfg.one_way_odds) == 0
                    elif all_wall_or_one_way:
                        one_way = True
                    if all_wall_or_one_way and is_goal(cond, grid, nxt):
                        # A one-way choke point right before the goal makes
                        # later branches much easier to attach.
                        return Step(nxt, one_way=True, reaches_goal=True)
                visited = grid.room(nxt).path_count != 0

            if not visited:
                return Step(nxt, one_way, reaches_goal=False)
            if is_goal(cond, grid, nxt):
                return Step(nxt, one_way, reaches_goal=True)
        return None

    @staticmethod
    def _layer_visited(siblings: Sequence, departing: int) -> bool:
        """A layer move lands on visited ground if any other layer was reached."""
        return any(r.path_count != 0 for i, r in enumerate(siblings) if i != departing)

    def _scan_y_edge(
        self, grid: RoomGrid, pos: Coordinate, nxt: Coordinate
    ) -> Optional[Tuple[bool, bool]]:
        """Inspect the y edge between pos and nxt across all z-layers.

        Returns:
            (all_wall, all_wall_or_one_way), or None when a sibling layer holds
            a one-way passage opposing this direction.
        """
        upward = nxt.y > pos.y
        same = Passage.ONE_WAY_FORWARD if upward else Passage.ONE_WAY_BACKWARD
        opposing = Passage.ONE_WAY_BACKWARD if upward else Passage.ONE_WAY_FORWARD
        edge_y = min(pos.y, nxt.y)

        all_wall = True
        all_wall_or_one_way = True
        for room in grid.z_slice(pos.x, edge_y, pos.w):
            if room.passage_y is opposing:
                return None
            if room.passage_y is not Passage.WALL:
                all_wall = False
                if room.passage_y is not same:
                    all_wall_or_one_way = False
        return all_wall, all_wall_or_one_way

    def _open_passage(self, grid: RoomGrid, pos: Coordinate, step: Step) -> None:
        nxt = step.dest
        if nxt.x != pos.x:
            grid.room(pos._replace(x=min(pos.x, nxt.x))).passage_x = Passage.PASSABLE
            return

        if nxt.y != pos.y:
            if step.one_way:
                state = Passage.ONE_WAY_FORWARD if nxt.y > pos.y else Passage.ONE_WAY_BACKWARD
            else:
                state = Passage.PASSABLE
            edge_y = min(pos.y, nxt.y)
            for z, room in enumerate(grid.z_slice(pos.x, edge_y, pos.w)):
                if z == pos.z:
                    room.passage_y = state
                    continue
                if room.passage_y not in (Passage.WALL, state):
                    raise InvariantViolation(
                        f"y passage at {(pos.x, edge_y, z, pos.w)} is {room.passage_y.name}, "
                        f"conflicting with {state.name} on layer {pos.z}"
                    )
            return

        if nxt.z != pos.z:
            # the last z-layer never has an outgoing z passage
            for room in grid.z_slice(pos.x, pos.y, pos.w)[:-1]:
                room.passage_z = Passage.PASSABLE
            return

        if nxt.w != pos.w:
            for room in grid.w_slice(pos.x, pos.y, pos.z)[:-1]:
                room.passage_w = Passage.PASSABLE
            return

        raise InvariantViolation(f"Step from {tuple(pos)} to {tuple(nxt)} does not move")

    @staticmethod
    def _stamp(grid: RoomGrid, pos: Coordinate, nxt: Coordinate, count: int) -> None:
        """Record when rooms are first reached; switching layers costs distance."""
        if nxt.z != pos.z:
            for z, room in enumerate(grid.z_slice(nxt.x, nxt.y, nxt.w)):
                if room.path_count == 0:
                    room.path_count = count + abs(pos.z - z)
        elif nxt.w != pos.w:
            for w, room in enumerate(grid.w_slice(nxt.x, nxt.y, nxt.z)):
                if room.path_count == 0:
                    room.path_count = count + abs(pos.w - w)
        else:
            room = grid.room(nxt)
            if room.path_count == 0:
                room.path_count = count + 1


# ----------------------------
# Result
# ----------------------------


@dataclass(frozen=True)
class BranchRecord:
    origin: Coordinate
    target: Coordinate
    origin_path_count: int
    target_path_count: int
    steps: int


@dataclass
class RoomGraph:
    rooms: RoomGrid
    start: Coordinate
    goal: Coordinate
    branches: List[BranchRecord] = field(default_factory=list)
    attempts: int = 1
    seed: int = 0

    @property
    def size(self) -> BoardSize:
        return self.rooms.size

    def coverage(self) -> float:
        return self.rooms.visited_count() / self.size.room_count

    def one_way_count(self) -> int:
        return sum(
            1
            for c in self.rooms.coordinates()
            if self.rooms.room(c).passage_y.is_one_way
        )


# ----------------------------
# Generator orchestration
# ----------------------------


class RoomGraphGenerator:
    def __init__(
        self,
        size: BoardSize,
        cfg: Optional[GeneratorConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        size.validate()
        self.size = size
        self.cfg = cfg or GeneratorConfig()
        self.rng = rng or random.Random()

    def generate(self) -> RoomGraph:
        """Run attempts with fresh seeds until one succeeds.

        Raises:
            GenerationError: If max_attempts attempts all failed.
        """
        started = time.perf_counter()
        attempt = 0
        while self.cfg.max_attempts is None or attempt < self.cfg.max_attempts:
            attempt += 1
            seed = self.rng.randrange(2**32)
            try:
                graph = self.try_generate(seed)
            except InvariantViolation:
                logger.exception("discarding attempt %s (seed=%s)", attempt, seed)
                continue
            if graph is None:
                logger.debug("attempt %s (seed=%s) did not converge", attempt, seed)
                continue

            graph.attempts = attempt
            logger.info(
                "generated %sx%sx%sx%s maze in %.2fs | seed=%s attempts=%s coverage=%.2f branches=%s",
                self.size.width,
                self.size.height,
                self.size.depth0,
                self.size.depth1,
                time.perf_counter() - started,
                seed,
                attempt,
                graph.coverage(),
                len(graph.branches),
            )
            return graph

        raise GenerationError(
            f"Failed to generate a {self.size.width}x{self.size.height}x"
            f"{self.size.depth0}x{self.size.depth1} maze after {attempt} attempts."
        )

    def try_generate(self, seed: int) -> Optional[RoomGraph]:
        """Run one attempt with its own RNG; None if it did not converge."""
        rng = random.Random(seed)
        grower = PathGrower(self.size, self.cfg, rng)
        start, goal = self.size.start, self.size.goal

        rooms = RoomGrid(self.size)
        rooms.room(start).path_count = 1

        main = grower.grow(rooms, start, ReachCoordinate(goal))
        if main is None:
            return None
        rooms = main.grid
        # exit ladder from the goal room up to the roof
        rooms.room(goal).passage_y = Passage.PASSABLE

        branches: List[BranchRecord] = []
        failures = 0
        while not self._enough_rooms_visited(rooms):
            origin = rng.choice(rooms.visited_coordinates())
            origin_count = rooms.room(origin).path_count
            cond = ReachVisitedBelowThreshold(origin, origin_count, self.cfg.branch_ratio)

            result = grower.grow(rooms, origin, cond)
            if result is None:
                failures += 1
                if failures > self.cfg.branch_failure_limit:
                    return None
                continue

            branches.append(
                BranchRecord(
                    origin=origin,
                    target=result.end,
                    origin_path_count=origin_count,
                    target_path_count=rooms.room(result.end).path_count,
                    steps=result.steps,
                )
            )
            logger.debug(
                "branch %s -> %s (%s steps, %s one-way)",
                tuple(origin),
                tuple(result.end),
                result.steps,
                result.one_way_steps,
            )
            rooms = result.grid
            failures = 0

        return RoomGraph(rooms=rooms, start=start, goal=goal, branches=branches, seed=seed)

    def _enough_rooms_visited(self, rooms: RoomGrid) -> bool:
        threshold = int(self.size.room_count * self.cfg.coverage)
        return rooms.visited_count() >= threshold


def generate_rooms(
    size: BoardSize,
    cfg: Optional[GeneratorConfig] = None,
    rng: Optional[random.Random] = None,
) -> RoomGraph:
    """Convenience wrapper around RoomGraphGenerator.generate()."""
    return RoomGraphGenerator(size, cfg, rng).generate()
