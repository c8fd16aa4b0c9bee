from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from utils import clamp_float, clamp_int


class Passage(Enum):
    WALL = 0
    PASSABLE = 1
    ONE_WAY_FORWARD = 2  # open toward the increasing coordinate only
    ONE_WAY_BACKWARD = 3  # open toward the decreasing coordinate only

    @property
    def is_open(self) -> bool:
        return self is not Passage.WALL

    @property
    def is_one_way(self) -> bool:
        return self in (Passage.ONE_WAY_FORWARD, Passage.ONE_WAY_BACKWARD)


class Coordinate(NamedTuple):
    x: int
    y: int
    z: int
    w: int


class Difficulty(Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    SUGOI = "sugoi"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, raw: Any) -> "Difficulty":
        """Accept a Difficulty, its value or its name (case-insensitive)."""
        if isinstance(raw, Difficulty):
            return raw
        name = str(raw).strip().lower()
        for d in cls:
            if d.value == name:
                return d
        raise ValueError(f"Unknown difficulty: {raw!r}")


@dataclass(frozen=True)
class BoardSize:
    width: int
    height: int
    depth0: int
    depth1: int

    def validate(self) -> None:
        """Raise ValueError when the board cannot be generated or drawn."""
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Board must be at least 1x1, got {self.width}x{self.height}")
        if not 1 <= self.depth0 <= 2:
            raise ValueError(f"depth0 must be 1 or 2, got {self.depth0}")
        if not 1 <= self.depth1 <= 2:
            raise ValueError(f"depth1 must be 1 or 2, got {self.depth1}")

    @property
    def room_count(self) -> int:
        return self.width * self.height * self.depth0 * self.depth1

    @property
    def start(self) -> Coordinate:
        return Coordinate(0, 0, 0, 0)

    @property
    def goal(self) -> Coordinate:
        return Coordinate(self.width - 1, self.height - 1, self.depth0 - 1, self.depth1 - 1)

    def contains(self, c: Coordinate) -> bool:
        return (
            0 <= c.x < self.width
            and 0 <= c.y < self.height
            and 0 <= c.z < self.depth0
            and 0 <= c.w < self.depth1
        )


DEFAULT_BOARD_SIZES: Dict[Difficulty, BoardSize] = {
    Difficulty.EASY: BoardSize(5, 5, 2, 1),
    Difficulty.NORMAL: BoardSize(8, 8, 2, 1),
    Difficulty.HARD: BoardSize(11, 11, 2, 1),
    Difficulty.SUGOI: BoardSize(14, 14, 2, 2),
}


@dataclass(frozen=True)
class BoardGeometry:
    """Size of one room in tiles, plus the outer wall thickness."""

    room_tile_width: int
    room_tile_height: int = 3
    edge_offset: int = 1

    @staticmethod
    def for_board(size: BoardSize) -> "BoardGeometry":
        # every extra w-layer needs its own wall, switch and door column
        return BoardGeometry(room_tile_width=4 + 2 * size.depth1)


@dataclass
class Room:
    passage_x: Passage = Passage.WALL
    passage_y: Passage = Passage.WALL
    passage_z: Passage = Passage.WALL
    passage_w: Passage = Passage.WALL
    path_count: int = 0

    def copy(self) -> "Room":
        return Room(
            self.passage_x,
            self.passage_y,
            self.passage_z,
            self.passage_w,
            self.path_count,
        )


class RoomGrid:
    """Flat room arena addressed by packed (x, y, z, w) keys."""

    def __init__(self, size: BoardSize, rooms: Optional[List[Room]] = None) -> None:
        self.size = size
        if rooms is None:
            rooms = [Room() for _ in range(size.room_count)]
        if len(rooms) != size.room_count:
            raise ValueError(f"Expected {size.room_count} rooms, got {len(rooms)}")
        self._rooms = rooms

    def key(self, c: Coordinate) -> int:
        s = self.size
        return ((c.w * s.depth0 + c.z) * s.height + c.y) * s.width + c.x

    def in_bounds(self, c: Coordinate) -> bool:
        return self.size.contains(c)

    def room(self, c: Coordinate) -> Room:
        if not self.size.contains(c):
            raise IndexError(f"Room {tuple(c)} is outside the board")
        return self._rooms[self.key(c)]

    def z_slice(self, x: int, y: int, w: int) -> List[Room]:
        """All z-layers of one x/y cell in one w-layer."""
        return [self.room(Coordinate(x, y, z, w)) for z in range(self.size.depth0)]

    def w_slice(self, x: int, y: int, z: int) -> List[Room]:
        """All w-layers of one x/y cell in one z-layer."""
        return [self.room(Coordinate(x, y, z, w)) for w in range(self.size.depth1)]

    def coordinates(self) -> Iterator[Coordinate]:
        s = self.size
        for w in range(s.depth1):
            for z in range(s.depth0):
                for y in range(s.height):
                    for x in range(s.width):
                        yield Coordinate(x, y, z, w)

    def visited_coordinates(self) -> List[Coordinate]:
        return [c for c in self.coordinates() if self._rooms[self.key(c)].path_count != 0]

    def visited_count(self) -> int:
        return sum(1 for r in self._rooms if r.path_count != 0)

    def copy(self) -> "RoomGrid":
        return RoomGrid(self.size, [r.copy() for r in self._rooms])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoomGrid):
            return NotImplemented
        return self.size == other.size and self._rooms == other._rooms


@dataclass
class Tile:
    # Colors: 0 means every z-layer, c > 0 ties the tile to z-layer c - 1.
    walls: List[bool]
    wall_colors: List[int]
    ladders: List[bool]
    ladder_colors: List[int]
    upward: List[bool]
    downward: List[bool]
    switches: List[bool]
    door: bool = False
    door_upper: bool = False
    door_color: int = 0
    goal: bool = False

    @staticmethod
    def empty(depth1: int) -> "Tile":
        return Tile(
            walls=[False] * depth1,
            wall_colors=[0] * depth1,
            ladders=[False] * depth1,
            ladder_colors=[0] * depth1,
            upward=[False] * depth1,
            downward=[False] * depth1,
            switches=[False] * depth1,
        )


@dataclass
class TileGrid:
    width: int
    height: int
    size: BoardSize
    geometry: BoardGeometry
    tiles: List[Tile] = field(default_factory=list)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> Optional[Tile]:
        """Return the tile at (x, y), or None outside the grid."""
        if not self.in_bounds(x, y):
            return None
        return self.tiles[y * self.width + x]

    def iter_tiles(self) -> Iterator[Tuple[int, int, Tile]]:
        for i, t in enumerate(self.tiles):
            yield i % self.width, i // self.width, t

    def goal_position(self) -> Tuple[int, int]:
        for x, y, t in self.iter_tiles():
            if t.goal:
                return x, y
        raise LookupError("Tile grid has no goal tile")

    @property
    def start_position(self) -> Tuple[int, int]:
        return self.geometry.edge_offset, self.geometry.edge_offset


@dataclass(frozen=True)
class GeneratorConfig:
    step_retries: int = 100
    one_way_odds: int = 5
    coverage: float = 0.8
    branch_ratio: Tuple[int, int] = (5, 4)
    branch_failure_limit: int = 1000
    max_attempts: Optional[int] = 2000  # None retries forever

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "GeneratorConfig":
        d = GeneratorConfig()
        if not isinstance(raw, dict):
            return d

        ratio_raw = raw.get("branch_ratio", d.branch_ratio)
        if isinstance(ratio_raw, (list, tuple)) and len(ratio_raw) == 2:
            ratio = (max(1, int(ratio_raw[0])), max(1, int(ratio_raw[1])))
        else:
            ratio = d.branch_ratio

        max_attempts_raw = raw.get("max_attempts", d.max_attempts)
        max_attempts = None if max_attempts_raw is None else max(1, int(max_attempts_raw))

        return GeneratorConfig(
            step_retries=max(1, int(raw.get("step_retries", d.step_retries))),
            one_way_odds=max(1, int(raw.get("one_way_odds", d.one_way_odds))),
            coverage=clamp_float(float(raw.get("coverage", d.coverage)), 0.0, 1.0),
            branch_ratio=ratio,
            branch_failure_limit=max(
                0, int(raw.get("branch_failure_limit", d.branch_failure_limit))
            ),
            max_attempts=max_attempts,
        )


@dataclass(frozen=True)
class FieldConfig:
    move_speed: float = 0.25  # tiles per tick

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "FieldConfig":
        if not isinstance(raw, dict):
            return FieldConfig()
        speed = float(raw.get("move_speed", FieldConfig.move_speed))
        # at least one tick per tile, never frozen in place
        return FieldConfig(move_speed=clamp_float(speed, 0.01, 1.0))


@dataclass(frozen=True)
class MazeConfig:
    """Everything the core needs to build and run one maze."""

    difficulties: Dict[Difficulty, BoardSize]
    generator: GeneratorConfig
    field: FieldConfig

    def board_size(self, difficulty: Difficulty) -> BoardSize:
        return self.difficulties.get(difficulty, DEFAULT_BOARD_SIZES[difficulty])

    @staticmethod
    def default() -> "MazeConfig":
        return MazeConfig(
            difficulties=dict(DEFAULT_BOARD_SIZES),
            generator=GeneratorConfig(),
            field=FieldConfig(),
        )


def board_size_from_raw(raw: Any, default: BoardSize) -> BoardSize:
    """Parse [width, height, depth0, depth1] or a dict with the same keys."""
    if isinstance(raw, dict):
        raw = [
            raw.get("width", default.width),
            raw.get("height", default.height),
            raw.get("depth0", default.depth0),
            raw.get("depth1", default.depth1),
        ]
    if not isinstance(raw, (list, tuple)) or len(raw) != 4:
        return default
    try:
        width, height, depth0, depth1 = (int(v) for v in raw)
    except (TypeError, ValueError):
        return default
    size = BoardSize(
        width=clamp_int(width, 1, 64),
        height=clamp_int(height, 1, 64),
        depth0=depth0,
        depth1=depth1,
    )
    try:
        size.validate()
    except ValueError:
        return default
    return size
