import logging
import random

import pytest

from errors import GenerationError, InvariantViolation
from maze_test_utils import EASY, TWO_W, generate_graph
from models import BoardSize, Coordinate, GeneratorConfig, Passage, RoomGrid
from reachability import reachable_rooms
from room_generator import (
    Move,
    PathGrower,
    ReachCoordinate,
    ReachVisitedBelowThreshold,
    RoomGraphGenerator,
    Step,
    apply_move,
    build_move_table,
    is_goal,
)


def _y_passages_agree(graph) -> bool:
    size = graph.size
    for w in range(size.depth1):
        for y in range(size.height):
            for x in range(size.width):
                states = {
                    r.passage_y for r in graph.rooms.z_slice(x, y, w) if r.passage_y is not Passage.WALL
                }
                if len(states) > 1:
                    return False
    return True


def test_move_table_weights():
    table = build_move_table(BoardSize(3, 3, 1, 1))
    assert len(table) == 12
    assert Move.NEXT_Z not in table and Move.NEXT_W not in table

    table = build_move_table(BoardSize(3, 3, 2, 2))
    assert len(table) == 14
    assert table.count(Move.LEFT) == 3
    assert table.count(Move.NEXT_Z) == 1
    assert table.count(Move.NEXT_W) == 1


def test_apply_move_wraps_layers_and_stays_on_board():
    size = BoardSize(3, 3, 2, 2)
    assert apply_move(size, Coordinate(0, 0, 1, 0), Move.NEXT_Z) == Coordinate(0, 0, 0, 0)
    assert apply_move(size, Coordinate(0, 0, 0, 1), Move.NEXT_W) == Coordinate(0, 0, 0, 0)
    assert apply_move(size, Coordinate(0, 0, 0, 0), Move.LEFT) is None
    assert apply_move(size, Coordinate(2, 2, 0, 0), Move.UP) is None
    assert apply_move(size, Coordinate(1, 1, 0, 0), Move.DOWN) == Coordinate(1, 0, 0, 0)


def test_goal_conditions():
    rooms = RoomGrid(BoardSize(3, 1, 1, 1))
    origin = Coordinate(2, 0, 0, 0)
    rooms.room(origin).path_count = 10
    rooms.room(Coordinate(0, 0, 0, 0)).path_count = 7
    rooms.room(Coordinate(1, 0, 0, 0)).path_count = 8

    assert is_goal(ReachCoordinate(origin), rooms, origin)

    cond = ReachVisitedBelowThreshold(origin, 10)
    assert not is_goal(cond, rooms, origin)
    # 8 * 5 // 4 == 10 is not strictly below the origin
    assert not is_goal(cond, rooms, Coordinate(1, 0, 0, 0))
    assert is_goal(cond, rooms, Coordinate(0, 0, 0, 0))

    rooms.room(Coordinate(0, 0, 0, 0)).path_count = 0
    assert not is_goal(cond, rooms, Coordinate(0, 0, 0, 0))


def test_grow_leaves_input_untouched():
    size = BoardSize(4, 4, 2, 1)
    rooms = RoomGrid(size)
    rooms.room(size.start).path_count = 1
    before = rooms.copy()

    grower = PathGrower(size, GeneratorConfig(), random.Random(3))
    for _ in range(20):
        grower.grow(rooms, size.start, ReachCoordinate(size.goal))
    assert rooms == before


def test_conflicting_y_passage_raises():
    size = BoardSize(1, 2, 2, 1)
    rooms = RoomGrid(size)
    rooms.room(Coordinate(0, 0, 1, 0)).passage_y = Passage.ONE_WAY_FORWARD

    grower = PathGrower(size, GeneratorConfig(), random.Random(0))
    step = Step(Coordinate(0, 1, 0, 0), one_way=False, reaches_goal=False)
    with pytest.raises(InvariantViolation):
        grower._open_passage(rooms, Coordinate(0, 0, 0, 0), step)


@pytest.mark.parametrize("size,seed", [(EASY, 1), (EASY, 2), (BoardSize(8, 8, 2, 1), 3), (TWO_W, 4)])
def test_generated_graph_properties(size, seed):
    graph = generate_graph(size, seed)
    rooms = graph.rooms

    assert rooms.room(size.start).path_count == 1
    assert rooms.room(size.goal).path_count > 0
    assert rooms.room(size.goal).passage_y is Passage.PASSABLE
    assert rooms.visited_count() >= int(size.room_count * 0.8)
    assert graph.one_way_count() >= 1

    reachable = reachable_rooms(rooms)
    assert size.goal in reachable
    assert set(rooms.visited_coordinates()) <= reachable

    assert _y_passages_agree(graph)


def test_branches_never_shortcut():
    graph = generate_graph(BoardSize(8, 8, 2, 1), seed=11)
    assert graph.branches
    for b in graph.branches:
        assert b.target != b.origin
        assert b.target_path_count * 5 // 4 < b.origin_path_count
        assert b.steps >= 1


def test_generation_is_deterministic_per_seed():
    a = generate_graph(EASY, seed=21)
    b = generate_graph(EASY, seed=21)
    assert a.rooms == b.rooms
    assert a.seed == b.seed
    assert a.branches == b.branches


def test_impossible_board_raises_generation_error():
    # start == goal: no path can ever contain a one-way step
    size = BoardSize(1, 1, 1, 1)
    gen = RoomGraphGenerator(size, GeneratorConfig(max_attempts=3), random.Random(0))
    with pytest.raises(GenerationError):
        gen.generate()


def test_invariant_violation_discards_attempt(monkeypatch, caplog):
    gen = RoomGraphGenerator(EASY, GeneratorConfig(), random.Random(5))
    real = gen.try_generate
    calls = []

    def flaky(seed):
        calls.append(seed)
        if len(calls) == 1:
            raise InvariantViolation("broken")
        return real(seed)

    monkeypatch.setattr(gen, "try_generate", flaky)
    with caplog.at_level(logging.ERROR, logger="room_generator"):
        graph = gen.generate()

    assert graph.attempts >= 2
    assert any("discarding attempt 1" in r.getMessage() for r in caplog.records)


def test_invalid_size_rejected_up_front():
    with pytest.raises(ValueError):
        RoomGraphGenerator(BoardSize(5, 5, 3, 1))
