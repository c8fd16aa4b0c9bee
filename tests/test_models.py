import pytest

from models import (
    BoardGeometry,
    BoardSize,
    Coordinate,
    Difficulty,
    FieldConfig,
    GeneratorConfig,
    Passage,
    RoomGrid,
    board_size_from_raw,
)


def test_board_size_validation():
    BoardSize(5, 5, 2, 1).validate()
    BoardSize(1, 1, 1, 1).validate()
    for bad in (BoardSize(0, 5, 2, 1), BoardSize(5, 5, 3, 1), BoardSize(5, 5, 2, 0)):
        with pytest.raises(ValueError):
            bad.validate()


def test_board_start_goal_and_geometry():
    size = BoardSize(14, 14, 2, 2)
    assert size.start == Coordinate(0, 0, 0, 0)
    assert size.goal == Coordinate(13, 13, 1, 1)
    assert size.room_count == 14 * 14 * 4
    assert BoardGeometry.for_board(size).room_tile_width == 8
    assert BoardGeometry.for_board(BoardSize(5, 5, 2, 1)).room_tile_width == 6
    assert BoardGeometry.for_board(size).room_tile_height == 3


def test_room_grid_keys_are_unique_and_bounds_checked():
    size = BoardSize(3, 2, 2, 2)
    rooms = RoomGrid(size)
    keys = {rooms.key(c) for c in rooms.coordinates()}
    assert keys == set(range(size.room_count))

    with pytest.raises(IndexError):
        rooms.room(Coordinate(3, 0, 0, 0))
    assert not rooms.in_bounds(Coordinate(0, 0, 2, 0))


def test_room_grid_copy_is_independent():
    rooms = RoomGrid(BoardSize(2, 2, 2, 1))
    c = Coordinate(1, 1, 1, 0)
    clone = rooms.copy()
    clone.room(c).passage_x = Passage.PASSABLE
    clone.room(c).path_count = 4

    assert rooms.room(c).passage_x is Passage.WALL
    assert rooms.room(c).path_count == 0
    assert clone != rooms
    assert rooms.copy() == rooms


def test_slices_follow_layers():
    rooms = RoomGrid(BoardSize(2, 2, 2, 2))
    rooms.room(Coordinate(1, 0, 1, 1)).path_count = 9
    assert [r.path_count for r in rooms.z_slice(1, 0, 1)] == [0, 9]
    assert [r.path_count for r in rooms.w_slice(1, 0, 1)] == [0, 9]
    assert rooms.visited_coordinates() == [Coordinate(1, 0, 1, 1)]


def test_difficulty_parse():
    assert Difficulty.parse("Sugoi") is Difficulty.SUGOI
    assert Difficulty.parse(Difficulty.EASY) is Difficulty.EASY
    assert Difficulty.HARD.label == "Hard"
    with pytest.raises(ValueError):
        Difficulty.parse("nightmare")


def test_generator_config_from_dict():
    cfg = GeneratorConfig.from_dict({"coverage": 3, "step_retries": 0, "max_attempts": None})
    assert cfg.coverage == 1.0
    assert cfg.step_retries == 1
    assert cfg.max_attempts is None
    assert GeneratorConfig.from_dict("nope") == GeneratorConfig()
    assert GeneratorConfig.from_dict({"branch_ratio": [3, 2]}).branch_ratio == (3, 2)


def test_field_config_clamps_speed():
    assert FieldConfig.from_dict({"move_speed": 5}).move_speed == 1.0
    assert FieldConfig.from_dict({"move_speed": 0}).move_speed == 0.01
    assert FieldConfig.from_dict({}).move_speed == 0.25


def test_board_size_from_raw():
    default = BoardSize(5, 5, 2, 1)
    assert board_size_from_raw([3, 4, 1, 2], default) == BoardSize(3, 4, 1, 2)
    assert board_size_from_raw({"width": 7}, default) == BoardSize(7, 5, 2, 1)
    assert board_size_from_raw([3, 4, 3, 1], default) == default
    assert board_size_from_raw("big", default) == default
    assert board_size_from_raw([3, "x", 1, 1], default) == default
