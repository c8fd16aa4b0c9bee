import pytest

from maze_test_utils import EASY, TWO_W, floor_grid, generate_graph, set_wall
from models import BoardSize, Coordinate, Passage, RoomGrid
from reachability import FieldReachabilityValidator, reachable_rooms, room_neighbors


def test_room_neighbors_follow_open_passages():
    rooms = RoomGrid(BoardSize(2, 1, 2, 1))
    rooms.room(Coordinate(0, 0, 0, 0)).passage_x = Passage.PASSABLE
    rooms.room(Coordinate(0, 0, 0, 0)).passage_z = Passage.PASSABLE

    assert set(room_neighbors(rooms, Coordinate(0, 0, 0, 0))) == {
        Coordinate(1, 0, 0, 0),
        Coordinate(0, 0, 1, 0),
    }
    # the z passage lives on layer 0 but joins from either side
    assert set(room_neighbors(rooms, Coordinate(0, 0, 1, 0))) == {Coordinate(0, 0, 0, 0)}
    assert reachable_rooms(rooms) == {
        Coordinate(0, 0, 0, 0),
        Coordinate(1, 0, 0, 0),
        Coordinate(0, 0, 1, 0),
    }


def test_one_way_passage_counts_as_open():
    rooms = RoomGrid(BoardSize(1, 2, 1, 1))
    rooms.room(Coordinate(0, 0, 0, 0)).passage_y = Passage.ONE_WAY_FORWARD
    assert Coordinate(0, 1, 0, 0) in reachable_rooms(rooms)


@pytest.mark.parametrize("size,seed", [(EASY, 3), (TWO_W, 4)])
def test_generated_rooms_are_connected(size, seed):
    graph = generate_graph(size, seed)
    reached = reachable_rooms(graph.rooms, graph.start)
    assert graph.goal in reached
    assert set(graph.rooms.visited_coordinates()) <= reached


def test_field_goal_on_the_floor_is_reachable():
    grid = floor_grid()
    grid.tile_at(5, 1).goal = True
    assert FieldReachabilityValidator().is_goal_reachable(grid)


def test_plain_wall_cuts_off_goal():
    grid = floor_grid()
    set_wall(grid, 3, 1)
    grid.tile_at(5, 1).goal = True
    assert not FieldReachabilityValidator().is_goal_reachable(grid)


def test_switch_opens_colored_wall():
    grid = floor_grid()
    set_wall(grid, 3, 1, color=2)
    grid.tile_at(5, 1).goal = True
    validator = FieldReachabilityValidator()
    assert not validator.is_goal_reachable(grid)

    grid.tile_at(2, 1).switches[0] = True
    assert validator.is_goal_reachable(grid)
    assert (5, 1, 1, 0) in validator.reachable_states(grid)
