import random

from field import Field, FieldState, Intents, generate, is_goal_reached, render_state, tick
from maze_test_utils import floor_grid, set_ladder, set_wall
from models import (
    BoardSize,
    Difficulty,
    FieldConfig,
    GeneratorConfig,
    MazeConfig,
)
from reachability import FieldReachabilityValidator

RIGHT = Intents(right=True)
TOGGLE = Intents(toggle=True)


def _field(grid, speed=1.0):
    return Field(grid, FieldConfig(move_speed=speed))


def test_starts_idle_at_edge_offset():
    f = _field(floor_grid())
    assert f.position == (1, 1)
    assert (f.z, f.w) == (0, 0)
    assert f.state is FieldState.IDLE
    assert not is_goal_reached(f)


def test_move_commits_after_one_tile_of_animation():
    f = _field(floor_grid(), speed=0.25)
    results = [tick(f, RIGHT) for _ in range(4)]

    assert [r.moved for r in results] == [False, False, False, True]
    assert f.position == (2, 1)
    assert f.state is FieldState.IDLE
    assert f.offset == (0.0, 0.0)


def test_animation_continues_without_input():
    f = _field(floor_grid(), speed=0.5)
    tick(f, RIGHT)
    assert f.state is FieldState.ANIMATING
    assert f.offset == (0.5, 0.0)
    assert render_state(f).agent_position == (1.5, 1.0)

    result = tick(f, Intents())
    assert result.moved
    assert f.position == (2, 1)


def test_blocked_move_is_a_no_op():
    grid = floor_grid()
    set_wall(grid, 2, 1)
    f = _field(grid)
    result = tick(f, RIGHT)
    assert not result.moved
    assert f.position == (1, 1)
    assert f.state is FieldState.IDLE


def test_only_first_held_direction_is_tried():
    # left of the start is the outer wall; right is open but comes later
    f = _field(floor_grid())
    result = tick(f, Intents(left=True, right=True))
    assert not result.moved
    assert f.position == (1, 1)


def test_climb_ladder():
    grid = floor_grid(height=5)
    for y in (1, 2):
        set_ladder(grid, 2, y)
    f = _field(grid)
    tick(f, RIGHT)
    tick(f, Intents(up=True))
    assert f.position == (2, 2)
    tick(f, Intents(down=True))
    assert f.position == (2, 1)


def test_switch_flips_z_both_ways():
    grid = floor_grid()
    grid.tile_at(1, 1).switches[0] = True
    f = _field(grid)

    r = tick(f, TOGGLE)
    assert r.toggled and f.z == 1
    r = tick(f, TOGGLE)
    assert r.toggled and f.z == 0


def test_switch_needs_matching_w_layer():
    grid = floor_grid(depth1=2)
    grid.tile_at(1, 1).switches[1] = True
    f = _field(grid)
    assert not tick(f, TOGGLE).toggled
    assert f.z == 0


def test_door_flips_w():
    grid = floor_grid(depth1=2)
    door = grid.tile_at(1, 1)
    door.door = True
    door.door_color = 1
    f = _field(grid)

    assert tick(f, TOGGLE).toggled
    assert f.w == 1
    assert tick(f, TOGGLE).toggled
    assert f.w == 0


def test_toggle_without_switch_falls_through_to_movement():
    f = _field(floor_grid())
    result = tick(f, Intents(toggle=True, right=True))
    assert not result.toggled
    assert result.moved


def test_colored_wall_opens_after_switch():
    grid = floor_grid()
    grid.tile_at(1, 1).switches[0] = True
    set_wall(grid, 2, 1, color=2)
    f = _field(grid)

    assert not tick(f, RIGHT).moved
    tick(f, TOGGLE)
    assert tick(f, RIGHT).moved
    assert f.position == (2, 1)


def test_goal_is_terminal():
    grid = floor_grid()
    grid.tile_at(2, 1).goal = True
    f = _field(grid)

    result = tick(f, RIGHT)
    assert result.moved and result.goal_reached
    assert is_goal_reached(f)
    assert f.state is FieldState.GOAL_REACHED

    result = tick(f, Intents(right=True, toggle=True))
    assert result == type(result)(goal_reached=True)
    assert f.position == (2, 1)


def test_render_state_view_is_clipped():
    f = _field(floor_grid())
    state = render_state(f, (0, 0, 2, 2))
    assert sorted((x, y) for x, y, _ in state.tiles) == [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert state.agent_position == (1.0, 1.0)
    assert (state.z, state.w, state.goal_reached) == (0, 0, False)

    state = render_state(f, (-5, -5, 100, 100))
    assert len(state.tiles) == f.grid.width * f.grid.height


def test_generate_easy_field():
    f = generate(Difficulty.EASY, rng=random.Random(4))
    assert f.position == (1, 1)
    assert (f.grid.width, f.grid.height) == (31, 17)
    assert f.floor_number() == 1
    assert f.floor_count() == 6
    assert f.seed is not None


def test_generate_uses_config_sizes():
    cfg = MazeConfig(
        difficulties={Difficulty.EASY: BoardSize(6, 5, 2, 1)},
        generator=GeneratorConfig(),
        field=FieldConfig(move_speed=0.5),
    )
    f = generate(Difficulty.EASY, cfg, random.Random(2))
    assert (f.grid.width, f.grid.height) == (37, 17)
    assert f.cfg.move_speed == 0.5


def test_goal_reachable_in_generated_fields():
    validator = FieldReachabilityValidator()
    for seed in (1, 2, 3):
        f = generate(Difficulty.EASY, rng=random.Random(seed))
        assert validator.is_goal_reachable(f.grid)
