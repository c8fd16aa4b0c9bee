from utils import apply_color_mode, as_color, blend_color, clamp_int, deep_get, deep_merge


def test_clamp_and_color_parsing():
    assert clamp_int(-3, 0, 5) == 0
    assert clamp_int(9, 0, 5) == 5
    assert as_color([300, -1, 12], (0, 0, 0)) == (255, 0, 12)
    assert as_color("red", (1, 2, 3)) == (1, 2, 3)
    assert as_color([1, "x", 3], (1, 2, 3)) == (1, 2, 3)


def test_blend_color():
    assert blend_color((0, 0, 0), (100, 200, 50), 0.5) == (50, 100, 25)
    assert blend_color((0, 0, 0), (100, 200, 50), 2.0) == (100, 200, 50)


def test_apply_color_mode():
    assert apply_color_mode((10, 20, 30), "multicolor") == (10, 20, 30)
    assert apply_color_mode((0, 0, 0), "gray") == (0, 0, 0)
    r, g, b = apply_color_mode((255, 0, 0), "gray")
    assert r == g == b == 76


def test_deep_get():
    cfg = {"window": {"width": 640}, "tile_size": 24}
    assert deep_get(cfg, "window.width", 0) == 640
    assert deep_get(cfg, "window.height", 480) == 480
    assert deep_get(cfg, "tile_size.x", None) is None


def test_deep_merge():
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    merged = deep_merge(base, {"a": {"b": 10}, "d": {"e": 4}})
    assert merged == {"a": {"b": 10, "c": 2}, "d": {"e": 4}}
    assert base == {"a": {"b": 1, "c": 2}, "d": 3}
