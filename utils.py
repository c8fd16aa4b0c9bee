from __future__ import annotations

from typing import Any, Dict

from game_types import Color


def clamp_int(v: int, lo: int, hi: int) -> int:
    """Clamp an integer value into the inclusive range [lo, hi]."""
    return lo if v < lo else hi if v > hi else v


def clamp_float(v: float, lo: float, hi: float) -> float:
    """Clamp a float value into the inclusive range [lo, hi]."""
    return lo if v < lo else hi if v > hi else v


def as_color(value: Any, default: Color) -> Color:
    """Parse a value into an RGB color tuple.

    Args:
        value: A list/tuple-like value with at least 3 items (r, g, b).
        default: The color to return if parsing fails.

    Returns:
        A clamped (r, g, b) tuple in the range [0, 255].
    """
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        try:
            r = clamp_int(int(value[0]), 0, 255)
            g = clamp_int(int(value[1]), 0, 255)
            b = clamp_int(int(value[2]), 0, 255)
        except (TypeError, ValueError):
            return default
        return (r, g, b)
    return default


def blend_color(a: Color, b: Color, t: float) -> Color:
    """Linearly blend from color a (t=0) to color b (t=1)."""
    t = clamp_float(t, 0.0, 1.0)
    return (
        int(a[0] + (b[0] - a[0]) * t),
        int(a[1] + (b[1] - a[1]) * t),
        int(a[2] + (b[2] - a[2]) * t),
    )


def apply_color_mode(color: Color, mode: str) -> Color:
    """Return color unchanged for "multicolor", or its luminance gray for "gray"."""
    if mode != "gray":
        return color
    lum = int(0.299 * color[0] + 0.587 * color[1] + 0.114 * color[2])
    lum = clamp_int(lum, 0, 255)
    return (lum, lum, lum)


def deep_get(d: Dict[str, Any], path: str, default: Any) -> Any:
    """Get a nested value from a dict using a dotted path.

    Args:
        d: Source dictionary.
        path: Dot-separated key path (e.g. "window.width").
        default: Value to return if any path segment is missing.

    Returns:
        The found value or default.
    """
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a new dict with override recursively laid over base.

    Nested dicts are merged key by key; any other value in override replaces
    the one in base. Neither input is modified.
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
