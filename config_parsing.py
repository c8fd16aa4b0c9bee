from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from game_types import Color
from models import (
    DEFAULT_BOARD_SIZES,
    Difficulty,
    FieldConfig,
    GeneratorConfig,
    MazeConfig,
    board_size_from_raw,
)
from utils import apply_color_mode, as_color, deep_get, deep_merge

logger = logging.getLogger(__name__)

DEFAULT_PALETTE: Dict[str, Color] = {
    "bg": (18, 20, 28),
    "grid": (60, 64, 80),
    "text": (230, 230, 240),
    "wall": (120, 124, 140),
    "ladder": (196, 152, 90),
    "switch": (240, 200, 60),
    "door": (235, 235, 235),
    "goal": (90, 220, 120),
    "agent": (235, 240, 255),
    "layer0": (80, 150, 255),
    "layer1": (255, 110, 90),
}


def parse_difficulties(raw: Any) -> Dict[Difficulty, Any]:
    """Parse the per-difficulty board sizes.

    Allows config like:
      "difficulties": { "easy": [5, 5, 2, 1], "sugoi": {"width": 10, "depth1": 2} }
    Unknown names are ignored; bad values keep the built-in size.
    """
    sizes = dict(DEFAULT_BOARD_SIZES)
    if not isinstance(raw, dict):
        return sizes

    for name, value in raw.items():
        try:
            difficulty = Difficulty.parse(name)
        except ValueError:
            logger.warning("ignoring unknown difficulty %r in config", name)
            continue
        sizes[difficulty] = board_size_from_raw(value, DEFAULT_BOARD_SIZES[difficulty])
    return sizes


def parse_generator_config(raw: Any) -> GeneratorConfig:
    """Parse generation settings, falling back to defaults for bad values."""
    if not isinstance(raw, dict):
        return GeneratorConfig()
    try:
        return GeneratorConfig.from_dict(raw)
    except (TypeError, ValueError):
        logger.warning("invalid generation config %r; using defaults", raw)
        return GeneratorConfig()


def parse_field_config(raw: Any) -> FieldConfig:
    if not isinstance(raw, dict):
        return FieldConfig()
    try:
        return FieldConfig.from_dict(raw)
    except (TypeError, ValueError):
        logger.warning("invalid field config %r; using defaults", raw)
        return FieldConfig()


def config_for_difficulty(cfg: Dict[str, Any], difficulty: Difficulty) -> Dict[str, Any]:
    """Lay "overrides.<difficulty>" over the base config."""
    override = deep_get(cfg, f"overrides.{difficulty.value}", {})
    if not isinstance(override, dict):
        return cfg
    return deep_merge(cfg, override)


def parse_maze_config(cfg: Dict[str, Any], difficulty: Optional[Difficulty] = None) -> MazeConfig:
    """Build the core config from the JSON document.

    Args:
        cfg: Parsed config.json contents.
        difficulty: If given, that difficulty's overrides are applied first.

    Returns:
        MazeConfig with defaults applied.
    """
    if not isinstance(cfg, dict):
        cfg = {}
    if difficulty is not None:
        cfg = config_for_difficulty(cfg, difficulty)
    return MazeConfig(
        difficulties=parse_difficulties(cfg.get("difficulties")),
        generator=parse_generator_config(cfg.get("generation")),
        field=parse_field_config(cfg.get("field")),
    )


def parse_palette(cfg: Dict[str, Any], color_mode: str = "multicolor") -> Dict[str, Color]:
    """Parse the drawing palette; missing entries use DEFAULT_PALETTE."""
    raw = cfg.get("palette", {})
    if not isinstance(raw, dict):
        raw = {}

    palette: Dict[str, Color] = {}
    for name, default in DEFAULT_PALETTE.items():
        palette[name] = apply_color_mode(as_color(raw.get(name), default), color_mode)
    return palette


def parse_log_level(raw: Any, default: int = logging.INFO) -> int:
    """Accept a level name ("debug") or number; unknown values give default."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        level = logging.getLevelName(raw.strip().upper())
        if isinstance(level, int):
            return level
    return default
