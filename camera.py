from __future__ import annotations

from typing import Tuple

import pygame

from models import TileGrid
from utils import clamp_float

# Tile rows grow upward, pygame pixels grow downward. Everything here works in
# "world" pixels: tile row grid.height - 1 sits at world y == 0.


def world_size_px(grid: TileGrid, tile_size: int) -> Tuple[int, int]:
    """Return (world_width_px, world_height_px)."""
    return (grid.width * tile_size, grid.height * tile_size)


def tile_to_world_rect(grid: TileGrid, x: float, y: float, tile_size: int) -> pygame.Rect:
    """World rect of the tile (or fractional agent position) at tile coords (x, y)."""
    px = int(round(x * tile_size))
    py = int(round((grid.height - 1 - y) * tile_size))
    return pygame.Rect(px, py, tile_size, tile_size)


def world_to_tile(grid: TileGrid, px: float, py: float, tile_size: int) -> Tuple[int, int]:
    """Inverse of tile_to_world_rect for a world pixel."""
    return int(px // tile_size), grid.height - 1 - int(py // tile_size)


def camera_target(focus_rect: pygame.Rect, window_w: int, window_h: int) -> Tuple[float, float]:
    """Return desired camera (x, y) target based on the focus center."""
    target_x = focus_rect.centerx - window_w / 2
    target_y = focus_rect.centery - window_h / 2
    return target_x, target_y


def _clamp_axis(target: float, world: int, window: int) -> float:
    if world <= window:
        # small boards stay centered
        return -(window - world) / 2
    return clamp_float(target, 0.0, float(world - window))


def update_camera(
    camera: pygame.Vector2,
    grid: TileGrid,
    focus_rect: pygame.Rect,
    window_w: int,
    window_h: int,
    tile_size: int,
) -> None:
    """Update the camera position with clamping to world bounds."""
    world_w, world_h = world_size_px(grid, tile_size)
    target_x, target_y = camera_target(focus_rect, window_w, window_h)
    camera.x = _clamp_axis(target_x, world_w, window_w)
    camera.y = _clamp_axis(target_y, world_h, window_h)


def world_to_screen(rect: pygame.Rect, camera: pygame.Vector2) -> pygame.Rect:
    """Convert a world rect to a screen rect using the camera offset."""
    return pygame.Rect(rect.x - int(camera.x), rect.y - int(camera.y), rect.w, rect.h)


def visible_tile_view(
    grid: TileGrid,
    camera: pygame.Vector2,
    window_w: int,
    window_h: int,
    tile_size: int,
) -> Tuple[int, int, int, int]:
    """Tile rectangle (x0, y0, x1, y1), end-exclusive, covering the window."""
    ts = tile_size
    x0 = int(camera.x // ts)
    x1 = int((camera.x + window_w) // ts) + 1
    row_top = int(camera.y // ts)
    row_bottom = int((camera.y + window_h) // ts) + 1
    y0 = grid.height - row_bottom
    y1 = grid.height - row_top
    return max(0, x0), max(0, y0), min(grid.width, x1), min(grid.height, y1)
