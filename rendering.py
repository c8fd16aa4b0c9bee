from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import pygame

from camera import tile_to_world_rect, world_to_screen
from field import Field, RenderState
from game_types import Color
from models import Difficulty, Tile, TileGrid
from utils import blend_color


def layer_color(palette: Dict[str, Color], z: int) -> Color:
    return palette.get(f"layer{z}", palette["wall"])


def _fade(palette: Dict[str, Color], color: Color, active: bool, inactive_alpha: float) -> Color:
    """Inactive w-layers are drawn blended into the background."""
    if active:
        return color
    return blend_color(palette["bg"], color, inactive_alpha)


def _draw_arrow(surf: pygame.Surface, r: pygame.Rect, color: Color, up: bool) -> None:
    pad = max(2, r.w // 5)
    if up:
        pts = [(r.centerx, r.top + pad), (r.left + pad, r.centery), (r.right - pad, r.centery)]
    else:
        pts = [(r.centerx, r.bottom - pad), (r.left + pad, r.centery), (r.right - pad, r.centery)]
    pygame.draw.polygon(surf, color, pts)


def draw_tile(
    surf: pygame.Surface,
    tile: Tile,
    r: pygame.Rect,
    z: int,
    w: int,
    palette: Dict[str, Color],
    inactive_alpha: float,
) -> None:
    """Draw one tile, every w-layer of it, inactive layers first."""
    layers = sorted(range(len(tile.walls)), key=lambda i: i == w)
    for lw in layers:
        active = lw == w

        if tile.walls[lw]:
            c = tile.wall_colors[lw]
            if c == 0:
                pygame.draw.rect(surf, _fade(palette, palette["wall"], active, inactive_alpha), r)
            else:
                color = _fade(palette, layer_color(palette, c - 1), active, inactive_alpha)
                # a colored wall is open in its own layer: draw it hollow there
                width = 2 if c - 1 == z else 0
                pygame.draw.rect(surf, color, r, width=width)

        if tile.ladders[lw]:
            c = tile.ladder_colors[lw]
            base = palette["ladder"] if c == 0 else layer_color(palette, c - 1)
            usable = c == 0 or c - 1 == z
            if not usable:
                base = blend_color(palette["bg"], base, 0.5)
            color = _fade(palette, base, active, inactive_alpha)
            rail = max(1, r.w // 8)
            pygame.draw.line(surf, color, (r.left + rail, r.top), (r.left + rail, r.bottom), rail)
            pygame.draw.line(surf, color, (r.right - rail, r.top), (r.right - rail, r.bottom), rail)
            for i in (1, 3):
                ry = r.top + r.h * i // 4
                pygame.draw.line(surf, color, (r.left + rail, ry), (r.right - rail, ry), rail)
            if tile.upward[lw]:
                _draw_arrow(surf, r, color, up=True)
            elif tile.downward[lw]:
                _draw_arrow(surf, r, color, up=False)

        if tile.switches[lw]:
            color = _fade(palette, layer_color(palette, z), active, inactive_alpha)
            pygame.draw.circle(surf, palette["switch"], r.center, max(3, r.w // 3))
            pygame.draw.circle(surf, color, r.center, max(2, r.w // 5))

    if tile.door or tile.door_upper:
        base = palette["door"] if tile.door_color == 0 else layer_color(palette, tile.door_color - 1)
        inner = r.inflate(-r.w // 3, 0)
        if tile.door_upper:
            inner.height += 2
        pygame.draw.rect(surf, base, inner, width=2)

    if tile.goal:
        pad = max(2, r.w // 6)
        pygame.draw.polygon(
            surf,
            palette["goal"],
            [(r.left + pad, r.bottom - pad), (r.centerx, r.top + pad), (r.right - pad, r.bottom - pad)],
        )


def draw_field_tiles(
    surf: pygame.Surface,
    grid: TileGrid,
    state: RenderState,
    camera: pygame.Vector2,
    tile_size: int,
    palette: Dict[str, Color],
    inactive_alpha: float,
) -> None:
    """Draw all tiles in state.tiles (already cut down to the visible view)."""
    for x, y, tile in state.tiles:
        r = world_to_screen(tile_to_world_rect(grid, x, y, tile_size), camera)
        draw_tile(surf, tile, r, state.z, state.w, palette, inactive_alpha)


def draw_agent(
    surf: pygame.Surface,
    grid: TileGrid,
    state: RenderState,
    camera: pygame.Vector2,
    tile_size: int,
    palette: Dict[str, Color],
) -> None:
    ax, ay = state.agent_position
    rect = world_to_screen(tile_to_world_rect(grid, ax, ay, tile_size), camera)
    body = rect.inflate(-tile_size // 4, -tile_size // 8)
    pygame.draw.rect(surf, palette["agent"], body, border_radius=max(2, tile_size // 6))
    # eye strip in the active z-layer color
    eye = pygame.Rect(body.left + 2, body.top + body.h // 4, body.w - 4, max(2, body.h // 6))
    pygame.draw.rect(surf, layer_color(palette, state.z), eye)


def draw_grid(
    surf: pygame.Surface,
    show_grid: bool,
    camera: pygame.Vector2,
    window_w: int,
    window_h: int,
    tile_size: int,
    grid_color: Color,
) -> None:
    """Draw the debug grid overlay if enabled."""
    if not show_grid:
        return

    ts = tile_size
    start_x = int(camera.x // ts) * ts
    start_y = int(camera.y // ts) * ts
    end_x = int((camera.x + window_w) // ts + 1) * ts
    end_y = int((camera.y + window_h) // ts + 1) * ts

    cam_x = int(camera.x)
    cam_y = int(camera.y)

    for x in range(start_x, end_x + 1, ts):
        sx = x - cam_x
        pygame.draw.line(surf, grid_color, (sx, 0), (sx, window_h), 1)

    for y in range(start_y, end_y + 1, ts):
        sy = y - cam_y
        pygame.draw.line(surf, grid_color, (0, sy), (window_w, sy), 1)


def hud_text(field: Field, difficulty: Difficulty, color_mode: str) -> str:
    size = field.grid.size
    layers = f"z: {field.z + 1}/{size.depth0}"
    if size.depth1 > 1:
        layers += f" | w: {field.w + 1}/{size.depth1}"
    color_label = "Gray" if color_mode == "gray" else "Multicolor"
    return (
        f"{difficulty.label} | Floor {field.floor_number()}/{field.floor_count()} | {layers} "
        f"| Color (C): {color_label} | Space: switch/door | ESC: title"
    )


def draw_hud(surf: pygame.Surface, hud_font: pygame.font.Font, text: str, text_color: Color) -> None:
    bar_height = hud_font.get_height() + 12
    bar = pygame.Surface((surf.get_width(), bar_height), pygame.SRCALPHA)
    bar.fill((0, 0, 0, 230))
    surf.blit(bar, (0, 0))
    surf.blit(hud_font.render(text, True, text_color), (12, 6))


def draw_centered_lines(
    surf: pygame.Surface,
    font: pygame.font.Font,
    lines: Sequence[str],
    color: Color,
    backdrop: bool = False,
) -> None:
    """Draw lines centered on the screen, optionally on a dark panel."""
    surfaces = [font.render(line, True, color) for line in lines]
    if not surfaces:
        return
    gap = 6
    total_h = sum(s.get_height() for s in surfaces) + gap * (len(surfaces) - 1)
    cx, cy = surf.get_width() // 2, surf.get_height() // 2

    if backdrop:
        max_w = max(s.get_width() for s in surfaces)
        panel = pygame.Rect(0, 0, max_w + 44, total_h + 44)
        panel.center = (cx, cy)
        pygame.draw.rect(surf, (0, 0, 0), panel)
        pygame.draw.rect(surf, (255, 255, 255), panel, width=2)

    y = cy - total_h // 2
    for s in surfaces:
        surf.blit(s, s.get_rect(midtop=(cx, y)))
        y += s.get_height() + gap


def title_lines(title: str, options: List[Difficulty], cursor: int) -> List[str]:
    lines = [title, ""]
    for i, d in enumerate(options):
        prefix = "-> " if i == cursor else "   "
        lines.append(f"{prefix}{d.label:<8}")
    lines += ["", "Up/Down: choose | Enter: start | ESC: quit"]
    return lines


class GameRenderer:
    """Renderer that owns fonts and draws the title, loading and play screens."""

    def __init__(self, window_w: int, window_h: int, font: pygame.font.Font) -> None:
        self.window_w = window_w
        self.window_h = window_h
        self.update_fonts(font)

    def update_fonts(self, font: pygame.font.Font) -> None:
        self.font = font
        self.hud_font = pygame.font.SysFont("monospace", max(14, font.get_height() - 6))
        self.title_font = pygame.font.SysFont("monospace", int(font.get_height() * 1.1))

    def update_window_size(self, window_w: int, window_h: int) -> None:
        self.window_w = window_w
        self.window_h = window_h

    def render_title(
        self,
        screen: pygame.Surface,
        palette: Dict[str, Color],
        title: str,
        options: List[Difficulty],
        cursor: int,
        message: Optional[str] = None,
    ) -> None:
        screen.fill(palette["bg"])
        lines = title_lines(title, options, cursor)
        if message:
            lines += ["", message]
        draw_centered_lines(screen, self.title_font, lines, palette["text"])
        pygame.display.flip()

    def render_generating(self, screen: pygame.Surface, palette: Dict[str, Color]) -> None:
        screen.fill(palette["bg"])
        draw_centered_lines(screen, self.title_font, ["Generating a field..."], palette["text"])
        pygame.display.flip()

    def render_play(
        self,
        screen: pygame.Surface,
        field: Field,
        state: RenderState,
        camera: pygame.Vector2,
        tile_size: int,
        palette: Dict[str, Color],
        show_grid: bool,
        inactive_alpha: float,
        hud: str,
    ) -> None:
        screen.fill(palette["bg"])
        draw_field_tiles(screen, field.grid, state, camera, tile_size, palette, inactive_alpha)
        draw_agent(screen, field.grid, state, camera, tile_size, palette)
        draw_grid(screen, show_grid, camera, self.window_w, self.window_h, tile_size, palette["grid"])
        draw_hud(screen, self.hud_font, hud, palette["text"])
        if state.goal_reached:
            draw_centered_lines(
                screen,
                self.title_font,
                ["Goal!", "Enter: back to title"],
                palette["goal"],
                backdrop=True,
            )
        pygame.display.flip()
