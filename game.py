from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pygame

from camera import tile_to_world_rect, update_camera, visible_tile_view
from config_io import load_json_config
from config_parsing import parse_maze_config, parse_palette
from errors import GenerationError
from field import Field, Intents, is_goal_reached, render_state, tick
from generation_task import FieldTask
from models import Difficulty
from rendering import GameRenderer, hud_text
from utils import clamp_float, deep_get

logger = logging.getLogger(__name__)

TITLE_SCENE = "title"
PLAY_SCENE = "play"


class Game:
    """Title menu and play loop; fields are generated off the main thread."""

    def __init__(self, cfg_path: Path) -> None:
        self.cfg = load_json_config(cfg_path)
        self.difficulties: List[Difficulty] = list(Difficulty)
        self.cursor = 0
        self.scene = TITLE_SCENE
        self.message: Optional[str] = None

        self.task: Optional[FieldTask] = None
        self.field: Optional[Field] = None
        self.difficulty = self.difficulties[0]

        self._apply_config(self.cfg)
        self._init_pygame()
        self.font = pygame.font.Font(None, 32)
        self.renderer = GameRenderer(self.window_w, self.window_h, self.font)
        self.camera = pygame.Vector2(0, 0)

        # just-pressed keys collected from KEYDOWN events this frame
        self._toggle_pressed = False
        self._confirm_pressed = False

    # ----------------------------
    # Initialization
    # ----------------------------

    def _init_pygame(self) -> None:
        pygame.init()
        self._apply_display_mode()
        self.clock = pygame.time.Clock()

    def _apply_display_mode(self) -> None:
        """Create or recreate the display surface with the current mode."""
        flags = pygame.FULLSCREEN if self.fullscreen else 0
        self.screen = pygame.display.set_mode((self.window_w, self.window_h), flags)
        # Capture the actual size in case the platform adjusted it.
        self.window_w, self.window_h = self.screen.get_size()
        if hasattr(self, "renderer"):
            self.renderer.update_window_size(self.window_w, self.window_h)
        pygame.display.set_caption(self.title)

    def _apply_config(self, cfg: Dict[str, Any]) -> None:
        self.tile_size = max(4, int(cfg.get("tile_size", 24)))
        self.window_w = int(deep_get(cfg, "window.width", 960))
        self.window_h = int(deep_get(cfg, "window.height", 640))
        self.windowed_size = (self.window_w, self.window_h)
        self.title = str(deep_get(cfg, "window.title", "Maze Building"))
        self.fullscreen = bool(deep_get(cfg, "window.fullscreen", False))
        self.show_grid = bool(deep_get(cfg, "render.show_grid", False))
        self.inactive_alpha = clamp_float(
            float(deep_get(cfg, "render.inactive_alpha", 0.25)), 0.0, 1.0
        )
        self.color_mode = self._parse_color_mode(cfg)
        self.palette = parse_palette(cfg, self.color_mode)

    def _parse_color_mode(self, cfg: Dict[str, Any]) -> str:
        """Return the configured color mode (multicolor|gray)."""
        color_mode = deep_get(cfg, "render.color", "multicolor")
        if isinstance(color_mode, str):
            color_mode = color_mode.lower()
        else:
            color_mode = "multicolor"
        if color_mode not in ("multicolor", "gray"):
            color_mode = "multicolor"
        return color_mode

    # ----------------------------
    # Scenes
    # ----------------------------

    def start_play(self, difficulty: Difficulty) -> None:
        """Leave the title and start generating a field in the background."""
        self.difficulty = difficulty
        self.field = None
        self.message = None
        maze_cfg = parse_maze_config(self.cfg, difficulty)
        self.task = FieldTask(difficulty, maze_cfg).start()
        self.scene = PLAY_SCENE
        logger.info("starting %s", difficulty.label)

    def back_to_title(self, message: Optional[str] = None) -> None:
        # an unfinished worker is a daemon thread; its result is simply dropped
        self.task = None
        self.field = None
        self.message = message
        self.scene = TITLE_SCENE

    def _poll_generation(self) -> None:
        if self.task is None or self.field is not None:
            return
        try:
            self.field = self.task.poll()
        except GenerationError as e:
            logger.error("generation failed: %s", e)
            self.back_to_title("Could not build a field. Try again.")
            return
        if self.field is not None:
            self.camera.update(0, 0)

    def _update_play(self, keys: pygame.key.ScancodeWrapper) -> None:
        self._poll_generation()
        if self.field is None:
            return

        intents = Intents(
            left=bool(keys[pygame.K_LEFT] or keys[pygame.K_a]),
            right=bool(keys[pygame.K_RIGHT] or keys[pygame.K_d]),
            up=bool(keys[pygame.K_UP] or keys[pygame.K_w]),
            down=bool(keys[pygame.K_DOWN] or keys[pygame.K_s]),
            toggle=self._toggle_pressed,
            confirm=self._confirm_pressed,
        )
        result = tick(self.field, intents)
        if result.goal_reached and result.moved:
            logger.info("%s cleared (seed=%s)", self.difficulty.label, self.field.seed)
        if is_goal_reached(self.field) and intents.confirm:
            self.back_to_title()
            return

        ax, ay = self.field.render_state().agent_position
        update_camera(
            camera=self.camera,
            grid=self.field.grid,
            focus_rect=tile_to_world_rect(self.field.grid, ax, ay, self.tile_size),
            window_w=self.window_w,
            window_h=self.window_h,
            tile_size=self.tile_size,
        )

    def _render(self) -> None:
        if self.scene == TITLE_SCENE:
            self.renderer.render_title(
                self.screen, self.palette, self.title, self.difficulties, self.cursor, self.message
            )
            return

        if self.field is None:
            self.renderer.render_generating(self.screen, self.palette)
            return

        view = visible_tile_view(
            self.field.grid, self.camera, self.window_w, self.window_h, self.tile_size
        )
        self.renderer.render_play(
            screen=self.screen,
            field=self.field,
            state=render_state(self.field, view),
            camera=self.camera,
            tile_size=self.tile_size,
            palette=self.palette,
            show_grid=self.show_grid,
            inactive_alpha=self.inactive_alpha,
            hud=hud_text(self.field, self.difficulty, self.color_mode),
        )

    # ----------------------------
    # Events / loop
    # ----------------------------

    def _handle_title_key(self, key: int) -> bool:
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_DOWN:
            self.cursor = min(self.cursor + 1, len(self.difficulties) - 1)
        if key == pygame.K_UP:
            self.cursor = max(self.cursor - 1, 0)
        if key in (pygame.K_RETURN, pygame.K_SPACE):
            self.start_play(self.difficulties[self.cursor])
        return True

    def _handle_play_key(self, key: int) -> bool:
        if key == pygame.K_ESCAPE:
            self.back_to_title()
        if key in (pygame.K_SPACE, pygame.K_z):
            self._toggle_pressed = True
        if key in (pygame.K_RETURN, pygame.K_SPACE):
            self._confirm_pressed = True
        return True

    def _handle_keydown(self, key: int) -> bool:
        """Handle KEYDOWN events.

        Returns:
            False if the game should exit, True otherwise.
        """
        if key == pygame.K_c:
            self._toggle_color_mode()
        if key in (pygame.K_F11, pygame.K_f):
            self._toggle_fullscreen()
        if self.scene == TITLE_SCENE:
            return self._handle_title_key(key)
        return self._handle_play_key(key)

    def _toggle_color_mode(self) -> None:
        """Toggle render color mode between multicolor and gray."""
        self.color_mode = "gray" if self.color_mode == "multicolor" else "multicolor"
        self.palette = parse_palette(self.cfg, self.color_mode)

    def _toggle_fullscreen(self) -> None:
        """Toggle between windowed and fullscreen display modes."""
        self.fullscreen = not self.fullscreen
        if self.fullscreen:
            # Remember the last windowed size so we can restore it.
            self.windowed_size = (self.window_w, self.window_h)
            info = pygame.display.Info()
            self.window_w = info.current_w
            self.window_h = info.current_h
        else:
            self.window_w, self.window_h = self.windowed_size
        self._apply_display_mode()

    def _handle_events(self) -> bool:
        """Process pygame events.

        Returns:
            False if the game should exit, True otherwise.
        """
        self._toggle_pressed = False
        self._confirm_pressed = False
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                return False
            if e.type == pygame.KEYDOWN:
                if not self._handle_keydown(e.key):
                    return False
        return True

    def run(self) -> None:
        """Run the main loop at 60 FPS; one field tick per frame."""
        running = True
        while running:
            self.clock.tick(60)
            running = self._handle_events()
            if running and self.scene == PLAY_SCENE:
                self._update_play(pygame.key.get_pressed())
            self._render()

        pygame.quit()
