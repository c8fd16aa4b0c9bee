#!/usr/bin/env python3
"""
generate_maze.py

Generates one maze and prints its tile grid as ASCII, top row first.

Legend (one w-layer at a time, --layer-w):
  '#' wall             '1'/'2' wall that is open in z-layer 0/1
  'H' ladder           '^'/'v' one-way ladder (up only / down only)
  's' switch           'D' door
  'G' goal             '.' empty

Nothing is written to disk.
"""

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import List, Optional, Sequence

from config_io import load_optional_config
from config_parsing import parse_maze_config
from models import BoardGeometry, Difficulty, Tile, TileGrid
from reachability import FieldReachabilityValidator
from room_generator import RoomGraph, RoomGraphGenerator
from tile_compiler import compile_tiles

logger = logging.getLogger(__name__)


def tile_char(tile: Tile, w: int) -> str:
    if tile.goal:
        return "G"
    if tile.ladders[w]:
        if tile.upward[w]:
            return "^"
        if tile.downward[w]:
            return "v"
        return "H"
    if tile.switches[w]:
        return "s"
    if tile.door or tile.door_upper:
        return "D"
    if tile.walls[w]:
        return "#" if tile.wall_colors[w] == 0 else str(tile.wall_colors[w])
    return "."


def render_ascii(grid: TileGrid, w: int = 0) -> List[str]:
    """Rows of the grid for w-layer w, top row first."""
    rows = []
    for y in range(grid.height - 1, -1, -1):
        row = "".join(tile_char(grid.tile_at(x, y), w) for x in range(grid.width))
        rows.append(row)
    return rows


def summary_line(difficulty: Difficulty, graph: RoomGraph, grid: TileGrid, reachable: bool) -> str:
    s = graph.size
    return (
        f"{difficulty.label}: {s.width}x{s.height}x{s.depth0}x{s.depth1} rooms -> "
        f"{grid.width}x{grid.height} tiles | seed={graph.seed} attempts={graph.attempts} "
        f"coverage={graph.coverage():.2f} branches={len(graph.branches)} "
        f"one-way={graph.one_way_count()} goal reachable={'yes' if reachable else 'NO'}"
    )


# ----------------------------
# CLI
# ----------------------------


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate a maze and print it as ASCII.")
    p.add_argument(
        "difficulty",
        type=str,
        choices=[d.value for d in Difficulty],
        help="Board size preset.",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional RNG seed for reproducible generation.",
    )
    p.add_argument(
        "--layer-w",
        type=int,
        default=0,
        help="Which w-layer to print (default: 0)",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional config.json with difficulty and generation settings.",
    )
    p.add_argument("--verbose", action="store_true", help="Log per-attempt details.")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    difficulty = Difficulty.parse(args.difficulty)
    cfg = load_optional_config(Path(args.config) if args.config else None)
    maze_cfg = parse_maze_config(cfg, difficulty)
    size = maze_cfg.board_size(difficulty)
    if not 0 <= args.layer_w < size.depth1:
        raise SystemExit(f"--layer-w must be in [0, {size.depth1 - 1}] for {difficulty.label}")

    rng = random.Random(args.seed)
    graph = RoomGraphGenerator(size, maze_cfg.generator, rng).generate()
    grid = compile_tiles(graph.rooms, BoardGeometry.for_board(size))
    reachable = FieldReachabilityValidator().is_goal_reachable(grid)

    for row in render_ascii(grid, args.layer_w):
        print(row)
    print(summary_line(difficulty, graph, grid, reachable))


if __name__ == "__main__":
    main()
