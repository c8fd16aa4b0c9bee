from __future__ import annotations

import logging
from pathlib import Path

from config_io import load_json_config
from config_parsing import parse_log_level


def configure_logging(cfg_path: Path) -> None:
    """Set up root logging from the config's "log_level" (info by default)."""
    level = logging.INFO
    if cfg_path.exists():
        level = parse_log_level(load_json_config(cfg_path).get("log_level"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Entrypoint for running the game from the command line."""
    import sys

    cfg_path = Path(sys.argv[1]) if len(sys.argv) >= 2 else Path("config.json")
    configure_logging(cfg_path)
    from game import Game  # local import keeps module load side effects minimal

    Game(cfg_path).run()


if __name__ == "__main__":
    main()
