from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def load_json_config(path: Path) -> Dict[str, Any]:
    """Load a JSON config file or raise a helpful error.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        Parsed JSON object. A top-level value that is not an object is treated
        as an empty config.

    Raises:
        FileNotFoundError: If the file does not exist.
        SystemExit: If JSON is invalid, with a friendly message.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = (
            f"\nERROR: Your config is not valid JSON.\n"
            f"File: {path}\n"
            f"Line {e.lineno}, Col {e.colno}\n"
            f"{e.msg}\n\n"
            f"Common fix: board sizes are lists like [5, 5, 2, 1], and JSON has no trailing commas.\n"
        )
        raise SystemExit(msg)
    if not isinstance(data, dict):
        logger.warning("%s does not hold a JSON object; using defaults", path)
        return {}
    return data


def load_optional_config(path: Optional[Path]) -> Dict[str, Any]:
    """Like load_json_config, but a missing path means "all defaults"."""
    if path is None:
        return {}
    return load_json_config(path)
