from __future__ import annotations


class GenerationError(RuntimeError):
    """Raised when no maze could be generated within the configured attempts."""


class InvariantViolation(RuntimeError):
    """A room graph or tile grid broke one of its consistency rules."""
