from __future__ import annotations

import logging
import queue
import random
import threading
from typing import Optional, Tuple, Union

from field import Field, generate
from models import Difficulty, MazeConfig

logger = logging.getLogger(__name__)


class FieldTask:
    """Generates one field on a background thread.

    The game loop calls poll() once per frame. The worker hands over exactly one
    item through a one-slot queue: the finished Field or the exception it hit.
    """

    def __init__(
        self,
        difficulty: Difficulty,
        config: Optional[MazeConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.difficulty = difficulty
        self._config = config
        self._rng = rng
        self._result: "queue.Queue[Tuple[bool, Union[Field, BaseException]]]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None
        self._field: Optional[Field] = None

    def start(self) -> "FieldTask":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(
            target=self._run,
            name=f"field-{self.difficulty.value}",
            daemon=True,
        )
        self._thread.start()
        logger.debug("started generation for %s", self.difficulty.label)
        return self

    def _run(self) -> None:
        try:
            field = generate(self.difficulty, self._config, self._rng)
        except Exception as e:
            self._result.put((False, e))
            return
        self._result.put((True, field))

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll(self) -> Optional[Field]:
        """Return the field once it is ready, None while still generating.

        Never blocks. Re-raises the worker's exception when generation failed.
        """
        if self._field is not None:
            return self._field
        try:
            ok, item = self._result.get_nowait()
        except queue.Empty:
            return None
        if not ok:
            raise item
        self._field = item
        return self._field

    def wait(self, timeout: Optional[float] = None) -> Optional[Field]:
        """Block until the worker finishes (for the CLI and tests)."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.poll()
