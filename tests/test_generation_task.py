import random

import pytest

from errors import GenerationError
from field import Field
from generation_task import FieldTask
from models import BoardSize, Difficulty, FieldConfig, GeneratorConfig, MazeConfig


def test_poll_before_start_returns_none():
    task = FieldTask(Difficulty.EASY)
    assert task.poll() is None
    assert not task.running


def test_field_is_handed_over_once_ready():
    task = FieldTask(Difficulty.EASY, rng=random.Random(1)).start()
    field = task.wait(timeout=60)

    assert isinstance(field, Field)
    # later polls keep returning the same field
    assert task.poll() is field
    assert not task.running


def test_start_is_idempotent():
    task = FieldTask(Difficulty.EASY, rng=random.Random(2))
    assert task.start() is task
    thread = task._thread
    task.start()
    assert task._thread is thread
    task.wait(timeout=60)


def test_worker_error_is_reraised_on_poll():
    cfg = MazeConfig(
        difficulties={Difficulty.EASY: BoardSize(1, 1, 1, 1)},
        generator=GeneratorConfig(max_attempts=2),
        field=FieldConfig(),
    )
    task = FieldTask(Difficulty.EASY, cfg, random.Random(0)).start()
    with pytest.raises(GenerationError):
        task.wait(timeout=60)
