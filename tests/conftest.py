"""Shared fixtures: a config, catalog and progress store that never touch ~/.blockbreaker."""

from __future__ import annotations

import random
from pathlib import Path

import pytest

from blockbreaker.core.config import GameConfig
from blockbreaker.core.game import GameStateMachine
from blockbreaker.core.physics import PhysicsEngine
from blockbreaker.core.progress import ProgressStore
from blockbreaker.core.stages import StageCatalog


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


@pytest.fixture()
def config(tmp_path: Path) -> GameConfig:
    return GameConfig(progress_file=tmp_path / "progress.json")


@pytest.fixture()
def catalog(config: GameConfig) -> StageCatalog:
    return StageCatalog(max_stage=config.max_stage)


@pytest.fixture()
def store(config: GameConfig) -> ProgressStore:
    return ProgressStore(max_stage=config.max_stage, file_path=config.progress_file)


@pytest.fixture()
def physics(config: GameConfig) -> PhysicsEngine:
    return PhysicsEngine(config, rng=FixedRandom(0.9))


@pytest.fixture()
def machine(catalog: StageCatalog, store: ProgressStore, config: GameConfig, physics: PhysicsEngine) -> GameStateMachine:
    return GameStateMachine(catalog, store, config, physics)
