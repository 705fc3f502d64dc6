from __future__ import annotations

import pytest

from chessduel import Game
from chessduel.config import Config, StrategyConfig


def fast_config(**overrides) -> Config:
    cfg = Config(strategy=StrategyConfig(think_min_s=0.01, think_max_s=0.02, seed=7))
    for k, v in overrides.items():
        setattr(cfg, k, v)
    return cfg


@pytest.fixture
def config() -> Config:
    return fast_config()


@pytest.fixture
def game(config):
    g = Game(config)
    yield g
    g.close()
