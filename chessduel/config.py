# chessduel/config.py
from dataclasses import dataclass, field
from typing import Optional
import logging
import os
import tomllib

log = logging.getLogger("chessduel")


@dataclass
class SearchConfig:
    depth: int = 2  # plies, root move included


@dataclass
class StrategyConfig:
    # simulated engine "thinking" window, seconds, [min, max)
    think_min_s: float = 1.0
    think_max_s: float = 2.0
    workers: int = 1
    seed: Optional[int] = None


@dataclass
class UIConfig:
    theme: str = "light"
    notification_ttl_s: float = 3.0
    host: str = "0.0.0.0"
    port: int = 5000


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    default_mode: str = "AI"
    default_tier: str = "RANDOM"
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "chessduel.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "strategy", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    log.warning("Unknown config key %s.%s in %s", section, k, path)
        for k in ("default_mode", "default_tier", "log_level"):
            if k in raw:
                setattr(cfg, k, raw[k])
        return cfg


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("CHESSDUEL_CONFIG_TOML", "chessduel.toml"))
# allow env override of depth for quick debugging
override_depth = os.environ.get("CHESSDUEL_SEARCH_DEPTH")
if override_depth:
    try:
        CONFIG.search.depth = int(override_depth)
    except ValueError:
        log.warning("Ignoring CHESSDUEL_SEARCH_DEPTH=%r", override_depth)
