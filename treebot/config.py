# treebot/config.py
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import os
import tomllib

logger = logging.getLogger(__name__)

# Piece weights are type indices; the evaluator squares them.
PIECE_VALUES = {
    "PAWN": 1,
    "KNIGHT": 2,
    "BISHOP": 3,
    "ROOK": 4,
    "QUEEN": 5,
    "KING": 6,
}

@dataclass
class SearchConfig:
    max_depth: int = 7
    time_limit_ms: Optional[int] = 5000  # None means depth-only
    quiescence_threshold: float = 15.0  # squared value delta
    use_quiescence: bool = True
    seed: Optional[int] = None  # tie-break rng seed
    moves_to_go: int = 20

@dataclass
class EvalConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())
    horizon: int = 1000
    draw_penalty: float = 0.75
    mate_base: float = 500.0
    mate_scale: float = 1000.0
    check_factor: float = 0.1

@dataclass
class UIConfig:
    engine_name: str = "TreeBot"
    engine_author: str = "TreeBot developers"

@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    logger.warning("Unknown config key %s.%s ignored", section, k)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"]).upper()
        return cfg

    def apply_env_overrides(self, environ=None) -> "Config":
        """Apply TREEBOT_SEARCH_DEPTH / TREEBOT_TIME_LIMIT_MS overrides in place."""
        environ = os.environ if environ is None else environ
        depth = environ.get("TREEBOT_SEARCH_DEPTH")
        if depth:
            try:
                self.search.max_depth = int(depth)
            except ValueError:
                logger.warning("Ignoring non-integer TREEBOT_SEARCH_DEPTH=%r", depth)
        limit = environ.get("TREEBOT_TIME_LIMIT_MS")
        if limit:
            if limit.lower() == "none":
                self.search.time_limit_ms = None
            else:
                try:
                    self.search.time_limit_ms = int(limit)
                except ValueError:
                    logger.warning("Ignoring non-integer TREEBOT_TIME_LIMIT_MS=%r", limit)
        return self

# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("TREEBOT_CONFIG_TOML", "config.toml")).apply_env_overrides()
