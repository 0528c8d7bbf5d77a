"""
Engine configuration and logging setup.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class EngineConfig:
    """Configuration for the dialog engine."""

    def __init__(
        self,
        player_name: str = "",
        exit_grace_delay: float = 0.15,
        keyword_expansion_limit: int = 256,
        strict_responses: bool = False,
        data_path: str = "game/data",
        log_level: str = "INFO",
        initial_vars: dict[str, str] | None = None,
    ):
        self.player_name = player_name
        self.exit_grace_delay = exit_grace_delay
        self.keyword_expansion_limit = keyword_expansion_limit
        self.strict_responses = strict_responses
        self.data_path = data_path
        self.log_level = log_level
        self.initial_vars = dict(initial_vars or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = cls().to_dict()
        kwargs = {}
        for key, value in data.items():
            if key in known:
                kwargs[key] = value
            else:
                logger.warning(f"Unknown config key ignored: {key}")
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str | Path) -> EngineConfig:
        """Load a config from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict[str, Any]:
        return {
            'player_name': self.player_name,
            'exit_grace_delay': self.exit_grace_delay,
            'keyword_expansion_limit': self.keyword_expansion_limit,
            'strict_responses': self.strict_responses,
            'data_path': self.data_path,
            'log_level': self.log_level,
            'initial_vars': dict(self.initial_vars),
        }


def configure_logging(config: EngineConfig | None = None) -> None:
    """Configure root logging for entry-point scripts."""
    level_name = (config.log_level if config else "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
