# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pipeline Studio Configuration - Single source of truth.
YAML is king. Env vars ONLY for deployment overrides.

- ALL configuration in plain text (YAML)
- NO hidden state - everything inspectable via `cat`, `grep`
"""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Immutable editor configuration.
    All values from YAML. No hidden state.
    """

    # -- Backend --
    api_base_url: str = "http://localhost:8080/api"

    # -- HTTP --
    http_timeout: float = 30.0
    http_timeout_long: float = 600.0

    # -- Execution polling --
    execution_poll_interval: float = 2.0
    execution_poll_limit: int = 300

    # -- Canvas --
    node_spawn_origin: Tuple[float, float] = (100.0, 100.0)
    node_spawn_spread: float = 200.0
    snap_grid: int = 15

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "json"


# =============================================================================
# LOADER
# =============================================================================

def load_config(path: str = "configs/studio.yaml") -> Config:
    """
    Load configuration from YAML.
    Returns defaults if file doesn't exist.
    """
    if not Path(path).exists():
        return Config(
            api_base_url=os.getenv("PIPELINE_STUDIO_API_URL", Config.api_base_url),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    with open(path) as f:
        y = yaml.safe_load(f) or {}

    # Navigate nested dicts; only a missing or null value takes the default
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict) or d.get(k) is None:
                return default
            d = d[k]
        return d

    origin = get(y, "canvas", "spawn_origin", default=Config.node_spawn_origin)

    return Config(
        # Backend
        api_base_url=os.getenv("PIPELINE_STUDIO_API_URL")
        or get(y, "backend", "base_url", default=Config.api_base_url),

        # HTTP
        http_timeout=get(y, "http", "timeouts", "default", default=Config.http_timeout),
        http_timeout_long=get(y, "http", "timeouts", "long_running", default=Config.http_timeout_long),

        # Execution polling
        execution_poll_interval=get(y, "execution", "poll_interval", default=Config.execution_poll_interval),
        execution_poll_limit=get(y, "execution", "poll_limit", default=Config.execution_poll_limit),

        # Canvas
        node_spawn_origin=(float(origin[0]), float(origin[1])),
        node_spawn_spread=get(y, "canvas", "spawn_spread", default=Config.node_spawn_spread),
        snap_grid=get(y, "canvas", "snap_grid", default=Config.snap_grid),

        # Logging
        log_level=os.getenv("LOG_LEVEL") or get(y, "logging", "level", default=Config.log_level),
        log_format=get(y, "logging", "format", default=Config.log_format),
    )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("PIPELINE_STUDIO_CONFIG_PATH", "configs/studio.yaml")
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
