"""
icpr.config — ledger-host settings: chain identity, block clock, logging.

This module centralizes configuration for the in-process ledger host. It has
NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Explicit overrides (`HostConfig.replace(...)` / `LedgerHost(config=...)`)
  2) Environment variables (ICPR_*)
  3) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - ICPR_CHAIN_ID           (int)    default: 31337  (local development chain)
  - ICPR_GENESIS_TIMESTAMP  (int)    default: 1_700_000_000
  - ICPR_BLOCK_TIME         (int)    default: 1      seconds added per mined block
  - ICPR_LOG_LEVEL          (str)    default: INFO
  - ICPR_LOG_JSON           (bool)   default: false

Usage:
    from icpr.config import load_config
    CFG = load_config()
    host = LedgerHost(CFG.replace(chain_id=1))
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace as _dc_replace
from functools import lru_cache
from typing import Any, Dict

DEVNET_CHAIN_ID = 31337
DEFAULT_GENESIS_TIMESTAMP = 1_700_000_000
DEFAULT_BLOCK_TIME = 1

_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


# ----------------------------- helpers ---------------------------------------


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().upper()
    return raw if raw in _LEVELS else default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class HostConfig:
    chain_id: int = DEVNET_CHAIN_ID
    genesis_timestamp: int = DEFAULT_GENESIS_TIMESTAMP
    block_time: int = DEFAULT_BLOCK_TIME
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        if self.chain_id < 0:
            raise ValueError("chain_id must be non-negative")
        if self.genesis_timestamp < 0:
            raise ValueError("genesis_timestamp must be non-negative")
        if self.block_time < 1:
            raise ValueError("block_time must be at least 1 second")
        if self.log_level.upper() not in _LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")

    def replace(self, **overrides: Any) -> "HostConfig":
        return _dc_replace(self, **overrides)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "genesis_timestamp": self.genesis_timestamp,
            "block_time": self.block_time,
            "log_level": self.log_level,
            "log_json": self.log_json,
        }


@lru_cache(maxsize=1)
def load_config() -> HostConfig:
    """
    Build and cache a HostConfig from environment + safe defaults.
    Call `load_config.cache_clear()` after changing the environment.
    """
    return HostConfig(
        chain_id=_env_int("ICPR_CHAIN_ID", DEVNET_CHAIN_ID, min_v=0, max_v=(1 << 256) - 1),
        genesis_timestamp=_env_int(
            "ICPR_GENESIS_TIMESTAMP", DEFAULT_GENESIS_TIMESTAMP, min_v=0, max_v=(1 << 64) - 1
        ),
        block_time=_env_int("ICPR_BLOCK_TIME", DEFAULT_BLOCK_TIME, min_v=1, max_v=86_400),
        log_level=_env_level("ICPR_LOG_LEVEL", "INFO"),
        log_json=_env_bool("ICPR_LOG_JSON", False),
    )


__all__ = ["HostConfig", "load_config", "DEVNET_CHAIN_ID"]
