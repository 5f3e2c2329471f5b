"""Configuration utilities for Steamgraph.

Settings come from the optional ``config.json`` (see
:mod:`steamgraph.infrastructure.db.config`) with the Steam API key falling
back to the ``STEAM_API_KEY`` environment variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from steamgraph.infrastructure.db.config import get_path_config, load_config
from steamgraph.infrastructure.http import DEFAULT_BASE_URL
from steamgraph.infrastructure.steam import (
    DEFAULT_DETAIL_CHUNK_SIZE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TAG_COUNT,
)

API_KEY_ENV = "STEAM_API_KEY"


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass
class SteamSettings:
    """Steam API and sync tuning knobs."""

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    country_code: str = "US"
    language: str = "english"
    page_size: int = DEFAULT_PAGE_SIZE
    detail_chunk_size: int = DEFAULT_DETAIL_CHUNK_SIZE
    tag_count: int = DEFAULT_TAG_COUNT
    timeout_seconds: float = 30.0
    retry_attempts: int = 1
    backoff_base_seconds: float = 0.5
    requests_per_second: float | None = None
    include_player_counts: bool = False

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigError(
                f"No Steam API key configured; set {API_KEY_ENV} or steam.api_key in config.json"
            )
        return self.api_key


@dataclass
class AppSettings:
    """Resolved settings for one process."""

    db_path: Path
    watermark_path: Path
    steam: SteamSettings


def _steam_settings(raw: Dict[str, Any]) -> SteamSettings:
    known = {f.name for f in fields(SteamSettings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown steam settings: {', '.join(unknown)}")
    try:
        settings = SteamSettings(**raw)
        settings.page_size = int(settings.page_size)
        settings.detail_chunk_size = int(settings.detail_chunk_size)
        settings.tag_count = int(settings.tag_count)
        settings.timeout_seconds = float(settings.timeout_seconds)
        settings.retry_attempts = int(settings.retry_attempts)
        settings.backoff_base_seconds = float(settings.backoff_base_seconds)
        if settings.requests_per_second is not None:
            settings.requests_per_second = float(settings.requests_per_second)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid steam settings: {exc}") from exc
    if settings.page_size <= 0 or settings.detail_chunk_size <= 0:
        raise ConfigError("page_size and detail_chunk_size must be positive")
    return settings


def load_settings(
    config_path: Path | str | None = None,
    *,
    db_path: Path | str | None = None,
    watermark_path: Path | str | None = None,
    api_key: str | None = None,
) -> AppSettings:
    """Build :class:`AppSettings` from config file, environment and overrides.

    Explicit arguments win over ``config.json``, which wins over defaults.
    The API key is resolved as: ``api_key`` argument, ``steam.api_key``,
    then ``$STEAM_API_KEY``.
    """
    try:
        cfg = load_config(config_path)
        paths = get_path_config(config_path)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Could not read config file {config_path}: {exc}") from exc
    steam_cfg = cfg.get("steam", {})
    if not isinstance(steam_cfg, dict):
        raise ConfigError("'steam' section of config must be an object")
    steam = _steam_settings(dict(steam_cfg))
    steam.api_key = api_key or steam.api_key or os.environ.get(API_KEY_ENV) or None
    return AppSettings(
        db_path=Path(db_path) if db_path is not None else paths["db_path"],
        watermark_path=(
            Path(watermark_path) if watermark_path is not None else paths["watermark_path"]
        ),
        steam=steam,
    )


__all__ = ["API_KEY_ENV", "AppSettings", "ConfigError", "SteamSettings", "load_settings"]
