"""
Centralised settings (env first, then the optional YAML file, then defaults).

Environment variables use the ``FDPRQ_`` prefix, e.g. ``FDPRQ_OUTPUT_DIR``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from feedparq.config_loader import load_config_file

logger = logging.getLogger(__name__)

ENV_PREFIX = "FDPRQ_"


@dataclass
class FeedparqSettings:
    channels_dir: Path = Path("config") / "channels"
    output_dir: Path = Path("data")
    metrics_db: Path = Path("data") / "metrics.db"
    concurrency: int = 4
    request_timeout: int = 20
    user_agent: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    metrics_retention_hours: int = 24


def _lookup(key: str, file_config: Dict[str, Any]) -> Any:
    raw = os.getenv(ENV_PREFIX + key.upper())
    if raw is not None and str(raw).strip() != "":
        return raw
    return file_config.get(key)


def _int_setting(key: str, file_config: Dict[str, Any], default: int) -> int:
    raw = _lookup(key, file_config)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
        if value <= 0:
            logger.warning("Non-positive value for %s=%s; using default %s", key, raw, default)
            return default
        return value
    except (TypeError, ValueError):
        logger.warning("Invalid int value for %s=%s; using default %s", key, raw, default)
        return default


def _path_setting(key: str, file_config: Dict[str, Any], default: Optional[Path]) -> Optional[Path]:
    raw = _lookup(key, file_config)
    return Path(raw) if raw else default


def load_settings(dotenv: bool = True) -> FeedparqSettings:
    if dotenv:
        load_dotenv(os.getenv("FDPRQ_DOTENV", ".env"))
    file_config = load_config_file(os.getenv("FDPRQ_CONFIG"))
    defaults = FeedparqSettings()
    return FeedparqSettings(
        channels_dir=_path_setting("channels_dir", file_config, defaults.channels_dir),
        output_dir=_path_setting("output_dir", file_config, defaults.output_dir),
        metrics_db=_path_setting("metrics_db", file_config, defaults.metrics_db),
        concurrency=_int_setting("concurrency", file_config, defaults.concurrency),
        request_timeout=_int_setting("request_timeout", file_config, defaults.request_timeout),
        user_agent=_lookup("user_agent", file_config) or None,
        log_level=str(_lookup("log_level", file_config) or defaults.log_level).upper(),
        log_file=_path_setting("log_file", file_config, None),
        metrics_retention_hours=_int_setting("metrics_retention_hours", file_config, defaults.metrics_retention_hours),
    )
