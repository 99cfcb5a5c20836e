"""Global configuration management for findex."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict

from .text import Messages

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".findex"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
RECENT_ROOTS_FILENAME = "recent_roots.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "findex_config_dir_override",
    default=None,
)
DEFAULT_SEARCH_LIMIT = 20
DEFAULT_LOG_LEVEL = "WARNING"
SUPPORTED_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Config:
    search_limit: int = DEFAULT_SEARCH_LIMIT
    auto_index: bool = True
    log_level: str = DEFAULT_LOG_LEVEL


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def recent_roots_path() -> Path:
    """Return the location of the persisted recent-roots registry."""
    return _resolve_config_dir() / RECENT_ROOTS_FILENAME


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", config_file, exc)
        return Config()
    if not isinstance(raw, dict):
        logger.warning("Ignoring malformed config file %s", config_file)
        return Config()
    config = Config()
    try:
        _apply_config_payload(config, raw)
    except ValueError as exc:
        logger.warning("Ignoring invalid config file %s: %s", config_file, exc)
        return Config()
    return config


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {
        "search_limit": config.search_limit,
        "auto_index": bool(config.auto_index),
        "log_level": config.log_level,
    }
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def set_search_limit(value: int) -> None:
    config = load_config()
    config.search_limit = _coerce_search_limit(value, "search_limit")
    save_config(config)


def set_auto_index(value: bool) -> None:
    config = load_config()
    config.auto_index = bool(value)
    save_config(config)


def set_log_level(value: str) -> None:
    config = load_config()
    config.log_level = normalize_log_level(value)
    save_config(config)


def normalize_log_level(value: object) -> str:
    if value is None:
        return DEFAULT_LOG_LEVEL
    if isinstance(value, str):
        normalized = value.strip().upper() or DEFAULT_LOG_LEVEL
        if normalized in SUPPORTED_LOG_LEVELS:
            return normalized
    raise ValueError(
        Messages.ERROR_LOG_LEVEL_INVALID.format(
            value=value, allowed=", ".join(SUPPORTED_LOG_LEVELS)
        )
    )


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "search_limit" in payload:
        config.search_limit = _coerce_search_limit(payload["search_limit"], "search_limit")
    if "auto_index" in payload:
        config.auto_index = _coerce_bool(payload["auto_index"], "auto_index")
    if "log_level" in payload:
        try:
            config.log_level = normalize_log_level(payload["log_level"])
        except ValueError:
            config.log_level = DEFAULT_LOG_LEVEL


def _coerce_search_limit(value: object, field: str) -> int:
    if value is None:
        return DEFAULT_SEARCH_LIMIT
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return DEFAULT_SEARCH_LIMIT
        try:
            value = int(cleaned)
        except ValueError as exc:
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    if not isinstance(value, int):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if value < 0:
        raise ValueError(Messages.ERROR_SEARCH_LIMIT_NEGATIVE)
    return value


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"true", "1", "yes", "on"}:
            return True
        if cleaned in {"false", "0", "no", "off"}:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
