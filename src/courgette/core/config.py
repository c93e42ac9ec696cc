from __future__ import annotations

import os
from pathlib import Path
import tomllib

from courgette.core.errors import ConfigurationError

CONFIG_FILENAME = "courgette.toml"

_CONFIG_CACHE: dict | None = None


def config_path() -> Path:
    override = os.environ.get("COURGETTE_CONFIG_PATH")
    if override:
        return Path(override).expanduser()
    local = Path.cwd() / CONFIG_FILENAME
    if local.exists():
        return local
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else (Path.home() / ".config")
    return root / "courgette" / "config.toml"


def load_config(path: Path | None = None) -> dict:
    path = path or config_path()
    if not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Invalid config file: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config file structure: {path}")
    return data


def get_config() -> dict:
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = load_config()
    return _CONFIG_CACHE


def reset_config_cache() -> None:
    global _CONFIG_CACHE
    _CONFIG_CACHE = None


def get_config_value(*keys: str, default: object | None = None) -> object | None:
    current: object = get_config()
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current
