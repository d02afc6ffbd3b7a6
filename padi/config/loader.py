"""Reads the layered TOML configuration.

`default.toml` is mandatory. A file named after `PADI_ENV` (``development``
unless set) is merged over it when present. The directory comes from
`PADI_CONFIG_DIR`, or the nearest `config/` found walking up from the
working directory.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "PADI_CONFIG_DIR"
ENVIRONMENT_VAR = "PADI_ENV"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_FILE = "default.toml"

_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    explicit = os.environ.get(CONFIG_DIR_VAR)
    if explicit:
        configured = Path(explicit)
        if not configured.exists():
            raise FileNotFoundError(f"{CONFIG_DIR_VAR} points to a missing directory: {explicit}")
        return configured

    cwd = Path.cwd()
    for directory in [cwd, *cwd.parents][:_SEARCH_DEPTH]:
        candidate = directory / "config"
        if candidate.exists():
            return candidate
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: The file is absent
        tomllib.TOMLDecodeError: The file is not valid TOML
    """
    try:
        raw = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {file_path}") from None
    return tomllib.loads(raw.decode("utf-8"))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return `base` updated by `override` without mutating either.

    Tables merge key by key; scalars and arrays from `override` win.
    """
    merged = dict(base)
    for key, incoming in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = deep_merge(current, incoming)
        else:
            merged[key] = incoming
    return merged


def load_config() -> dict[str, Any]:
    config_dir = get_config_dir()
    default_path = config_dir / DEFAULT_FILE
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Missing {DEFAULT_FILE} in {config_dir}; "
            f"add it or point {CONFIG_DIR_VAR} at a directory that has one"
        )

    layers = [default_path, config_dir / f"{get_environment()}.toml"]
    config: dict[str, Any] = {}
    for path in layers:
        if path.is_file():
            config = deep_merge(config, load_toml(path))
    return config
