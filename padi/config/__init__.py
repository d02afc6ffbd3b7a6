"""Process-wide configuration.

    from padi.config import get_settings

    cost = get_settings().ledger.costs.live_conversation_start
"""

from functools import lru_cache

from padi.config.loader import load_config
from padi.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load TOML once, then build `Settings` with env overrides applied."""
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]
