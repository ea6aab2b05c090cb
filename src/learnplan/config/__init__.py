"""Configuration package for the learning plan service."""

from learnplan.config.app_config import (
    AppConfig,
    LLMSettings,
    SearchSettings,
    ServerSettings,
    StoreSettings,
    clear_config_cache,
    load_app_config,
    parse_bool,
)

__all__ = [
    "AppConfig",
    "LLMSettings",
    "SearchSettings",
    "ServerSettings",
    "StoreSettings",
    "clear_config_cache",
    "load_app_config",
    "parse_bool",
]
