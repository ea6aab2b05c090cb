"""Application configuration loader.

Loads configuration from an optional YAML file (configs/app.yaml, or the
path in LEARNPLAN_CONFIG) and applies environment variable overrides on top.

Usage:
    from learnplan.config.app_config import load_app_config

    config = load_app_config()
    if config.mock_mode:
        ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("configs/app.yaml")
CONFIG_ENV_VAR = "LEARNPLAN_CONFIG"

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class LLMSettings:
    """Chat-completion endpoint settings."""

    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama3-8b-8192"
    temperature: float = 0.7
    max_tokens: int = 4000
    timeout: int = 60
    api_key: str | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class SearchSettings:
    """Resource search API settings."""

    base_url: str = "https://api.tavily.com/search"
    timeout: int = 30
    max_results: int = 5
    api_key: str | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class StoreSettings:
    """Profile store settings (remote document API and/or database)."""

    base_url: str = "https://api.mem0.ai/v1"
    timeout: int = 30
    api_key: str | None = None
    collection_id: str | None = None
    database_url: str | None = None

    @property
    def remote_configured(self) -> bool:
        return bool(self.api_key and self.collection_id)


@dataclass
class ServerSettings:
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 5000
    port_attempts: int = 10


@dataclass
class AppConfig:
    """Application-wide configuration."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    store: StoreSettings = field(default_factory=StoreSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    mock_mode: bool = False
    environment: str = "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def to_dict(self, mask_secrets: bool = True) -> dict[str, Any]:
        """Convert to dictionary, masking API keys by default."""

        def secret(value: str | None) -> str | None:
            if value is None or not mask_secrets:
                return value
            return "****" + value[-4:] if len(value) > 4 else "****"

        return {
            "llm": {
                "base_url": self.llm.base_url,
                "model": self.llm.model,
                "temperature": self.llm.temperature,
                "max_tokens": self.llm.max_tokens,
                "timeout": self.llm.timeout,
                "api_key": secret(self.llm.api_key),
            },
            "search": {
                "base_url": self.search.base_url,
                "timeout": self.search.timeout,
                "max_results": self.search.max_results,
                "api_key": secret(self.search.api_key),
            },
            "store": {
                "base_url": self.store.base_url,
                "timeout": self.store.timeout,
                "api_key": secret(self.store.api_key),
                "collection_id": self.store.collection_id,
                "database_url": self.store.database_url,
            },
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "port_attempts": self.server.port_attempts,
            },
            "mock_mode": self.mock_mode,
            "environment": self.environment,
        }


# Module-level cache
_cached_config: AppConfig | None = None


def parse_bool(value: Any) -> bool:
    """Interpret config/env values such as "true", "1", "yes" as booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    llm_data = data.get("llm", {}) or {}
    search_data = data.get("search", {}) or {}
    store_data = data.get("store", {}) or {}
    server_data = data.get("server", {}) or {}

    defaults = AppConfig()

    llm = LLMSettings(
        base_url=llm_data.get("base_url", defaults.llm.base_url),
        model=llm_data.get("model", defaults.llm.model),
        temperature=float(llm_data.get("temperature", defaults.llm.temperature)),
        max_tokens=int(llm_data.get("max_tokens", defaults.llm.max_tokens)),
        timeout=int(llm_data.get("timeout", defaults.llm.timeout)),
    )
    search = SearchSettings(
        base_url=search_data.get("base_url", defaults.search.base_url),
        timeout=int(search_data.get("timeout", defaults.search.timeout)),
        max_results=int(search_data.get("max_results", defaults.search.max_results)),
    )
    store = StoreSettings(
        base_url=store_data.get("base_url", defaults.store.base_url),
        timeout=int(store_data.get("timeout", defaults.store.timeout)),
        collection_id=store_data.get("collection_id"),
        database_url=store_data.get("database_url"),
    )
    server = ServerSettings(
        host=server_data.get("host", defaults.server.host),
        port=int(server_data.get("port", defaults.server.port)),
        port_attempts=int(server_data.get("port_attempts", defaults.server.port_attempts)),
    )

    return AppConfig(
        llm=llm,
        search=search,
        store=store,
        server=server,
        mock_mode=parse_bool(data.get("mock_mode", False)),
        environment=str(data.get("environment", defaults.environment)),
    )


def _apply_env_overrides(config: AppConfig, env: dict[str, str]) -> AppConfig:
    """Apply environment variables on top of file/default configuration.

    API keys are only ever read from the environment.
    """
    config.llm.api_key = env.get("GROQ_API_KEY") or None
    if "GROQ_MODEL" in env:
        config.llm.model = env["GROQ_MODEL"]
    if "GROQ_BASE_URL" in env:
        config.llm.base_url = env["GROQ_BASE_URL"]
    if "GROQ_TEMPERATURE" in env:
        config.llm.temperature = float(env["GROQ_TEMPERATURE"])
    if "GROQ_MAX_TOKENS" in env:
        config.llm.max_tokens = int(env["GROQ_MAX_TOKENS"])

    config.search.api_key = env.get("TAVILY_API_KEY") or None

    config.store.api_key = env.get("MEM0_API_KEY") or None
    if env.get("MEM0_COLLECTION_ID"):
        config.store.collection_id = env["MEM0_COLLECTION_ID"]
    if env.get("DATABASE_URL"):
        config.store.database_url = env["DATABASE_URL"]

    if "USE_MOCK_DATA" in env:
        config.mock_mode = parse_bool(env["USE_MOCK_DATA"])
    if env.get("PORT"):
        config.server.port = int(env["PORT"])
    if env.get("APP_ENV"):
        config.environment = env["APP_ENV"]

    return config


def load_app_config(
    force_reload: bool = False,
    config_path: Path | None = None,
    env: dict[str, str] | None = None,
) -> AppConfig:
    """Load application config from YAML and environment.

    Args:
        force_reload: If True, ignore cached config and reload.
        config_path: Explicit YAML path (defaults to LEARNPLAN_CONFIG or configs/app.yaml).
        env: Environment mapping (defaults to os.environ).

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    if env is None:
        env = dict(os.environ)

    if config_path is None:
        config_path = Path(env[CONFIG_ENV_VAR]) if env.get(CONFIG_ENV_VAR) else CONFIG_FILE

    data: dict[str, Any]
    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    else:
        logger.debug("using_default_config")
        data = {}

    _cached_config = _apply_env_overrides(_parse_config(data), env)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
