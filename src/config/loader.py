"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML file first, fills in any missing defaults,
then layers the environment-derived values from :class:`Settings` on top.
Each layer is merged into a fresh dict; nothing is mutated in place.
"""

from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError

_DEFAULTS: dict = {
    "app": {
        "redirect_url": "https://github.com/tycrek/hosuto",
    },
    "cache": {
        "directory_key": "KV_CACHE",
        "timestamp_key": "KV_LAST_UPDATED",
        "staleness_hours": 24,
    },
    "delivery": {
        "default_variant": "public",
        "max_age_seconds": 7776000,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is not
              an error; built-in defaults are used instead.
        settings: Settings instance to merge; a fresh one is read from the
                  environment when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    yaml_config: dict = {}
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(message=f"{path} must contain a mapping at the top level")

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "provider": {
            "account_id": settings.cloudflare_account_id,
            "api_base_url": settings.cloudflare_api_base_url,
            "configured": settings.has_cloudflare_credentials(),
        },
        "kv": {
            "backend": settings.kv_backend,
            "db_path": settings.kv_db_path,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    return _layered(_DEFAULTS, yaml_config, env_overrides)


def _layered(*layers: dict) -> dict:
    """Merge *layers* left to right into a new dict.

    Nested mappings are merged key by key; any other value from a later
    layer replaces the earlier one.  The inputs are never modified, so
    ``_DEFAULTS`` stays intact across calls.
    """
    merged: dict = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(value, dict):
                merged[key] = _layered(current if isinstance(current, dict) else {}, value)
            else:
                merged[key] = value
    return merged
