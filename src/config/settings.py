"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. Environment variables, e.g. ``CLOUDFLARE_ACCOUNT_ID=abc123``
  2. A ``.env`` file in the working directory (local development only;
     never committed, see ``.env.example``)

Field ``cloudflare_api_key`` maps to ``CLOUDFLARE_API_KEY`` and so on.
Empty strings mean "not configured"; the service still starts so that the
404/redirect surface stays up, but listing calls fail with a
``ConfigurationError``.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """hosuto application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Cloudflare Images ===
    cloudflare_email: str = ""
    cloudflare_api_key: str = ""
    cloudflare_account_id: str = ""
    cloudflare_api_base_url: str = "https://api.cloudflare.com/client/v4"

    # === Key-value cache store ===
    # "sqlite" persists across restarts; "memory" is process-local.
    kv_backend: str = "sqlite"
    kv_db_path: str = "data/hosuto_kv.db"

    # === Outbound HTTP ===
    http_timeout: float = 30.0

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def has_cloudflare_credentials(self) -> bool:
        """Return ``True`` when both an API key and an account id are set."""
        return bool(self.cloudflare_api_key and self.cloudflare_account_id)
