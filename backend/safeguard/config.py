# safeguard/config.py
# ------------------------------------------------------------
# Central configuration using pydantic-settings.
#
# All values can be overridden via environment variables
# (or a local .env file).
# ------------------------------------------------------------

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """
    Runtime configuration for the alert service.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --------------------------------------------------------
    # Infrastructure
    # --------------------------------------------------------
    redis_url: str = "redis://localhost:6379/0"

    # --------------------------------------------------------
    # HTTP surface
    # --------------------------------------------------------
    # Every route lives under this prefix (clients are built against it)
    api_prefix: str = "/make-server-c840a992"

    # Comma-separated; "*" lets any web client poll
    api_cors_origins: str = "*"

    # --------------------------------------------------------
    # Retention sweep
    # --------------------------------------------------------
    alert_retention_days: int = 30
    cleanup_enabled: bool = True
    cleanup_interval_sec: int = 86400   # once a day

    # --------------------------------------------------------
    # Logging
    # --------------------------------------------------------
    log_level: str = "INFO"

    # --------------------------------------------------------
    # Helpers
    # --------------------------------------------------------
    def cors_list(self) -> List[str]:
        """
        Parse comma-separated CORS origins into a clean list.
        """
        return [
            x.strip()
            for x in self.api_cors_origins.split(",")
            if x.strip()
        ]


# Singleton settings object
settings = Settings()
