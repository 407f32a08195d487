"""
Application configuration from environment variables.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class RelayConfig(BaseSettings):
    # Overall deadline for one upstream exchange (connect, write, response headers)
    relay_timeout_seconds: float = 30.0
    # Max inbound payload size in bytes. Default 5MB, same as the editor's JSON limit
    relay_max_body_size: int = 5 * 1024 * 1024
    # Comma-separated list of browser origins allowed to call the relay
    relay_cors_origins: str = "*"
    # Also reject IP-literal hosts in private/loopback/link-local ranges
    relay_block_private_networks: bool = False
    relay_log_level: str = "DEBUG"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.relay_cors_origins.split(",") if origin.strip()]


@lru_cache
def get_config() -> RelayConfig:
    return RelayConfig()
