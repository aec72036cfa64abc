"""Configuration management using Pydantic Settings."""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_OPT: str | None = None

# Only load .env if it exists (for local development)
_env_path = Path(".env")
if _env_path.exists():
    load_dotenv(dotenv_path=_env_path)
    ENV_FILE_OPT = str(_env_path)


class Settings(BaseSettings):
    """Collector configuration.

    Values are read from ``REDIS_MONITOR_*`` environment variables. The server,
    port, timeout and password values are the defaults used when an item is
    requested with those parameters left blank.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_MONITOR_",
        env_file=ENV_FILE_OPT,
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Connection defaults
    default_server: str = Field(default="127.0.0.1", description="Redis server")
    default_port: int = Field(default=6379, description="Redis port")
    default_timeout: int = Field(default=5, description="Redis timeout in seconds")
    default_password: SecretStr = Field(default=SecretStr(""), description="Redis password")

    # Accepted ranges
    min_port: int = Field(default=1, description="Lowest accepted port")
    max_port: int = Field(default=65535, description="Highest accepted port")
    min_timeout: int = Field(default=1, description="Lowest accepted timeout")
    max_timeout: int = Field(default=30, description="Highest accepted timeout")

    client_name: str = Field(
        default="redis-monitor",
        description="Connection name set with CLIENT SETNAME; hidden from client discovery",
    )


# Global settings instance
settings = Settings()
