"""Client settings and logging configuration."""

import json
import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudrest._version import __version__


class ClientSettings(BaseSettings):
    """Client settings loaded from `CLOUDREST_*` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDREST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Endpoints
    endpoint: str | None = Field(
        default=None,
        description="Service endpoint URL",
    )
    management_endpoint: str = Field(
        default="https://management.azure.com",
        description="Resource-management endpoint URL",
    )
    api_version_file: str = Field(
        default="2019-07-07",
        description="x-ms-version sent to the file service",
    )
    api_version_workloads: str = Field(
        default="2023-04-01",
        description="api-version sent to the workloads resource provider",
    )

    # Transport
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout (seconds)",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Connection retries performed by the HTTP transport",
    )
    user_agent: str = Field(
        default=f"cloudrest/{__version__}",
        description="User-Agent header value",
    )

    # Long-running operations
    polling_interval: float = Field(
        default=2.0,
        ge=0,
        description="Default seconds between status polls",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format",
    )

    def configure_logging(self) -> None:
        """Configure the root logger from these settings."""
        handler = logging.StreamHandler()
        if self.log_json:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(self.log_format))

        logging.basicConfig(level=self.log_level, handlers=[handler], force=True)

        if self.log_level != "DEBUG":
            # Reduce noise from the HTTP stack
            logging.getLogger("httpx").setLevel(logging.WARNING)
            logging.getLogger("httpcore").setLevel(logging.WARNING)


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


@lru_cache
def get_settings() -> ClientSettings:
    """Get cached client settings."""
    return ClientSettings()
