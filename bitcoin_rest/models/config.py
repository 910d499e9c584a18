"""Configuration management using Pydantic settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_ENDPOINT = "http://localhost:8332/rest/"


class RestClientConfig(BaseSettings):
    """Configuration for the REST client, read from BITCOIN_REST_* variables."""

    # Node REST interface
    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="Base URL of the node's /rest/ interface")
    timeout: float = Field(default=30, gt=0, description="HTTP timeout in seconds")
    user_agent: str = Field(default="bitcoin-rest/1.0.0", description="User-Agent header")

    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json|text)")
    log_file: Optional[str] = Field(default=None, description="Log file path")
    log_max_size_mb: int = Field(default=100, description="Max log file size in MB")
    log_backup_count: int = Field(default=5, description="Number of log backups")

    class Config:
        env_prefix = "BITCOIN_REST_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def base_url(self) -> str:
        """Endpoint with exactly one trailing slash."""
        return self.endpoint.rstrip("/") + "/"
