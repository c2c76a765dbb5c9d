from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    ENVIRONMENT: str = "development"

    # Control surface (HTTP) settings
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8080

    # Agent listener settings
    AGENT_LISTENER_ENABLED: bool = True
    AGENT_HOST: str = "0.0.0.0"
    AGENT_PORT: int = 5555

    # Upper bound (seconds) for flushing one command to an agent socket
    AGENT_WRITE_TIMEOUT: float = 10.0
    # Longest accepted line from an agent, newline included
    AGENT_MAX_MESSAGE_BYTES: int = 1024 * 1024
    # Close the agent socket when a write fails so the read loop tears it down
    AGENT_TEARDOWN_ON_WRITE_ERROR: bool = True

    # "timestamp" -> "<ns>", "host" -> "<peer-host>-<ns>"
    CLIENT_ID_SCHEME: Literal["timestamp", "host"] = "timestamp"

    # Number of command_result messages kept per connected agent
    COMMAND_RESULT_HISTORY: int = 50

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/logging_errors.log"
    # Paths to exclude from access logs (e.g., /metrics, /health)
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]

    # Loki settings
    LOKI_ENABLED: bool = False
    LOKI_URL: str = "http://loki:3100"
    LOKI_VERSION: str = "1"

    @field_validator("AGENT_WRITE_TIMEOUT")
    @classmethod
    def validate_write_timeout(cls, v: float) -> float:
        """Reject unbounded or negative write deadlines."""
        if v <= 0:
            raise ValueError("AGENT_WRITE_TIMEOUT must be greater than zero")
        return v

    @field_validator("AGENT_MAX_MESSAGE_BYTES", "COMMAND_RESULT_HISTORY")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Buffer limits must be positive."""
        if v <= 0:
            raise ValueError("value must be greater than zero")
        return v


app_settings = Settings()
