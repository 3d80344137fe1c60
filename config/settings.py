"""Application configuration for the command library API.

Everything is read once from the environment at startup; there is no reload.
"""

import os
import logging
from pathlib import Path
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_STATIC_DIR = str(Path(__file__).resolve().parents[1] / "server" / "static")

DEFAULT_POPULAR_COMMANDS = [
    "ls", "cd", "grep", "find", "cat", "cp", "mv", "rm", "chmod", "chown",
    "tar", "ssh", "curl", "ps", "top", "df", "du", "git", "sed", "awk",
]

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class AppConfig(BaseModel):
    """Runtime configuration."""
    database_path: str = Field(default="database.db", description="Path to the SQLite catalog")
    server_addr: str = Field(default="0.0.0.0:8080", description="Bind address as host:port")
    enable_cors: bool = Field(default=True, description="Allow cross-origin requests")
    allowed_origins: List[str] = Field(default_factory=list, description="Origins allowed when CORS is on; empty means any")

    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines on the console")
    log_file: Optional[str] = Field(default=None, description="Optional JSON log file")

    search_default_limit: int = Field(default=50, ge=1, description="Search results when no limit is given")
    search_max_limit: int = Field(default=100, ge=1, description="Hard cap on search and suggestion results")
    suggestion_limit: int = Field(default=10, ge=1, description="Suggestions when no limit is given")
    popular_commands: List[str] = Field(default_factory=lambda: list(DEFAULT_POPULAR_COMMANDS))

    static_dir: str = Field(default=DEFAULT_STATIC_DIR, description="Directory holding the frontend bundle")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("server_addr")
    @classmethod
    def _check_server_addr(cls, value: str) -> str:
        host, sep, port = value.strip().rpartition(":")
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"server address must be host:port, got {value!r}")
        return value.strip()

    @model_validator(mode="after")
    def _check_limits(self) -> "AppConfig":
        if self.search_default_limit > self.search_max_limit:
            raise ValueError("search_default_limit cannot exceed search_max_limit")
        if self.suggestion_limit > self.search_max_limit:
            raise ValueError("suggestion_limit cannot exceed search_max_limit")
        return self

    @property
    def bind(self) -> Tuple[str, int]:
        host, _, port = self.server_addr.rpartition(":")
        return host.strip("[]"), int(port)

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Create configuration from environment variables."""
        return cls(
            database_path=os.getenv("DATABASE_PATH", "database.db"),
            server_addr=os.getenv("SERVER_ADDR", "0.0.0.0:8080"),
            enable_cors=_env_bool("ENABLE_CORS", "true"),
            allowed_origins=_env_list("ALLOWED_ORIGINS", []),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", "false"),
            log_file=os.getenv("LOG_FILE") or None,
            search_default_limit=os.getenv("SEARCH_DEFAULT_LIMIT", "50"),
            search_max_limit=os.getenv("SEARCH_MAX_LIMIT", "100"),
            suggestion_limit=os.getenv("SUGGESTION_LIMIT", "10"),
            popular_commands=_env_list("POPULAR_COMMANDS", DEFAULT_POPULAR_COMMANDS),
            static_dir=os.getenv("STATIC_DIR", DEFAULT_STATIC_DIR),
        )
