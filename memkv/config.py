"""
MemKV Configuration Management

Environment-based configuration with validation and type checking.
"""

import os
from dataclasses import dataclass
from enum import Enum


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class MemKVConfig:
    """
    Complete MemKV configuration.

    All values come from environment variables with sensible defaults.
    """

    # Server configuration
    host: str = "0.0.0.0"
    http_port: int = 8080

    # Authentication (bearer token required on every data route)
    api_key: str = ""

    # Observability configuration
    log_level: LogLevel = LogLevel.INFO
    metrics_enabled: bool = True

    # Seconds to let in-flight requests finish on shutdown
    shutdown_timeout_secs: float = 5.0

    @classmethod
    def from_env(cls) -> "MemKVConfig":
        """
        Load configuration from environment variables.

        Environment variable names:
        - MEMKV_HOST
        - MEMKV_HTTP_PORT
        - MEMKV_API_KEY
        - MEMKV_LOG_LEVEL
        - MEMKV_METRICS_ENABLED
        - MEMKV_SHUTDOWN_TIMEOUT_SECS
        """

        def get_int(key: str, default: int) -> int:
            try:
                return int(os.getenv(f"MEMKV_{key}", default))
            except ValueError:
                return default

        def get_float(key: str, default: float) -> float:
            try:
                return float(os.getenv(f"MEMKV_{key}", default))
            except ValueError:
                return default

        def get_bool(key: str, default: bool) -> bool:
            value = os.getenv(f"MEMKV_{key}", str(default)).lower()
            return value in ("true", "1", "yes", "on")

        def get_str(key: str, default: str) -> str:
            return os.getenv(f"MEMKV_{key}", default)

        def get_enum(key: str, enum_cls, default):
            value = get_str(key, default.value).upper()
            try:
                return enum_cls(value)
            except ValueError:
                return default

        return cls(
            host=get_str("HOST", "0.0.0.0"),
            http_port=get_int("HTTP_PORT", 8080),
            api_key=get_str("API_KEY", ""),
            log_level=get_enum("LOG_LEVEL", LogLevel, LogLevel.INFO),
            metrics_enabled=get_bool("METRICS_ENABLED", True),
            shutdown_timeout_secs=get_float("SHUTDOWN_TIMEOUT_SECS", 5.0),
        )

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if valid, raises ValueError if invalid
        """
        if self.http_port < 1024 or self.http_port > 65535:
            raise ValueError(f"Invalid http_port: {self.http_port}")

        if not self.api_key:
            raise ValueError("api_key must be set (MEMKV_API_KEY)")

        if self.shutdown_timeout_secs <= 0:
            raise ValueError(f"shutdown_timeout_secs must be positive: {self.shutdown_timeout_secs}")

        return True

    def to_dict(self) -> dict:
        """Convert configuration to dictionary. The API key is masked."""
        return {
            "host": self.host,
            "http_port": self.http_port,
            "api_key": "***" if self.api_key else "",
            "log_level": self.log_level.value,
            "metrics_enabled": self.metrics_enabled,
            "shutdown_timeout_secs": self.shutdown_timeout_secs,
        }

    def __str__(self) -> str:
        """Pretty print configuration."""
        lines = ["MemKV Configuration:"]
        for key, value in self.to_dict().items():
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
