"""
Configuration for the Aqman Gateway.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class GatewayConfig:
    """Aqman Gateway configuration settings."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Registry settings
    db_path: str = "aqmandb/aqman.db"

    # Device settings
    device_timeout: float = 5.0  # Seconds before an outbound device query gives up

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_max_bytes: int = 500 * 1024 * 1024
    log_backup_count: int = 3

    # CORS
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """Load configuration from environment variables."""
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("SERVER_HOST", "0.0.0.0"),
            port=int(os.getenv("SERVER_PORT", "8000")),
            db_path=os.getenv("AQMAN_DB_PATH", "aqmandb/aqman.db"),
            device_timeout=float(os.getenv("DEVICE_TIMEOUT", "5.0")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE_LOCATION") or None,
            log_max_bytes=int(os.getenv("LOG_MAX_BYTES", str(500 * 1024 * 1024))),
            log_backup_count=int(os.getenv("LOG_BACKUP_COUNT", "3")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


# Global config instance
_config: Optional[GatewayConfig] = None


def get_config() -> GatewayConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = GatewayConfig.from_env()
    return _config


def set_config(config: GatewayConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
