"""Configuration for the media server pool."""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def parse_server_urls(raw: Optional[str]) -> List[str]:
    """Split a comma-delimited MEDIA_SERVERS value into URLs.

    Args:
        raw: Raw environment value (may be None or blank)

    Returns:
        List of non-empty, stripped URLs
    """
    if not raw or not raw.strip():
        return []
    return [url.strip() for url in raw.split(",") if url.strip()]


@dataclass
class PoolConfig:
    """Configuration for media server registration, probing and scaling."""

    # Nodes registered at startup
    media_servers: List[str] = field(default_factory=list)

    # Health checks
    health_check_interval: float = 10.0  # seconds between probe cycles
    health_check_timeout: float = 5.0  # seconds per probe
    health_check_path: str = "/health"

    # Per-node load limits
    overload_threshold: int = 20  # streams; warning only
    capacity_ceiling: int = 25  # streams; has_capacity() refuses at this level

    # Scaling recommendation thresholds (pool-wide averages over healthy nodes)
    scale_up_streams_per_server: float = 20.0
    scale_up_cpu_percent: float = 80.0
    warning_streams_per_server: float = 15.0
    warning_cpu_percent: float = 70.0

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "PoolConfig":
        """Create configuration from environment variables.

        Returns:
            PoolConfig instance
        """
        return cls(
            media_servers=parse_server_urls(os.getenv("MEDIA_SERVERS")),
            health_check_interval=float(os.getenv("HEALTH_CHECK_INTERVAL", "10.0")),
            health_check_timeout=float(os.getenv("HEALTH_CHECK_TIMEOUT", "5.0")),
            health_check_path=os.getenv("HEALTH_CHECK_PATH", "/health"),
            overload_threshold=int(os.getenv("OVERLOAD_THRESHOLD", "20")),
            capacity_ceiling=int(os.getenv("CAPACITY_CEILING", "25")),
            scale_up_streams_per_server=float(os.getenv("SCALE_UP_STREAMS_PER_SERVER", "20")),
            scale_up_cpu_percent=float(os.getenv("SCALE_UP_CPU_PERCENT", "80")),
            warning_streams_per_server=float(os.getenv("WARNING_STREAMS_PER_SERVER", "15")),
            warning_cpu_percent=float(os.getenv("WARNING_CPU_PERCENT", "70")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if self.health_check_interval <= 0:
            raise ValueError(f"Invalid health_check_interval: {self.health_check_interval}")

        if self.health_check_timeout <= 0:
            raise ValueError(f"Invalid health_check_timeout: {self.health_check_timeout}")

        # Cycles must not overlap
        if self.health_check_timeout >= self.health_check_interval:
            raise ValueError(
                f"health_check_timeout ({self.health_check_timeout}) must be shorter than "
                f"health_check_interval ({self.health_check_interval})"
            )

        if not self.health_check_path.startswith("/"):
            raise ValueError(f"Invalid health_check_path: {self.health_check_path}")

        if self.overload_threshold < 0:
            raise ValueError(f"Invalid overload_threshold: {self.overload_threshold}")

        if self.capacity_ceiling < 1:
            raise ValueError(f"Invalid capacity_ceiling: {self.capacity_ceiling}")

        if self.warning_streams_per_server > self.scale_up_streams_per_server:
            raise ValueError(
                "warning_streams_per_server must not exceed scale_up_streams_per_server"
            )

        if self.warning_cpu_percent > self.scale_up_cpu_percent:
            raise ValueError("warning_cpu_percent must not exceed scale_up_cpu_percent")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Must be one of {valid_log_levels}"
            )


def get_config() -> PoolConfig:
    """Get pool configuration from environment.

    Returns:
        PoolConfig instance
    """
    config = PoolConfig.from_env()
    config.validate()
    return config
