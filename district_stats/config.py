# config.py

"""Configuration settings for District Stats."""

import os
from dataclasses import dataclass, replace
from typing import Optional

from .exceptions import ConfigurationError

# Collection
DEFAULT_WAIT = 2.0  # Seconds to wait for node facts
DEFAULT_FACTS_PORT = 8778
DEFAULT_FACTS_PATH = "/facts"
DEFAULT_BATCH_SIZE = 500  # User records per broker page
DEFAULT_BROKER_TIMEOUT = 30.0

# Capacity alerting
DEFAULT_PROFILE = "small"
DEFAULT_THRESHOLD = 90.0  # Percent of active gear capacity in use

# Synthetic district holding nodes without a district
NONE_DISTRICT_NAME = "(NONE)"
NONE_DISTRICT_PREFIX = "NONE-"

# Required environment variables
REQUIRED_ENV_VARS = [
    'DISTRICT_STATS_BROKER_URL',
]

# Logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class StatsConfig:
    """Settings for one collection and aggregation pass."""
    broker_url: str
    wait: float = DEFAULT_WAIT
    db_stats: bool = False
    profile: Optional[str] = None
    threshold: float = DEFAULT_THRESHOLD
    facts_port: int = DEFAULT_FACTS_PORT
    batch_size: int = DEFAULT_BATCH_SIZE

    def validate(self) -> None:
        """Validate configuration values."""
        if not self.broker_url:
            raise ConfigurationError("Broker URL is required")
        if self.wait <= 0:
            raise ConfigurationError(f"Wait must be positive, got {self.wait}")
        if not 0 <= self.threshold <= 100:
            raise ConfigurationError(
                f"Threshold must be between 0 and 100, got {self.threshold}"
            )
        if self.batch_size <= 0:
            raise ConfigurationError("Batch size must be a positive integer")

    def with_overrides(self, **overrides) -> "StatsConfig":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        config = replace(self, **values)
        config.validate()
        return config


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def config_from_env(**overrides) -> StatsConfig:
    """
    Build a StatsConfig from DISTRICT_STATS_* environment variables.

    Keyword overrides that are not None take precedence over the environment.
    Raises ConfigurationError if required variables are missing or invalid.
    """
    missing_vars = [var for var in REQUIRED_ENV_VARS if not os.environ.get(var)]
    if missing_vars and not overrides.get('broker_url'):
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )

    config = StatsConfig(
        broker_url=os.environ.get('DISTRICT_STATS_BROKER_URL', ''),
        wait=_env_float('DISTRICT_STATS_WAIT', DEFAULT_WAIT),
        db_stats=os.environ.get('DISTRICT_STATS_DB', 'false').lower() == 'true',
        profile=os.environ.get('DISTRICT_STATS_PROFILE') or None,
        threshold=_env_float('DISTRICT_STATS_THRESHOLD', DEFAULT_THRESHOLD),
        facts_port=_env_int('DISTRICT_STATS_FACTS_PORT', DEFAULT_FACTS_PORT),
        batch_size=_env_int('DISTRICT_STATS_BATCH_SIZE', DEFAULT_BATCH_SIZE),
    )
    return config.with_overrides(**overrides)
