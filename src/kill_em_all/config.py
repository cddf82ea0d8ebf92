"""Configuration loading and validation."""

import logging
import math
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SIGNAL = "SIGTERM"
DEFAULT_TIMEOUT_MS = 5000.0
POLL_INTERVAL_MS = 100.0
ZOMBIE_PROBE_EVERY = 5  # Full state probe on the first poll and every Nth after


class TerminationOptions(BaseModel):
    """Timeouts and escalation behaviour for one termination request."""
    graceful_timeout_ms: float = DEFAULT_TIMEOUT_MS
    escalate_on_timeout: bool = True
    # None means "same as graceful_timeout_ms"
    forceful_timeout_ms: Optional[float] = None

    poll_interval_ms: float = POLL_INTERVAL_MS
    zombie_probe_every: int = ZOMBIE_PROBE_EVERY

    @field_validator('graceful_timeout_ms', 'forceful_timeout_ms')
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        # nan < 0 is False, so non-finite values need their own check
        if not math.isfinite(v) or v < 0:
            raise ValueError(f"timeout must be a finite number >= 0 ms, got {v}")
        return v

    @field_validator('poll_interval_ms')
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError(f"poll_interval_ms must be positive, got {v}")
        return v

    @field_validator('zombie_probe_every')
    @classmethod
    def validate_zombie_probe_every(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"zombie_probe_every must be >= 1, got {v}")
        return v

    @property
    def effective_forceful_timeout_ms(self) -> float:
        if self.forceful_timeout_ms is None:
            return self.graceful_timeout_ms
        return self.forceful_timeout_ms


class Settings(BaseSettings):
    """Defaults for the command-line tool, overridable via KILL_EM_ALL_* variables."""
    model_config = SettingsConfigDict(env_prefix="KILL_EM_ALL_", extra="ignore")

    signal: str = DEFAULT_SIGNAL
    graceful_timeout_ms: float = DEFAULT_TIMEOUT_MS
    escalate_on_timeout: bool = True
    forceful_timeout_ms: Optional[float] = None
    poll_interval_ms: float = POLL_INTERVAL_MS
    zombie_probe_every: int = ZOMBIE_PROBE_EVERY

    def to_options(self, **overrides) -> TerminationOptions:
        """Build TerminationOptions, letting explicit overrides win over settings."""
        data = {
            "graceful_timeout_ms": self.graceful_timeout_ms,
            "escalate_on_timeout": self.escalate_on_timeout,
            "forceful_timeout_ms": self.forceful_timeout_ms,
            "poll_interval_ms": self.poll_interval_ms,
            "zombie_probe_every": self.zombie_probe_every,
        }
        data.update({k: v for k, v in overrides.items() if v is not None})
        return TerminationOptions(**data)


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings from an optional YAML file, then environment variables.

    Keys in the file use the Settings field names. Environment variables are
    applied by pydantic-settings and take precedence over defaults only, so
    values from the file win.
    """
    if config_path is None:
        return Settings()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    logger.debug(f"Loaded settings from {config_path}: {sorted(data)}")
    return Settings(**data)
