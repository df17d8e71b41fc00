"""Process settings and environment configuration."""

from dataclasses import dataclass, field
import os


def _get_env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _get_env_float(name: str, default: float) -> float:
    return float(os.getenv(name, default))


@dataclass
class Settings:
    config_path: str = field(default_factory=lambda: _get_env("MARKETSIM_CONFIG", "config/simulation_config.yaml"))
    log_level: str = field(default_factory=lambda: _get_env("MARKETSIM_LOG_LEVEL", "INFO").upper())
    shutdown_timeout: float = field(
        default_factory=lambda: _get_env_float("MARKETSIM_SHUTDOWN_TIMEOUT", 5.0)
    )


settings = Settings()
