"""Simulation configuration management with validation - single source of truth."""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_SYMBOLS = ["YNDX", "TATN", "MGNT", "TCSG"]
DEFAULT_SEED_PRICE = 100.0
DEFAULT_SEED_VOLUME = 1000
DEFAULT_SEED_DEPTH = 10


def _seed_instrument(symbol: str) -> Dict[str, Any]:
    return {
        "symbol": symbol,
        "price": DEFAULT_SEED_PRICE,
        "volume": DEFAULT_SEED_VOLUME,
        "depth": DEFAULT_SEED_DEPTH,
    }


@dataclass
class SimulationConfiguration:
    """
    Validated simulation configuration - single source of truth for defaults.

    All default values are defined here. YAML files and environment variables
    override these defaults.
    """
    instruments: List[Dict[str, Any]] = field(default_factory=lambda: [
        _seed_instrument(symbol) for symbol in DEFAULT_SYMBOLS
    ])
    usernames: List[str] = field(default_factory=lambda: [
        "trader1",
        "trader2",
        "trader3"
    ])
    starting_cash: float = 1000.0
    actions_per_agent: int = 5
    max_quantity: int = 10
    trade_interval: float = 1.0
    feed_interval: float = 1.0
    seed: Optional[int] = None

    @classmethod
    def get_defaults(cls) -> Dict[str, Any]:
        """
        Get default configuration as dictionary.

        Returns:
            Dictionary with default values from the dataclass
        """
        return asdict(cls())

    def validate(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.instruments, list) or not all(isinstance(s, dict) for s in self.instruments):
            raise ValueError("Instruments must be a list of mappings")
        if not isinstance(self.usernames, list):
            raise ValueError("Usernames must be a list")
        if not self.instruments:
            raise ValueError("At least one instrument must be configured")
        symbols = []
        for seed in self.instruments:
            if not seed.get("symbol"):
                raise ValueError("Every instrument needs a symbol")
            if float(seed.get("price", DEFAULT_SEED_PRICE)) <= 0:
                raise ValueError(f"Seed price for {seed['symbol']} must be positive")
            if int(seed.get("volume", DEFAULT_SEED_VOLUME)) < 0:
                raise ValueError(f"Seed volume for {seed['symbol']} must be non-negative")
            if int(seed.get("depth", DEFAULT_SEED_DEPTH)) < 0:
                raise ValueError(f"Seed depth for {seed['symbol']} must be non-negative")
            symbols.append(seed["symbol"])
        if len(set(symbols)) != len(symbols):
            raise ValueError("Instrument symbols must be unique")
        if not self.usernames:
            raise ValueError("At least one username must be configured")
        if len(set(self.usernames)) != len(self.usernames):
            raise ValueError("Usernames must be unique")
        if self.starting_cash < 0:
            raise ValueError("Starting cash must be non-negative")
        if self.actions_per_agent < 0:
            raise ValueError("Actions per agent must be non-negative")
        if self.max_quantity < 1:
            raise ValueError("Max quantity must be at least 1")
        if self.trade_interval < 0:
            raise ValueError("Trade interval must be non-negative")
        if self.feed_interval <= 0:
            raise ValueError("Feed interval must be positive")

    @property
    def symbols(self) -> List[str]:
        return [seed["symbol"] for seed in self.instruments]

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)


def _load_from_yaml(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML file

    Returns:
        Configuration dictionary from YAML (under 'simulation' key if present)
    """
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config file {config_path}: {e}")
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    section = config.get("simulation", config) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config file {config_path}: 'simulation' section must be a mapping")
    return section


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _apply_environment_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables take precedence over file/config defaults.

    Args:
        config: Configuration dictionary to modify

    Returns:
        Modified configuration dictionary
    """
    if "SIM_SEED" in os.environ:
        config["seed"] = int(os.environ["SIM_SEED"])

    if "SIM_STARTING_CASH" in os.environ:
        config["starting_cash"] = float(os.environ["SIM_STARTING_CASH"])

    if "SIM_ACTIONS_PER_AGENT" in os.environ:
        config["actions_per_agent"] = int(os.environ["SIM_ACTIONS_PER_AGENT"])

    if "SIM_MAX_QUANTITY" in os.environ:
        config["max_quantity"] = int(os.environ["SIM_MAX_QUANTITY"])

    # Pacing
    if "SIM_TRADE_INTERVAL" in os.environ:
        config["trade_interval"] = float(os.environ["SIM_TRADE_INTERVAL"])

    if "SIM_FEED_INTERVAL" in os.environ:
        config["feed_interval"] = float(os.environ["SIM_FEED_INTERVAL"])

    # Population
    if "SIM_USERNAMES" in os.environ:
        config["usernames"] = _split_list(os.environ["SIM_USERNAMES"])

    if "SIM_SYMBOLS" in os.environ:
        config["instruments"] = [
            _seed_instrument(symbol) for symbol in _split_list(os.environ["SIM_SYMBOLS"])
        ]

    return config


def load_config(config_path: Optional[str] = None) -> SimulationConfiguration:
    """
    Load simulation configuration from YAML file or use defaults.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. YAML file values
    3. SimulationConfiguration dataclass defaults

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated SimulationConfiguration

    Raises:
        ValueError: If configuration is invalid
    """
    config = SimulationConfiguration.get_defaults()

    if config_path and Path(config_path).exists():
        yaml_config = _load_from_yaml(config_path)
        config.update({k: v for k, v in yaml_config.items() if v is not None})

    try:
        config = _apply_environment_overrides(config)
    except ValueError as e:
        raise ValueError(f"Invalid environment override: {e}")

    try:
        sim_cfg = SimulationConfiguration(**config)
        sim_cfg.validate()
    except TypeError as e:
        raise ValueError(f"Invalid configuration field: {e}")
    except Exception as e:
        raise ValueError(f"Invalid configuration: {e}")
    return sim_cfg
