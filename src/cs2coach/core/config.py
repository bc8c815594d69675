"""
Settings for cs2coach.

Detector thresholds, scoring, the training record directory and logging
can be set in a cs2coach.yaml / .toml / .json file and overridden with
CS2COACH_* environment variables. Anything left unset keeps the defaults
below, which match the standard CS2 values (64 tick, 128-tick trade window).
"""

import json
import logging
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from cs2coach.core.constants import (
    BUY_TIME_SECONDS,
    CS2_TICK_RATE,
    FLASH_ASSIST_MIN_DURATION,
    FLASH_ASSIST_WINDOW_TICKS,
    TRADE_WINDOW_TICKS,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class AnalysisConfig:
    """Thresholds for the temporal correlation detectors."""

    trade_window_ticks: int = TRADE_WINDOW_TICKS
    flash_assist_window_ticks: int = FLASH_ASSIST_WINDOW_TICKS
    flash_assist_min_duration: float = FLASH_ASSIST_MIN_DURATION

    # Buys made within this many seconds of round start count as the round loadout
    buy_time_seconds: float = BUY_TIME_SECONDS

    # Used when the stream carries no ServerInfo
    default_tick_rate: int = CS2_TICK_RATE


@dataclass
class ScoringConfig:
    """Configuration for the 0-100 performance rating."""

    # Economy points awarded when no buy-phase data exists (half of 15)
    neutral_economy_points: float = 7.5


@dataclass
class TrainingConfig:
    """Where rated matches are stored for the external trainer."""

    data_directory: str = "training_data"
    json_indent: int = 2


@dataclass
class LoggingConfig:
    """Root logger settings applied by the CLI."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None


@dataclass
class CoachConfig:
    """All cs2coach settings, one attribute per section."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    config_version: str = "1.0"


SECTIONS = ("analysis", "scoring", "training", "logging")


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Candidate config files, searched in order (working directory first)."""
    paths = []

    paths.append(Path.cwd() / "cs2coach.yaml")
    paths.append(Path.cwd() / "cs2coach.toml")
    paths.append(Path.cwd() / "cs2coach.json")

    home = Path.home()
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "cs2coach" / "config.yaml")
    paths.append(Path(xdg_config) / "cs2coach" / "config.toml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Read a YAML config file; an empty file gives an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Read a TOML config file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Read a JSON config file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a config file of any supported format; a missing file gives {}."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


def load_env_config() -> dict[str, Any]:
    """Collect CS2COACH_* overrides into a nested section dict."""
    config: dict[str, Any] = {}

    env_mappings = {
        "CS2COACH_LOG_LEVEL": ("logging", "level"),
        "CS2COACH_LOG_FILE": ("logging", "file"),
        "CS2COACH_TRAINING_DIR": ("training", "data_directory"),
        "CS2COACH_TRADE_WINDOW_TICKS": ("analysis", "trade_window_ticks"),
        "CS2COACH_FLASH_WINDOW_TICKS": ("analysis", "flash_assist_window_ticks"),
        "CS2COACH_FLASH_MIN_DURATION": ("analysis", "flash_assist_min_duration"),
        "CS2COACH_BUY_TIME_SECONDS": ("analysis", "buy_time_seconds"),
    }

    for env_var, (section, key) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            if section not in config:
                config[section] = {}

            # Type conversion
            if value.lower() in ("true", "false"):
                value = value.lower() == "true"
            elif value.isdigit():
                value = int(value)
            else:
                try:
                    value = float(value)
                except ValueError:
                    pass

            config[section][key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``override`` onto ``base`` section by section."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> CoachConfig:
    """Convert a dictionary to CoachConfig, ignoring unknown keys."""
    config = CoachConfig()

    for section in SECTIONS:
        target = getattr(config, section)
        for key, value in (data.get(section) or {}).items():
            if hasattr(target, key):
                setattr(target, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section}.{key}")

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> CoachConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged CoachConfig
    """
    config_data: dict[str, Any] = {}

    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def config_to_dict(config: CoachConfig) -> dict[str, Any]:
    """Convert CoachConfig to a dictionary."""
    return asdict(config)


def save_config(config: CoachConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (.yaml/.yml or .json)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


def generate_default_config(path: Path) -> None:
    """Write a configuration file holding every default value."""
    save_config(CoachConfig(), path)
    logger.info(f"Generated default config at: {path}")


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: CoachConfig | None = None


def get_config() -> CoachConfig:
    """Process-wide settings, loaded from disk and environment on first use."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: CoachConfig) -> None:
    """Replace the process-wide settings (the CLI does this for --config)."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Forget the process-wide settings so the next get_config() reloads them."""
    global _global_config
    _global_config = None
