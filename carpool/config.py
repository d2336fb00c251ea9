"""
Configuration management for Carpool Core.

Loads YAML configuration into dataclasses. A missing file yields defaults;
an unreadable or invalid file raises ConfigurationError.

Example config.yaml:

    removal:
      high_impact_hours: 24
      emergency_hours: 2
      disband_without_driver: true

    logging:
      level: INFO
      file: ~/.carpool/carpool.log
      json_format: true
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from carpool.exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = Path("~/.carpool/config.yaml")
CONFIG_ENV_VAR = "CARPOOL_CONFIG"


@dataclass(frozen=True)
class RemovalConfig:
    """
    Driver removal policy settings.

    Attributes:
        high_impact_hours: Hours before the event under which a removal is
            flagged as high impact (default 24)
        emergency_hours: Hours before the event under which a removal is
            flagged as emergency only (default 2)
        disband_without_driver: Disband a carpool when a removal leaves no
            driver. When False the carpool survives in a driver-needed state
            as long as anyone remains.
    """
    high_impact_hours: float = 24.0
    emergency_hours: float = 2.0
    disband_without_driver: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """Logging settings passed to setup_logging."""
    level: str = "INFO"
    file: Optional[str] = None
    json_format: bool = True


@dataclass(frozen=True)
class CarpoolConfig:
    """Top-level configuration."""
    removal: RemovalConfig = field(default_factory=RemovalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_removal(data: Dict[str, Any]) -> RemovalConfig:
    defaults = RemovalConfig()
    try:
        high_impact_hours = float(data.get("high_impact_hours", defaults.high_impact_hours))
        emergency_hours = float(data.get("emergency_hours", defaults.emergency_hours))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid removal hours in configuration: {e}") from e

    if emergency_hours < 0 or high_impact_hours < 0:
        raise ConfigurationError("Removal hour thresholds must not be negative")
    if emergency_hours > high_impact_hours:
        raise ConfigurationError(
            f"emergency_hours ({emergency_hours}) must not exceed "
            f"high_impact_hours ({high_impact_hours})"
        )

    disband = data.get("disband_without_driver", defaults.disband_without_driver)
    if not isinstance(disband, bool):
        raise ConfigurationError(
            f"disband_without_driver must be true or false, got {disband!r}"
        )

    return RemovalConfig(
        high_impact_hours=high_impact_hours,
        emergency_hours=emergency_hours,
        disband_without_driver=disband,
    )


def _parse_logging(data: Dict[str, Any]) -> LoggingConfig:
    defaults = LoggingConfig()
    level = str(data.get("level", defaults.level)).upper()
    if level not in _VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid log level '{level}'. Must be one of: {sorted(_VALID_LOG_LEVELS)}"
        )

    log_file = data.get("file", defaults.file)
    if log_file is not None:
        log_file = str(Path(str(log_file)).expanduser())

    return LoggingConfig(
        level=level,
        file=log_file,
        json_format=bool(data.get("json_format", defaults.json_format)),
    )


def config_from_dict(data: Optional[Dict[str, Any]]) -> CarpoolConfig:
    """
    Build a CarpoolConfig from a parsed YAML mapping.

    Args:
        data: Parsed configuration mapping (None means all defaults)

    Returns:
        CarpoolConfig with defaults filled in

    Raises:
        ConfigurationError: If a section or value is invalid
    """
    if data is None:
        return CarpoolConfig()
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    sections = {}
    for name in ("removal", "logging"):
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
        sections[name] = section

    return CarpoolConfig(
        removal=_parse_removal(sections["removal"]),
        logging=_parse_logging(sections["logging"]),
    )


def resolve_config_path(config_path: Optional[str] = None) -> Path:
    """Resolve the config path from the argument, environment, or default."""
    if config_path:
        return Path(config_path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_config(config_path: Optional[str] = None) -> CarpoolConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Optional explicit path. Falls back to $CARPOOL_CONFIG,
            then ~/.carpool/config.yaml.

    Returns:
        Loaded CarpoolConfig, or defaults if the file does not exist

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = resolve_config_path(config_path)

    if not path.exists():
        return CarpoolConfig()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Failed to read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e

    return config_from_dict(data)
