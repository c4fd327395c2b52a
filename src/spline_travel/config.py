"""Configuration loading for the command-line tool.

Loads a YAML file into ``ProcessingOptions`` and ``PrecisionSettings``.
Keys are the dataclass field names; precision settings live under a
``precision`` mapping::

    retract_length: 1.5
    acceleration: 800
    use_straight_travel: false
    precision:
      position_decimals: 3
      speed_decimals: -1

Usage::

    from spline_travel.config import load_config
    cfg = load_config("splinetravel.yaml")
    planner = TravelPlanner(cfg.options, cfg.precision)
"""

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from spline_travel.models.options import ProcessingOptions
from spline_travel.models.precision import PrecisionSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "splinetravel.yaml"

# Options that divide or bound motion and must be strictly positive
_POSITIVE_OPTIONS = frozenset(
    {
        "acceleration",
        "speed_limit",
        "filament_acceleration",
        "speed_straight",
        "retract_speed_straight",
    }
)

# Decimal counts that may be negative
_SIGNED_PRECISION = frozenset({"speed_decimals"})


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""

    pass


@dataclass(frozen=True)
class SplineTravelConfig:
    """Everything the planner needs from a configuration file."""

    options: ProcessingOptions = field(default_factory=ProcessingOptions)
    precision: PrecisionSettings = field(default_factory=PrecisionSettings)


def default_config_path(input_path: Union[str, Path]) -> Path:
    """Configuration file looked up next to a G-code file."""
    return Path(input_path).resolve().parent / DEFAULT_CONFIG_NAME


def _parse_option(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigError(f"'{name}' must be true or false, got {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{name}' must be a number, got {value!r}")
    value = float(value)
    if name in _POSITIVE_OPTIONS and value <= 0:
        raise ConfigError(f"'{name}' must be positive, got {value}")
    if value < 0:
        raise ConfigError(f"'{name}' must be non-negative, got {value}")
    return value


def _parse_precision(data: Any, base: PrecisionSettings) -> PrecisionSettings:
    if not isinstance(data, dict):
        raise ConfigError(f"'precision' must be a mapping, got {type(data).__name__}")
    known = {f.name for f in fields(PrecisionSettings)}
    changes: Dict[str, int] = {}
    for name, value in data.items():
        if name not in known:
            raise ConfigError(f"Unknown precision setting '{name}'")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"'precision.{name}' must be an integer, got {value!r}")
        if value < 0 and name not in _SIGNED_PRECISION:
            raise ConfigError(f"'precision.{name}' must be non-negative, got {value}")
        changes[name] = value
    return replace(base, **changes)


def parse_config(
    data: Optional[Dict[str, Any]], base: Optional[SplineTravelConfig] = None
) -> SplineTravelConfig:
    """Build a configuration from a parsed YAML mapping.

    Args:
        data: Mapping of option names to values (None means empty)
        base: Values for keys missing from data (default: built-in defaults)

    Raises:
        ConfigError: On unknown keys, wrong types or out-of-range values
    """
    if base is None:
        base = SplineTravelConfig()
    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

    data = dict(data)
    precision = base.precision
    if "precision" in data:
        precision = _parse_precision(data.pop("precision"), base.precision)

    defaults = asdict(base.options)
    changes: Dict[str, Any] = {}
    for name, value in data.items():
        if name not in defaults:
            raise ConfigError(f"Unknown option '{name}'")
        changes[name] = _parse_option(name, value, defaults[name])

    return SplineTravelConfig(options=replace(base.options, **changes), precision=precision)


def load_config(
    path: Union[str, Path], base: Optional[SplineTravelConfig] = None
) -> SplineTravelConfig:
    """Load a YAML configuration file.

    Args:
        path: YAML file path
        base: Values for keys the file does not set

    Returns:
        SplineTravelConfig with file values applied over base

    Raises:
        ConfigError: If the file is missing, not valid YAML or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    config = parse_config(data, base)
    logger.debug("Loaded configuration from %s", path)
    return config


def save_config(config: SplineTravelConfig, path: Union[str, Path]) -> Path:
    """Write a configuration file containing every setting.

    Returns:
        Path written
    """
    path = Path(path)
    data: Dict[str, Any] = asdict(config.options)
    data["precision"] = asdict(config.precision)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    logger.info("Wrote configuration to %s", path)
    return path
