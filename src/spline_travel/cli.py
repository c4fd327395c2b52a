"""Command-line entry point.

Rewrites travel moves of a G-code file. With only a file argument the file
is modified in place, which is how slicers run post-processing scripts::

    spline-travel print.gcode
    spline-travel print.gcode -o smooth.gcode --mode straight -v
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from spline_travel.config import (
    ConfigError,
    SplineTravelConfig,
    default_config_path,
    load_config,
    save_config,
)
from spline_travel.errors import SplineTravelError
from spline_travel.models.options import TravelMode
from spline_travel.planner import TravelPlanner
from spline_travel.profiles import ExtruderProfile, create_options

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spline-travel",
        description="Replace travel moves with smooth, jerk-limited curves.",
    )
    parser.add_argument("input", type=Path, help="G-code file to process")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file (default: rewrite the input in place)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help=f"YAML configuration (default: {default_config_path('.').name} next to the input)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in TravelMode],
        help="Override the travel mode from the configuration",
    )
    parser.add_argument(
        "--profile",
        choices=[profile.value for profile in ExtruderProfile],
        help="Start from an extruder preset before applying the configuration",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a starter configuration to the config path and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every replaced group")
    parser.add_argument("--log-file", type=Path, help="Also append log messages to this file")
    return parser


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def _base_config(profile: Optional[str]) -> SplineTravelConfig:
    config = SplineTravelConfig()
    if profile:
        config = replace(config, options=create_options(ExtruderProfile(profile)))
    return config


def _apply_mode(config: SplineTravelConfig, mode: Optional[str]) -> SplineTravelConfig:
    if mode is None:
        return config
    straight = mode == TravelMode.STRAIGHT.value
    options = replace(config.options, use_spline_travel=not straight, use_straight_travel=straight)
    return replace(config, options=options)


def resolve_config(args: argparse.Namespace) -> SplineTravelConfig:
    """Combine preset, configuration file and --mode into one configuration.

    An explicit --config must exist; the default file next to the input is
    used only when present.
    """
    config = _base_config(args.profile)
    if args.config is not None:
        config = load_config(args.config, config)
    else:
        path = default_config_path(args.input)
        if path.exists():
            config = load_config(path, config)
    return _apply_mode(config, args.mode)


def init_config(args: argparse.Namespace) -> Path:
    """Write a starter configuration from the preset and --mode."""
    path = args.config if args.config is not None else default_config_path(args.input)
    if path.exists():
        raise ConfigError(f"Configuration file already exists: {path}")
    return save_config(_apply_mode(_base_config(args.profile), args.mode), path)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the tool.

    Returns:
        Process exit status: 0 on success, 1 on any error
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        if args.init_config:
            init_config(args)
            return 0

        config = resolve_config(args)
        output = args.output if args.output is not None else args.input
        text = args.input.read_text(encoding="utf-8", errors="surrogateescape")

        planner = TravelPlanner(config.options, config.precision)
        logger.debug("Processing %s with %r", args.input, planner)
        result = planner.process(text)

        output.write_text(result, encoding="utf-8", errors="surrogateescape")
        logger.info("Wrote %s", output)
        return 0
    except (ConfigError, SplineTravelError, OSError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
