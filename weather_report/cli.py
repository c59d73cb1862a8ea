"""Command line entry point: print the weather report for the configured city."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from utils.logging_utils import (
    DEFAULT_LOG_FORMAT,
    SUCCESS,
    VERBOSE_LOG_FORMAT,
    get_tagged_logger,
    setup_logging,
)
from weather_report.config import EXAMPLE_CONFIG, settings
from weather_report.errors import (
    CacheError,
    FetchError,
    FetchTimeoutError,
    InvalidConfigError,
    MissingConfigError,
    UnreachableError,
)
from weather_report.reporter import WeatherReporter
from weather_report.summary import build_summary

logger = get_tagged_logger(__name__, tag="cli")

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="weather-report",
        description="Print current conditions and a short forecast for one city.",
    )

    general = parser.add_argument_group("General options")
    general.add_argument(
        "--config",
        metavar="PATH",
        help=f"Read the API key and city from PATH (default: {settings.config_path})",
    )

    specific = parser.add_argument_group("Specific options")
    specific.add_argument("-v", "--verbose", action="store_true", help="Run verbosely")
    specific.add_argument("-q", "--quiet", action="store_true", help="Run quietly, don't output much")
    specific.add_argument("--debug", action="store_true", help="Print verbose output and more debugging")

    common = parser.add_argument_group("Common options")
    common.add_argument(
        "-c",
        "--colorize",
        action="store_true",
        help="Colorizes the output of the script for easier reading",
    )
    common.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def _fail(*lines: str) -> None:
    """Log an explanation and terminate the run with status 1."""
    for line in lines:
        logger.error(line)
    sys.exit(1)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one report. Fatal conditions exit with status 1."""
    args = build_parser().parse_args(argv)

    level = "DEBUG" if (args.debug or args.verbose) else settings.log_level
    setup_logging(
        level=level,
        log_format=VERBOSE_LOG_FORMAT if args.debug else DEFAULT_LOG_FORMAT,
        job_name="weather_report",
        colorize=args.colorize,
        quiet=args.quiet,
        override_existing=True,
    )

    run_settings = settings
    if args.config:
        run_settings = settings.model_copy(update={"config_path": Path(args.config).expanduser()})

    logger.log(SUCCESS, "Starting weather report")
    if args.colorize:
        logger.debug("Colorizing output as requested")

    try:
        result = WeatherReporter(run_settings).run()
    except MissingConfigError as exc:
        _fail(
            f"{exc}",
            "Create it with your Weather Underground API key and city, for example:",
            *EXAMPLE_CONFIG.splitlines(),
        )
    except InvalidConfigError as exc:
        _fail(f"Invalid configuration: {exc}")
    except UnreachableError as exc:
        _fail(f"{exc}. Check your internet connection and try again.")
    except FetchTimeoutError as exc:
        _fail(f"The weather service did not answer in time: {exc}")
    except FetchError as exc:
        _fail(f"Could not retrieve weather data: {exc}")
    except json.JSONDecodeError as exc:
        _fail(f"The weather service returned a response that is not JSON: {exc}")
    except UnicodeDecodeError as exc:
        _fail(f"The weather service returned undecodable bytes: {exc}")
    except CacheError as exc:
        _fail(f"Cache problem: {exc}", f"Remove {run_settings.cache_path} and run again.")

    for line in build_summary(result, forecast_days=run_settings.forecast_days):
        print(line)

    logger.log(SUCCESS, "Finished weather report")
    return 0


if __name__ == "__main__":
    sys.exit(main())
