#!/usr/bin/env python3
"""
Process logger entry point.

Loads configuration, runs one capture session under SIGINT/SIGTERM handling
and prints a short summary of the session.
"""
from pathlib import Path
from typing import Optional, Sequence

from tabulate import tabulate

from proclog.cli.logger_cli import args_to_overrides, parse_logger_args
from proclog.config.config_loader import DEFAULT_CONFIG_PATH, ConfigLoader
from proclog.models.session_result import SessionResult
from proclog.service.monitor.process_monitor import PsutilMetricSource
from proclog.service.scheduler.sample_scheduler import SampleScheduler
from proclog.service.session.session import Session
from proclog.service.session.termination import TerminationListener
from proclog.util.exceptions import ConfigError
from proclog.util.log_config import configure_logging, parse_level, setup_logger

logger = setup_logger(__name__)


def print_summary(result: SessionResult) -> None:
    """Print the session outcome as a table"""
    table_data = [
        ["Outcome", result.outcome],
        ["Ticks", result.ticks],
        ["Rows written", result.rows_written],
        ["Elapsed", f"{result.elapsed:.2f} s"],
        ["Output", str(result.output_path)],
    ]
    if result.error is not None:
        table_data.append(["Error", str(result.error)])
    print(tabulate(table_data, tablefmt="heavy_grid", stralign="left"))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the process logger.

    Returns:
        0 when the session completed or was cancelled gracefully, 1 on any fatal error
    """
    args = parse_logger_args(argv)
    config_path = Path(args.config_dir) if args.config_dir else DEFAULT_CONFIG_PATH

    try:
        loader = ConfigLoader(config_path, env=args.env)
        settings = loader.apply_overrides(args_to_overrides(args))
        try:
            level = parse_level(settings.log_level)
        except ValueError as e:
            raise ConfigError(str(e)) from None
        log_file = Path(settings.log_file) if settings.log_file else None
        try:
            configure_logging(level, log_file)
        except OSError as e:
            raise ConfigError(f"Cannot open log file {log_file}: {e}") from e
        config = loader.build_session_config()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.env:
        logger.info(f"Loaded configuration with environment override: {args.env}")
    logger.info(f"Starting process logger: {config}")

    scheduler = SampleScheduler(config.interval, config.duration)
    session = Session(config, PsutilMetricSource(), scheduler=scheduler)
    with TerminationListener(scheduler.cancel):
        result = session.run()

    print_summary(result)
    if not result.ok:
        logger.error(f"Process logging failed: {result.error}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
