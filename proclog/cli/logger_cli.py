# proclog/cli/logger_cli.py
import argparse
from typing import Any, Dict, Optional, Sequence

from proclog import __version__
from proclog.cli.cli import build_env_parser
from proclog.config.logger_settings import UNTIL_CANCELLED
from proclog.consts.FirstSamplePolicy import FirstSamplePolicy


def build_logger_parser() -> argparse.ArgumentParser:
    ap = build_env_parser("Writes process CPU and memory usage to a CSV file")
    ap.add_argument("-i", "--interval", type=float, default=None, metavar="SECONDS",
                    help="Sets the logging interval in seconds (default: 1)")
    ap.add_argument("-d", "--duration", type=float, default=None, metavar="SECONDS",
                    help="Sets the maximum duration to run in seconds (default: 60)")
    ap.add_argument("--until-cancelled", action="store_true",
                    help="Run until SIGINT/SIGTERM instead of for a fixed duration")
    ap.add_argument("-o", "--output", type=str, default=None, metavar="FILE",
                    help="Sets the output CSV file (default: process_usage.csv)")
    ap.add_argument("--first-sample", choices=[p.value for p in FirstSamplePolicy], default=None,
                    help="CPU usage reported for a newly seen process: zero | skip (default: zero)")
    ap.add_argument("--log-level", type=str, default=None,
                    help="Logging level: DEBUG | INFO | WARNING | ERROR (default: INFO)")
    ap.add_argument("--log-file", type=str, default=None,
                    help="Also write log output to this file")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed arguments onto LoggerSettings keys; unset options stay None"""
    duration = UNTIL_CANCELLED if args.until_cancelled else args.duration
    return {
        "interval": args.interval,
        "duration": duration,
        "output": args.output,
        "first_sample": args.first_sample,
        "log_level": args.log_level,
        "log_file": args.log_file,
    }


def parse_logger_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = build_logger_parser()
    args = parser.parse_args(argv)
    if args.until_cancelled and args.duration is not None:
        parser.error("--duration and --until-cancelled are mutually exclusive")
    return args
