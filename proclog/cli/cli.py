"""
Shared helpers for command-line interfaces of the process logger.
"""
import argparse
from typing import Optional


def build_env_parser(description: Optional[str] = None) -> argparse.ArgumentParser:
    """
    Create an ArgumentParser with the common --env and --config-dir options.

    Args:
        description: Optional parser description shown in CLI help.

    Returns:
        argparse.ArgumentParser: parser preconfigured with the shared arguments.
    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help=(
            "Environment name for configuration override (e.g., 'dev'). "
            "Loads config_<env>.yaml in addition to the base config.yaml."
        ),
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default=None,
        help="Directory holding config.yaml (default: the bundled config_yaml directory).",
    )
    return parser
