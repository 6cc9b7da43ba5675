"""
Configuration manager for capture sessions.

This module provides the ConfigLoader class for loading logger settings
from YAML files and turning them into a validated SessionConfig.
"""
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from proclog.config.logger_settings import UNTIL_CANCELLED, LoggerSettings
from proclog.config.session_config import SessionConfig
from proclog.consts.FirstSamplePolicy import FirstSamplePolicy
from proclog.util.exceptions import ConfigError
from proclog.util.log_config import setup_logger

logger = setup_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config_yaml"


class ConfigLoader:

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH, env: Optional[str] = None):
        self.config_path = Path(config_path)
        self.env = env
        self.config_data = self._load_config()

    def _load_config(self) -> LoggerSettings:
        """
        Load logger settings from YAML.
        Supports environment-specific overrides via config_<env>.yaml

        Returns:
            LoggerSettings: merged settings

        Raises:
            ConfigError: if a file is missing, unreadable or not a mapping
        """
        data = self._read_yaml(self.config_path / "config.yaml")

        # Load environment-specific override if specified
        if self.env:
            env_data = self._read_yaml(self.config_path / f"config_{self.env}.yaml")
            # dict.update() will overwrite existing keys
            data.update(env_data)

        known = LoggerSettings.field_names()
        unknown = sorted(set(data) - set(known))
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        return LoggerSettings(**{key: value for key, value in data.items() if key in known})

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed configuration file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping")
        return data

    def apply_overrides(self, overrides: Dict[str, Any]) -> LoggerSettings:
        """
        Merge command-line values over the loaded settings.
        Keys whose value is None are left untouched.
        """
        values = {key: value for key, value in overrides.items()
                  if value is not None and key in LoggerSettings.field_names()}
        self.config_data = replace(self.config_data, **values)
        return self.config_data

    def build_session_config(self) -> SessionConfig:
        """
        Convert the current settings into a validated SessionConfig.

        Raises:
            ConfigError: on any invalid value
        """
        settings = self.config_data
        try:
            first_sample = FirstSamplePolicy(str(settings.first_sample).lower())
        except ValueError:
            choices = ", ".join(p.value for p in FirstSamplePolicy)
            raise ConfigError(f"first_sample must be one of: {choices}; got {settings.first_sample!r}") from None

        output = settings.output
        if output is None or not str(output).strip():
            raise ConfigError("Output path must not be empty")

        config = SessionConfig(
            interval=_parse_seconds(settings.interval, "interval"),
            duration=_parse_duration(settings.duration),
            output_path=Path(output),
            first_sample=first_sample,
        )
        return config.validate()


def _parse_seconds(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number of seconds, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number of seconds, got {value!r}") from None


def _parse_duration(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and value.strip().lower() == UNTIL_CANCELLED):
        return None
    return _parse_seconds(value, "duration")


if __name__ == "__main__":

    # python3 -m proclog.config.config_loader

    loader = ConfigLoader(env="dev")
    print(loader.config_data)
    print(loader.build_session_config())
