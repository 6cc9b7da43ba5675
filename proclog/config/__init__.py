"""Configuration module for capture sessions."""

from .config_loader import ConfigLoader
from .logger_settings import LoggerSettings
from .session_config import SessionConfig

__all__ = ["ConfigLoader", "LoggerSettings", "SessionConfig"]
