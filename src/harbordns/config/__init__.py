"""Configuration loading, validation and logging setup."""

from .config_parser import parse_config_file, parse_config_variables
from .config_schema import (
    HarborConfig,
    LoggingConfig,
    OutputConfig,
    SourceConfig,
    validate_config,
)
from .logging_config import init_logging

__all__ = [
    "HarborConfig",
    "LoggingConfig",
    "OutputConfig",
    "SourceConfig",
    "init_logging",
    "parse_config_file",
    "parse_config_variables",
    "validate_config",
]
