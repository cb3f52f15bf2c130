"""
Configuration module for chartvalues.

Uses pydantic-settings for environment variable and YAML file loading.
"""

from chartvalues.config.settings import Settings
from chartvalues.config.sources import ConfigFileError
from chartvalues.config.types import LoggingConfig, SerializerConfig, ValidationConfig

__all__ = [
    "ConfigFileError",
    "LoggingConfig",
    "SerializerConfig",
    "Settings",
    "ValidationConfig",
]
