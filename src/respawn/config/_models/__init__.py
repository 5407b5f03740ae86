"""Configuration models."""

from ._admin import AdminConfig
from ._config import Config
from ._develop import DevelopConfig
from ._logging import LogFormat, LoggingConfig, LogLevel

__all__ = [
    "AdminConfig",
    "Config",
    "DevelopConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
]
