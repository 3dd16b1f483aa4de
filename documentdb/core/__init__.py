"""
Core client infrastructure: configuration and logging.
"""

from .config import ClientConfig, ConfigManager, ConnectionPolicy, LoggingConfig, RetryOptions
from .logging_config import setup_logging

__all__ = [
    "ClientConfig",
    "ConfigManager",
    "ConnectionPolicy",
    "LoggingConfig",
    "RetryOptions",
    "setup_logging",
]
