"""
Logging setup for the configuration provider.
"""

from .logger import LoggerManager, StructuredFormatter, get_logger, initialize_logging

__all__ = [
    'LoggerManager',
    'StructuredFormatter',
    'get_logger',
    'initialize_logging',
]
