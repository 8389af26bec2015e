"""
Configuration management package for xtag.

This package provides configuration parsing, validation, and management
functionality for xtag.
"""

from .parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'load_config'
]
