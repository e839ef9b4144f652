"""
Configuration management package for tunepick.

This package provides configuration parsing, validation, and management
functionality for tunepick.
"""

from .parser import (
    ConfigCheckResult,
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    check_config_file,
    create_config_template,
    load_config,
)

__all__ = [
    'ConfigCheckResult',
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'check_config_file',
    'create_config_template',
    'load_config',
]
