"""
YAML configuration parser for tunepick.

This module provides functionality to load, parse, and validate YAML configuration files
for tunepick. It handles configuration file discovery, parsing, validation,
and provides helpful error messages for configuration issues.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from ..models.config import PickerConfig, validate_config_dict, DEFAULT_LIBRARY_ROOT


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Result of configuration parsing operation.

    Attributes:
        config: The parsed and validated configuration
        warnings: List of non-fatal warnings
        config_path: Path to the configuration file used
        is_default: Whether default configuration was used
    """
    config: PickerConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


@dataclass
class ConfigCheckResult:
    """Errors and warnings found while checking a configuration file."""
    errors: List[str]
    warnings: List[str]

    @property
    def ok(self) -> bool:
        return not self.errors


TEMPLATE_HEADER = (
    "# tunepick configuration\n"
    "# Where the music library lives and which programs play and fetch songs\n"
)

TEMPLATE_COMMENTS = {
    'library_root': "Root directory of the music library",
    'classifier': "How songs are told apart from folders: dotted-name or stat",
    'log_level': "Default logging level",
    'player': "External media player",
    'downloader': "External audio downloader (youtube-dl compatible)",
    'limits': "Resource limits",
}


class ConfigurationError(Exception):
    """Raised when configuration parsing or validation fails."""
    pass


class ConfigParser:
    """
    YAML configuration parser with validation and error handling.

    This class handles loading YAML configuration files, validating their contents,
    and converting them to PickerConfig objects. It supports configuration file
    discovery, default configuration generation, and error reporting.
    """

    DEFAULT_CONFIG_NAMES = [
        '.tunepick.yaml',
        '.tunepick.yml',
        'tunepick.yaml',
        'tunepick.yml'
    ]

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the configuration parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse configuration from file or use defaults.

        Args:
            config_path: Path to configuration file. If None, searches for default files.

        Returns:
            ConfigParseResult containing parsed configuration and metadata

        Raises:
            ConfigurationError: If configuration is invalid or file cannot be read
        """
        try:
            if config_path:
                config_path = Path(config_path)
                if not config_path.exists():
                    raise ConfigurationError(f"Configuration file not found: {config_path}")

                config_data = self._load_yaml_file(config_path)
                is_default = False
            else:
                config_path, config_data = self._find_and_load_config()
                is_default = config_data is None

                if is_default:
                    config_data = self._get_default_config()

            # User settings take precedence over defaults
            merged_config = self._get_default_config()
            merged_config.update(config_data)

            validated_data = self._validate_config_data(merged_config)
            picker_config = PickerConfig.from_dict(validated_data)

            warnings = picker_config.validate_configuration()
            warnings.extend(self._get_parser_warnings(picker_config, is_default))

            if self.strict_mode and warnings:
                raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

            self.logger.info(f"Configuration loaded successfully from {config_path or 'defaults'}")

            return ConfigParseResult(
                config=picker_config,
                warnings=warnings,
                config_path=config_path,
                is_default=is_default
            )

        except Exception as e:
            if isinstance(e, ConfigurationError):
                raise
            else:
                raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _find_and_load_config(self) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load configuration file from default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        search_paths = [
            Path.cwd(),
            Path.home(),
            Path.home() / '.config' / 'tunepick',
        ]

        for search_path in search_paths:
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.exists() and config_file.is_file():
                    try:
                        config_data = self._load_yaml_file(config_file)
                        self.logger.info(f"Found configuration file: {config_file}")
                        return config_file, config_data
                    except ConfigurationError as e:
                        self.logger.warning(f"Failed to load {config_file}: {e}")
                        continue

        self.logger.info("No configuration file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Read one YAML file into a mapping.

        An empty file or a file holding only comments yields an empty mapping.

        Raises:
            ConfigurationError: If file cannot be read, is not YAML or is not a mapping
        """
        try:
            data = yaml.safe_load(file_path.read_text(encoding='utf-8'))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

        if data is None:
            self.logger.debug(f"Configuration file has no settings: {file_path}")
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")
        return data

    def _validate_config_data(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate configuration data structure and values.

        Args:
            config_data: Raw configuration data from YAML

        Returns:
            Validated and normalized configuration data

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            return validate_config_dict(config_data)
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def _get_default_config(self) -> Dict[str, Any]:
        """Default settings, with the library root left unexpanded."""
        defaults = PickerConfig().to_dict()
        defaults['library_root'] = DEFAULT_LIBRARY_ROOT
        return defaults

    def _get_parser_warnings(self, config: PickerConfig, is_default: bool) -> List[str]:
        """
        Get parser-specific warnings.

        Args:
            config: The parsed configuration
            is_default: Whether default configuration was used

        Returns:
            List of warning messages
        """
        warnings = []

        if is_default:
            warnings.append("No configuration file found, using default settings")

        if config.player.grace_seconds > 10:
            warnings.append(f"Long player grace period ({config.player.grace_seconds}s) delays every exit")

        return warnings

    def check_config_file(self, config_path: Union[str, Path]) -> ConfigCheckResult:
        """
        Load a configuration file and report what is wrong with it.

        Unlike load_config this never raises for a bad file; the failure is
        returned as an error so callers can print every problem at once.
        """
        try:
            result = self.load_config(Path(config_path))
        except ConfigurationError as e:
            return ConfigCheckResult(errors=[str(e)], warnings=[])
        return ConfigCheckResult(errors=[], warnings=result.warnings)

    def get_config_template(self) -> str:
        """Default configuration as YAML, one comment above each section."""
        defaults = self._get_default_config()
        chunks = [TEMPLATE_HEADER]
        for key, comment in TEMPLATE_COMMENTS.items():
            body = yaml.safe_dump({key: defaults[key]}, default_flow_style=False, sort_keys=False)
            chunks.append(f"# {comment}\n{body}")
        return "\n".join(chunks)


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to configuration file (optional)
        strict_mode: Whether to treat warnings as errors

    Returns:
        ConfigParseResult containing parsed configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path)


def check_config_file(config_path: Union[str, Path], strict_mode: bool = False) -> ConfigCheckResult:
    """Check a configuration file; see ConfigParser.check_config_file."""
    return ConfigParser(strict_mode=strict_mode).check_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Write the commented default configuration to output_path.

    Missing parent directories are created.

    Raises:
        ConfigurationError: If template cannot be created
    """
    output_path = Path(output_path)
    template = ConfigParser().get_config_template()
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(template, encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
    logger.info(f"Configuration template written to {output_path}")
