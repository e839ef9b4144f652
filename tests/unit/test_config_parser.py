"""
Unit tests for configuration parser.

Tests the YAML configuration parsing, validation, and error handling
functionality of the ConfigParser class.
"""

import pytest
import tempfile
import os
import yaml
from pathlib import Path
from unittest.mock import patch

from tunepick.config.parser import (
    ConfigParser,
    ConfigCheckResult,
    ConfigParseResult,
    ConfigurationError,
    load_config,
    check_config_file,
    create_config_template
)
from tunepick.models.config import PickerConfig, LeafStrategy


class TestConfigParser:
    """Test cases for ConfigParser class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

    def teardown_method(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    def _write_yaml(self, name, data):
        path = self.temp_path / name
        with open(path, 'w') as f:
            yaml.dump(data, f)
        return path

    def test_init_default(self):
        """Test default initialization."""
        parser = ConfigParser()
        assert parser.strict_mode is False
        assert parser.DEFAULT_CONFIG_NAMES == [
            '.tunepick.yaml',
            '.tunepick.yml',
            'tunepick.yaml',
            'tunepick.yml'
        ]

    def test_init_strict_mode(self):
        """Test initialization with strict mode."""
        parser = ConfigParser(strict_mode=True)
        assert parser.strict_mode is True

    def test_load_config_with_valid_file(self):
        """Test loading configuration from valid YAML file."""
        config_path = self._write_yaml('config.yaml', {
            'library_root': str(self.temp_path),
            'classifier': 'stat',
            'player': {'command': 'mpv'}
        })

        result = ConfigParser().load_config(config_path)

        assert isinstance(result, ConfigParseResult)
        assert isinstance(result.config, PickerConfig)
        assert result.config_path == config_path
        assert result.is_default is False
        assert result.config.library_root == str(self.temp_path)
        assert result.config.classifier == LeafStrategy.STAT
        assert result.config.player.command == 'mpv'
        assert result.config.player.grace_seconds == 1.2
        assert result.warnings == []

    def test_load_config_file_not_found(self):
        """Test loading configuration from non-existent file."""
        parser = ConfigParser()

        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            parser.load_config("/nonexistent/config.yaml")

    def test_load_config_invalid_yaml(self):
        """Test loading configuration with invalid YAML syntax."""
        config_path = self.temp_path / 'bad.yaml'
        config_path.write_text("player:\n  command: [\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            ConfigParser().load_config(config_path)

    def test_load_config_empty_file(self):
        """Test loading configuration from empty file."""
        config_path = self.temp_path / 'empty.yaml'
        config_path.write_text("")

        result = ConfigParser().load_config(config_path)

        assert isinstance(result.config, PickerConfig)
        assert result.config_path == config_path
        assert result.config.player.command == 'vlc'

    def test_load_config_non_dict_yaml(self):
        """Test loading configuration with non-dictionary YAML."""
        config_path = self.temp_path / 'list.yaml'
        config_path.write_text("- item1\n- item2")

        with pytest.raises(ConfigurationError, match="must contain a YAML object"):
            ConfigParser().load_config(config_path)

    def test_load_config_invalid_values(self):
        """Test that invalid settings surface as ConfigurationError."""
        config_path = self._write_yaml('config.yaml', {'classifier': 'magic'})

        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            ConfigParser().load_config(config_path)

    def test_load_config_no_file_uses_defaults(self):
        """Test that defaults are used when no file is found."""
        parser = ConfigParser()

        with patch.object(parser, '_find_and_load_config', return_value=(None, None)):
            result = parser.load_config()

        assert result.is_default is True
        assert result.config_path is None
        assert "No configuration file found, using default settings" in result.warnings

    def test_load_config_strict_mode_with_warnings(self):
        """Test that strict mode turns warnings into errors."""
        config_path = self._write_yaml('config.yaml', {
            'library_root': str(self.temp_path / 'missing')
        })

        with pytest.raises(ConfigurationError, match="strict mode"):
            ConfigParser(strict_mode=True).load_config(config_path)

    def test_find_and_load_config_current_dir(self):
        """Test finding configuration in current directory."""
        config_data = {'library_root': '/srv/music'}
        config_file = self._write_yaml('.tunepick.yaml', config_data)
        parser = ConfigParser()

        with patch('pathlib.Path.cwd', return_value=self.temp_path):
            config_path, data = parser._find_and_load_config()

        assert config_path == config_file
        assert data == config_data

    def test_find_and_load_config_not_found(self):
        """Test when no configuration file is found."""
        parser = ConfigParser()

        with patch('pathlib.Path.cwd', return_value=self.temp_path), \
             patch('pathlib.Path.home', return_value=self.temp_path):
            config_path, data = parser._find_and_load_config()

        assert config_path is None
        assert data is None

    def test_find_and_load_config_skips_broken_file(self):
        """Test that an unreadable candidate does not stop the search."""
        (self.temp_path / '.tunepick.yaml').write_text("a: [\n")
        good = self._write_yaml('tunepick.yaml', {'log_level': 'INFO'})
        parser = ConfigParser()

        with patch('pathlib.Path.cwd', return_value=self.temp_path):
            config_path, data = parser._find_and_load_config()

        assert config_path == good
        assert data == {'log_level': 'INFO'}

    def test_load_yaml_file_permission_error(self):
        """Test handling of unreadable files."""
        config_path = self._write_yaml('config.yaml', {})
        parser = ConfigParser()

        with patch('pathlib.Path.read_text', side_effect=PermissionError("Access denied")):
            with pytest.raises(ConfigurationError, match="Cannot read configuration file"):
                parser._load_yaml_file(config_path)

    def test_get_default_config(self):
        """Test the default configuration dictionary."""
        default = ConfigParser()._get_default_config()

        assert default['library_root'] == '~/Music'
        assert default['classifier'] == 'dotted-name'
        assert default['player']['command'] == 'vlc'
        assert default['downloader']['command'] == 'youtube-dl'
        assert default['limits']['max_concurrent'] == 4

    def test_get_parser_warnings_long_grace(self):
        """Test the warning for a long player grace period."""
        config = PickerConfig(player={'grace_seconds': 30})

        warnings = ConfigParser()._get_parser_warnings(config, is_default=False)

        assert any("grace period" in w for w in warnings)

    def test_check_config_file_success(self):
        """Test checking a good file."""
        config_path = self._write_yaml('config.yaml', {
            'library_root': str(self.temp_path),
            'log_level': 'DEBUG'
        })

        result = ConfigParser().check_config_file(config_path)

        assert isinstance(result, ConfigCheckResult)
        assert result.ok
        assert result.errors == []
        assert result.warnings == []

    def test_check_config_file_reports_warnings(self):
        """Test that filesystem warnings are reported without failing."""
        config_path = self._write_yaml('config.yaml', {
            'library_root': str(self.temp_path / 'missing')
        })

        result = ConfigParser().check_config_file(config_path)

        assert result.ok
        assert any("does not exist" in w for w in result.warnings)

    def test_check_config_file_not_found(self):
        """Test checking a missing file."""
        result = ConfigParser().check_config_file(self.temp_path / 'missing.yaml')

        assert not result.ok
        assert len(result.errors) == 1
        assert "Configuration file not found" in result.errors[0]

    def test_check_config_file_invalid(self):
        """Test checking a file with unknown keys."""
        config_path = self._write_yaml('config.yaml', {'roots': ['.']})

        result = ConfigParser().check_config_file(config_path)

        assert len(result.errors) == 1
        assert "Unknown configuration keys" in result.errors[0]

    def test_check_config_file_strict_mode(self):
        """Test that strict mode reports warnings as an error."""
        config_path = self._write_yaml('config.yaml', {
            'library_root': str(self.temp_path / 'missing')
        })

        result = ConfigParser(strict_mode=True).check_config_file(config_path)

        assert not result.ok
        assert "strict mode" in result.errors[0]

    def test_get_config_template(self):
        """Test that the template is valid YAML with every section."""
        template = ConfigParser().get_config_template()

        data = yaml.safe_load(template)
        assert set(data) == {'library_root', 'classifier', 'log_level', 'player', 'downloader', 'limits'}
        assert "# External media player" in template
        assert template.startswith("# tunepick configuration")
        assert data['library_root'] == '~/Music'


class TestConvenienceFunctions:
    """Test cases for module level helpers."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

    def teardown_method(self):
        """Clean up test fixtures."""
        import shutil
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_load_config_function(self):
        """Test the load_config helper."""
        config_path = self.temp_path / 'config.yaml'
        config_path.write_text(f"library_root: {self.temp_dir}\n")

        result = load_config(config_path)

        assert result.config.library_root == self.temp_dir

    def test_check_config_file_function(self):
        """Test the check_config_file helper."""
        config_path = self.temp_path / 'config.yaml'
        config_path.write_text("limits:\n  max_concurrent: 0\n")

        result = check_config_file(config_path)

        assert len(result.errors) == 1
        assert "Configuration validation failed" in result.errors[0]

    def test_create_config_template_function(self):
        """Test writing a template and loading it back."""
        output_path = self.temp_path / 'sub' / 'tunepick.yaml'

        create_config_template(output_path)

        result = load_config(output_path)
        assert result.config.player.command == 'vlc'
        assert result.config.classifier == LeafStrategy.DOTTED_NAME

    def test_create_config_template_function_permission_error(self):
        """Test template write failure handling."""
        with patch('pathlib.Path.write_text', side_effect=PermissionError("Access denied")):
            with pytest.raises(ConfigurationError, match="Cannot create template file"):
                create_config_template(self.temp_path / 'tunepick.yaml')

    def test_configuration_error_creation(self):
        """Test ConfigurationError creation."""
        error = ConfigurationError("Test error message")
        assert str(error) == "Test error message"
        assert isinstance(error, Exception)
