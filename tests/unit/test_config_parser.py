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

from xtag.config.parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
)
from xtag.errors import XTagError
from xtag.models.config import XTagConfig


class TestConfigParser:
    """Test cases for ConfigParser class."""

    def test_init_default(self):
        """Test default initialization."""
        parser = ConfigParser()
        assert parser.strict_mode is False
        assert parser.DEFAULT_CONFIG_NAMES == ['.xtag.yaml', '.xtag.yml']

    def test_load_config_with_valid_file(self):
        """Test loading configuration from valid YAML file."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / 'config.yaml'
            config_file.write_text(yaml.dump({
                'xattr_name': 'user.tags',
                'bookmark_dir': temp_dir,
                'ignore': ['*.tmp'],
            }))

            result = ConfigParser().load_config(config_file)

            assert isinstance(result, ConfigParseResult)
            assert isinstance(result.config, XTagConfig)
            assert result.config.xattr_name == 'user.tags'
            assert result.config_path == config_file
            assert result.is_default is False
            assert result.warnings == []

    def test_load_config_file_not_found(self):
        """Test loading configuration from non-existent file."""
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            ConfigParser().load_config("/nonexistent/config.yaml")

    def test_load_config_invalid_yaml(self):
        """Test loading configuration with invalid YAML syntax."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("ignore: [unclosed\n")
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
                ConfigParser().load_config(temp_path)
        finally:
            os.unlink(temp_path)

    def test_load_config_empty_file(self):
        """Test that an empty file gives the default settings."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            temp_path = f.name

        try:
            result = ConfigParser().load_config(temp_path)
            assert result.config.xattr_name == 'user.xtag'
            assert result.is_default is False
        finally:
            os.unlink(temp_path)

    def test_load_config_non_dict_yaml(self):
        """Test loading configuration that is not a YAML object."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("- just\n- a list\n")
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError, match="must contain a YAML object"):
                ConfigParser().load_config(temp_path)
        finally:
            os.unlink(temp_path)

    def test_load_config_validation_error(self):
        """Test that invalid values are reported as ConfigurationError."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("max_workers: 0\n")
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError, match="validation failed"):
                ConfigParser().load_config(temp_path)
        finally:
            os.unlink(temp_path)

    def test_load_config_no_file_uses_defaults(self):
        """Test falling back to defaults when no file is found."""
        parser = ConfigParser()

        with patch.object(parser, '_find_and_load_config', return_value=(None, None)):
            result = parser.load_config()

        assert result.is_default is True
        assert result.config_path is None
        assert any("No configuration file found" in w for w in result.warnings)

    def test_load_config_strict_mode_with_warnings(self):
        """Test that strict mode turns warnings into errors."""
        parser = ConfigParser(strict_mode=True)

        with patch.object(parser, '_find_and_load_config', return_value=(None, None)):
            with pytest.raises(ConfigurationError, match="strict mode"):
                parser.load_config()

    def test_strict_mode_with_default_bookmark_dir(self):
        """Test that the expanded default bookmark directory passes strict mode."""
        with tempfile.TemporaryDirectory() as temp_dir:
            (Path(temp_dir) / '.config' / 'xtag' / 'bookmarks').mkdir(parents=True)
            config_file = Path(temp_dir) / '.xtag.yaml'
            config_file.write_text("max_workers: 2\n")

            with patch.dict(os.environ, {'HOME': temp_dir}):
                result = ConfigParser(strict_mode=True).load_config(config_file)

            assert result.warnings == []
            assert result.config.bookmark_dir == str(Path(temp_dir) / '.config' / 'xtag' / 'bookmarks')

    def test_find_and_load_config_current_dir(self):
        """Test discovery of a configuration file in the working directory."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / '.xtag.yml'
            config_file.write_text("max_workers: 2\n")

            with patch('pathlib.Path.cwd', return_value=Path(temp_dir)):
                config_path, data = ConfigParser()._find_and_load_config()

            assert config_path == config_file
            assert data == {'max_workers': 2}

    def test_find_and_load_config_not_found(self):
        """Test discovery when no configuration file exists."""
        with tempfile.TemporaryDirectory() as temp_dir:
            empty_path = Path(temp_dir)

            with patch('pathlib.Path.cwd', return_value=empty_path), \
                 patch('pathlib.Path.home', return_value=empty_path):
                assert ConfigParser()._find_and_load_config() == (None, None)

    def test_load_yaml_file_permission_error(self):
        """Test reading a file that cannot be opened."""
        with patch('builtins.open', side_effect=PermissionError("Access denied")):
            with pytest.raises(ConfigurationError, match="Cannot read configuration file"):
                ConfigParser()._load_yaml_file(Path("config.yaml"))


class TestConvenienceFunctions:
    """Test cases for module level helpers."""

    def test_load_config_function(self):
        """Test the load_config convenience function."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("recursive: false\n")
            temp_path = f.name

        try:
            result = load_config(temp_path)
            assert result.config.recursive is False
        finally:
            os.unlink(temp_path)

    def test_configuration_error_is_xtag_error(self):
        """Test that configuration errors share the library base class."""
        assert issubclass(ConfigurationError, XTagError)
