"""
Unit tests for configuration parser.

Tests the YAML configuration parsing, discovery, environment overrides,
validation, and error handling functionality of the ConfigParser class.
"""

import pytest
import tempfile
import shutil
import os
import yaml
from pathlib import Path
from unittest.mock import patch

from llfs.config.parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
    validate_config_file,
    create_config_template
)
from llfs.models.config import FinderConfig, validate_config_dict


class TestConfigParser:
    """Test cases for ConfigParser class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self.parser = ConfigParser(environ={})

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write_config(self, data, name="config.yaml") -> Path:
        path = self.test_root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                yaml.dump(data, f)
        return path

    def test_init_default(self):
        """Test default initialization."""
        parser = ConfigParser()
        assert parser.strict_mode is False
        assert parser.environ is os.environ
        assert parser.DEFAULT_CONFIG_NAMES == [
            '.llfs.yaml',
            '.llfs.yml',
            'llfs.yaml',
            'llfs.yml',
        ]

    def test_init_strict_mode(self):
        """Test initialization with strict mode."""
        parser = ConfigParser(strict_mode=True)
        assert parser.strict_mode is True

    def test_load_config_with_valid_file(self):
        """Test loading configuration from valid YAML file."""
        config_path = self._write_config({
            'roots': [self.temp_dir],
            'ignore': ['.git', '*.log'],
            'limits': {'max_results': 20, 'min_score': 3},
        })

        result = self.parser.load_config(config_path)

        assert isinstance(result, ConfigParseResult)
        assert isinstance(result.config, FinderConfig)
        assert result.config_path == config_path
        assert result.is_default is False
        assert result.config.roots == [self.temp_dir]
        assert result.config.ignore == ['.git', '*.log']
        assert result.config.limits.max_results == 20
        assert result.config.limits.min_score == 3
        assert result.warnings == []

    def test_load_config_file_not_found(self):
        """Test loading configuration from non-existent file."""
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            self.parser.load_config("/nonexistent/config.yaml")

    def test_load_config_invalid_yaml(self):
        """Test loading configuration with invalid YAML syntax."""
        config_path = self._write_config("roots: [unclosed\n  - bad: : yaml")

        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            self.parser.load_config(config_path)

    def test_load_config_empty_file(self):
        """Test loading configuration from empty file."""
        config_path = self._write_config("")

        result = self.parser.load_config(config_path)

        assert result.is_default is False
        assert result.config.ignore == FinderConfig().ignore

    def test_load_config_non_dict_yaml(self):
        """Test loading configuration with non-dictionary YAML."""
        config_path = self._write_config("- just\n- a\n- list\n")

        with pytest.raises(ConfigurationError, match="must contain a YAML object"):
            self.parser.load_config(config_path)

    def test_load_config_unknown_key(self):
        config_path = self._write_config({'roots': [self.temp_dir], 'embeddings': {}})

        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            self.parser.load_config(config_path)

    def test_load_config_invalid_limits(self):
        config_path = self._write_config({'roots': [self.temp_dir], 'limits': {'max_results': 0}})

        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            self.parser.load_config(config_path)

    def test_load_config_no_file_uses_defaults(self, monkeypatch):
        """Test loading configuration when no file is found."""
        monkeypatch.chdir(self.temp_dir)
        monkeypatch.setattr(Path, "home", lambda: self.test_root / "home")

        result = self.parser.load_config()

        assert result.is_default is True
        assert result.config_path is None
        assert "No configuration file found, using default settings" in result.warnings
        assert result.config.roots[0] == os.path.abspath(self.temp_dir)

    def test_load_config_strict_mode_with_warnings(self, monkeypatch):
        """Test strict mode turns warnings into errors."""
        monkeypatch.chdir(self.temp_dir)
        monkeypatch.setattr(Path, "home", lambda: self.test_root / "home")
        parser = ConfigParser(strict_mode=True, environ={})

        with pytest.raises(ConfigurationError, match="strict mode"):
            parser.load_config()

    def test_strict_mode_clean_config(self):
        config_path = self._write_config({'roots': [self.temp_dir]})
        parser = ConfigParser(strict_mode=True, environ={})

        result = parser.load_config(config_path)

        assert result.warnings == []

    def test_search_paths_override(self):
        """Test that SEARCH_PATHS replaces the roots from the file."""
        first = self.test_root / "first"
        second = self.test_root / "second"
        first.mkdir()
        second.mkdir()
        config_path = self._write_config({'roots': [self.temp_dir], 'limits': {'max_results': 7}})
        parser = ConfigParser(environ={'SEARCH_PATHS': f"{first},{second}"})

        result = parser.load_config(config_path)

        assert result.config.roots == [str(first), str(second)]
        assert result.config.limits.max_results == 7

    def test_config_path_from_environment(self):
        """Test that LLFS_CONFIG points at the configuration file."""
        config_path = self._write_config({'roots': [self.temp_dir]}, name="custom/settings.yaml")
        parser = ConfigParser(environ={'LLFS_CONFIG': str(config_path)})

        result = parser.load_config()

        assert result.config_path == config_path
        assert result.is_default is False

    def test_explicit_path_wins_over_environment(self):
        explicit = self._write_config({'roots': [self.temp_dir], 'limits': {'max_results': 3}})
        parser = ConfigParser(environ={'LLFS_CONFIG': "/nonexistent/config.yaml"})

        result = parser.load_config(explicit)

        assert result.config.limits.max_results == 3

    def test_find_and_load_config_current_dir(self, monkeypatch):
        """Test finding a configuration file in the current directory."""
        self._write_config({'roots': [self.temp_dir]}, name=".llfs.yaml")
        monkeypatch.chdir(self.temp_dir)
        monkeypatch.setattr(Path, "home", lambda: self.test_root / "home")

        config_path, config_data = self.parser._find_and_load_config()

        assert config_path == Path(self.temp_dir) / ".llfs.yaml"
        assert config_data == {'roots': [self.temp_dir]}

    def test_find_and_load_config_home_config_dir(self, monkeypatch):
        home = self.test_root / "home"
        self._write_config({'follow_symlinks': True}, name="home/.config/llfs/llfs.yml")
        (self.test_root / "work").mkdir()
        monkeypatch.chdir(self.test_root / "work")
        monkeypatch.setattr(Path, "home", lambda: home)

        config_path, config_data = self.parser._find_and_load_config()

        assert config_path == home / ".config" / "llfs" / "llfs.yml"
        assert config_data == {'follow_symlinks': True}

    def test_find_and_load_config_skips_broken_file(self, monkeypatch):
        """Test that an unreadable candidate is skipped for the next one."""
        home = self.test_root / "home"
        self._write_config("- not a mapping\n", name=".llfs.yaml")
        self._write_config({'follow_symlinks': True}, name="home/llfs.yaml")
        monkeypatch.chdir(self.temp_dir)
        monkeypatch.setattr(Path, "home", lambda: home)

        config_path, config_data = self.parser._find_and_load_config()

        assert config_path == home / "llfs.yaml"

    def test_find_and_load_config_not_found(self, monkeypatch):
        """Test when no configuration file is found."""
        monkeypatch.chdir(self.temp_dir)
        monkeypatch.setattr(Path, "home", lambda: self.test_root / "home")

        config_path, config_data = self.parser._find_and_load_config()

        assert config_path is None
        assert config_data is None

    def test_load_yaml_file_permission_error(self):
        """Test loading YAML file with permission error."""
        config_path = self._write_config({'roots': [self.temp_dir]})

        with patch("builtins.open", side_effect=PermissionError("Permission denied")):
            with pytest.raises(ConfigurationError, match="Cannot read configuration file"):
                self.parser._load_yaml_file(config_path)

    def test_get_parser_warnings_default_config(self):
        config = FinderConfig(roots=[self.temp_dir])
        warnings = self.parser._get_parser_warnings(config, is_default=True)

        assert "No configuration file found, using default settings" in warnings

    def test_get_parser_warnings_performance_concerns(self):
        """Test warnings for settings that make searches slow."""
        roots = []
        for i in range(11):
            root = self.test_root / f"root{i}"
            root.mkdir()
            roots.append(str(root))
        config = FinderConfig(roots=roots, ignore=[], limits={'max_files': 2000000})

        warnings = self.parser._get_parser_warnings(config, is_default=False)

        assert any("Large number of root directories" in w for w in warnings)
        assert any("Very high max_files" in w for w in warnings)
        assert any("No ignore patterns" in w for w in warnings)

    def test_save_config(self):
        """Test saving configuration that loads back unchanged."""
        config = FinderConfig(roots=[self.temp_dir], ignore=['*.bak'], limits={'max_depth': 5})
        output_path = self.test_root / "nested" / "dir" / "saved.yaml"

        self.parser.save_config(config, output_path)

        assert output_path.exists()
        content = output_path.read_text(encoding='utf-8')
        assert content.startswith("# LLFS Configuration")

        loaded = self.parser.load_config(output_path)
        assert loaded.config == config

    def test_save_config_permission_error(self):
        config = FinderConfig(roots=[self.temp_dir])

        with patch("builtins.open", side_effect=PermissionError("Permission denied")):
            with pytest.raises(ConfigurationError, match="Cannot write configuration file"):
                self.parser.save_config(config, self.test_root / "saved.yaml")

    def test_generate_yaml_with_comments(self):
        content = self.parser._generate_yaml_with_comments({
            'roots': [self.temp_dir],
            'follow_symlinks': False,
        })

        assert "# Root directories to search" in content
        assert "# Descend into symlinked directories" in content
        assert "# Entry names to skip" not in content
        assert yaml.safe_load(content) == {'roots': [self.temp_dir], 'follow_symlinks': False}

    def test_validate_config_file_success(self):
        config_path = self._write_config({'roots': [self.temp_dir]})
        assert self.parser.validate_config_file(config_path) == []

    def test_validate_config_file_not_found(self):
        errors = self.parser.validate_config_file("/nonexistent/config.yaml")

        assert len(errors) == 1
        assert "Configuration file not found" in errors[0]

    def test_validate_config_file_invalid(self):
        config_path = self._write_config({'roots': [self.temp_dir], 'limits': {'min_score': 9}})

        errors = self.parser.validate_config_file(config_path)

        assert len(errors) == 1
        assert "Configuration validation failed" in errors[0]

    def test_get_config_template(self):
        """Test that the template is valid, commented configuration."""
        template = self.parser.get_config_template()

        assert "# LLFS Configuration" in template
        data = yaml.safe_load(template)
        assert set(data) == {'roots', 'ignore', 'follow_symlinks', 'limits'}
        assert data['limits']['max_results'] == 50
        assert data['limits']['min_score'] == 2
        validate_config_dict(data)


class TestConvenienceFunctions:
    """Test cases for module-level convenience functions."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_load_config_function(self):
        config_path = self.test_root / "config.yaml"
        config_path.write_text(yaml.dump({'roots': [self.temp_dir]}), encoding='utf-8')

        with patch.dict(os.environ, {'SEARCH_PATHS': self.temp_dir}):
            result = load_config(config_path)

        assert result.config.roots == [self.temp_dir]

    def test_load_config_function_strict_mode(self):
        config_path = self.test_root / "config.yaml"
        config_path.write_text(yaml.dump({'roots': [str(self.test_root / "missing")]}), encoding='utf-8')

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="Inaccessible root directories"):
                load_config(config_path, strict_mode=True)

    def test_validate_config_file_function(self):
        config_path = self.test_root / "config.yaml"
        config_path.write_text("roots: 42\n", encoding='utf-8')

        errors = validate_config_file(config_path)

        assert len(errors) == 1

    def test_create_config_template_function(self):
        output_path = self.test_root / "templates" / "llfs.yaml"

        create_config_template(output_path)

        assert output_path.exists()
        assert yaml.safe_load(output_path.read_text(encoding='utf-8'))['follow_symlinks'] is False

    def test_create_config_template_function_permission_error(self):
        with patch("builtins.open", side_effect=PermissionError("Permission denied")):
            with pytest.raises(ConfigurationError, match="Cannot create template file"):
                create_config_template(self.test_root / "llfs.yaml")


class TestConfigurationError:
    """Test cases for ConfigurationError exception."""

    def test_configuration_error_creation(self):
        error = ConfigurationError("Test error message")
        assert str(error) == "Test error message"
        assert isinstance(error, Exception)
