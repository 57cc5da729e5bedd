"""
YAML configuration parser for LLFS.

This module loads, parses, and validates YAML configuration files for the search
engine. It handles configuration file discovery, the SEARCH_PATHS environment
override, and provides helpful error messages for configuration issues.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union, Mapping
import logging
from dataclasses import dataclass

from ..models.config import (
    FinderConfig,
    DEFAULT_IGNORE_PATTERNS,
    SEARCH_PATHS_ENV,
    default_search_paths,
    roots_from_environment,
    validate_config_dict,
)


logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "LLFS_CONFIG"


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
    config: FinderConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when configuration parsing or validation fails."""
    pass


class ConfigParser:
    """
    YAML configuration parser with validation and error handling.

    Configuration is taken from an explicit path, the LLFS_CONFIG environment
    variable, or the first default file found in the current directory, the
    home directory and ~/.config/llfs. Roots from SEARCH_PATHS override whatever
    the file says.
    """

    DEFAULT_CONFIG_NAMES = [
        '.llfs.yaml',
        '.llfs.yml',
        'llfs.yaml',
        'llfs.yml',
    ]

    def __init__(self, strict_mode: bool = False, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the configuration parser.

        Args:
            strict_mode: If True, treat warnings as errors
            environ: Environment mapping to read overrides from (defaults to os.environ)
        """
        self.strict_mode = strict_mode
        self.environ = os.environ if environ is None else environ
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse configuration from file or use defaults.

        Args:
            config_path: Path to configuration file. If None, LLFS_CONFIG and the
                default locations are tried.

        Returns:
            ConfigParseResult containing parsed configuration and metadata

        Raises:
            ConfigurationError: If configuration is invalid or file cannot be read
        """
        try:
            config_path = config_path or self.environ.get(CONFIG_PATH_ENV) or None

            if config_path:
                config_path = Path(config_path).expanduser()
                if not config_path.exists():
                    raise ConfigurationError(f"Configuration file not found: {config_path}")

                config_data = self._load_yaml_file(config_path)
                is_default = False
            else:
                config_path, config_data = self._find_and_load_config()
                is_default = config_data is None
                if is_default:
                    config_data = {}

            config_data = self._apply_environment(config_data)

            validated_data = self._validate_config_data(config_data)
            finder_config = FinderConfig.from_dict(validated_data)

            warnings = finder_config.validate_configuration()
            warnings.extend(self._get_parser_warnings(finder_config, is_default))

            if self.strict_mode and warnings:
                raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

            self.logger.info(f"Configuration loaded successfully from {config_path or 'defaults'}")

            return ConfigParseResult(
                config=finder_config,
                warnings=warnings,
                config_path=config_path,
                is_default=is_default
            )

        except ConfigurationError:
            raise
        except Exception as e:
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
            Path.home() / '.config' / 'llfs',
        ]

        for search_path in search_paths:
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.is_file():
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
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _apply_environment(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Override roots from SEARCH_PATHS when it is set."""
        env_roots = roots_from_environment(self.environ)
        if env_roots is None:
            return config_data

        self.logger.info(f"Using roots from {SEARCH_PATHS_ENV}: {env_roots}")
        merged = dict(config_data)
        merged['roots'] = env_roots
        return merged

    def _validate_config_data(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate configuration data structure and values.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            return validate_config_dict(config_data)
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def _get_parser_warnings(self, config: FinderConfig, is_default: bool) -> List[str]:
        """Get parser-specific warnings."""
        warnings = []

        if is_default:
            warnings.append("No configuration file found, using default settings")

        if len(config.roots) > 10:
            warnings.append(f"Large number of root directories ({len(config.roots)}) may impact performance")

        if config.limits.max_files > 1000000:
            warnings.append("Very high max_files limit may make searches slow")

        if not config.ignore:
            warnings.append("No ignore patterns configured - version control and dependency folders will be walked")

        return warnings

    def save_config(self, config: FinderConfig, output_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Raises:
            ConfigurationError: If file cannot be written
        """
        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            yaml_content = self._generate_yaml_with_comments(config.to_dict())

            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(yaml_content)

            self.logger.info(f"Configuration saved to {output_path}")

        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        """Generate YAML content with a comment above each section."""
        lines = [
            "# LLFS Configuration",
            "# Controls where searches look and how results are bounded",
            "",
        ]

        sections = [
            ("roots", f"Root directories to search ({SEARCH_PATHS_ENV} overrides this list)"),
            ("ignore", "Entry names to skip (glob patterns)"),
            ("follow_symlinks", "Descend into symlinked directories"),
            ("limits", "Result size, relevance floor and walk budgets"),
        ]

        for section_name, comment in sections:
            if section_name in config_dict:
                lines.append(f"# {comment}")
                section_yaml = yaml.dump({section_name: config_dict[section_name]},
                                         default_flow_style=False,
                                         sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a configuration file without building a FinderConfig for use.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        try:
            config_path = Path(config_path)

            if not config_path.exists():
                errors.append(f"Configuration file not found: {config_path}")
                return errors

            config_data = self._load_yaml_file(config_path)
            self._validate_config_data(config_data)

        except ConfigurationError as e:
            errors.append(str(e))

        return errors

    def get_config_template(self) -> str:
        """
        Get a template configuration file with all options and comments.

        Returns:
            YAML template as string
        """
        template_config = {
            'roots': default_search_paths(),
            'ignore': list(DEFAULT_IGNORE_PATTERNS),
            'follow_symlinks': False,
            'limits': {
                'max_results': 50,
                'min_score': 2,
                'max_depth': 32,
                'max_files': 200000,
                'timeout_seconds': 300,
                'max_concurrent': 4,
            },
        }

        return self._generate_yaml_with_comments(template_config)


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """Convenience function to validate a configuration file."""
    parser = ConfigParser()
    return parser.validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Create a template configuration file.

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = ConfigParser()
    template_content = parser.get_config_template()

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)

    except OSError as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
