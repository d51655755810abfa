"""
YAML configuration parser for projscope.

This module loads, parses and validates YAML configuration files. It handles
configuration file discovery, falls back to defaults when nothing is found,
and reports configuration problems as ConfigurationError.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass
from pydantic import ValidationError

from ..models.config import (
    DEFAULT_IGNORED_DIRS,
    DEFAULT_IGNORED_FILES,
    DEFAULT_TAGS_COMMAND,
    ProjscopeConfig,
    validate_config_dict
)


logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ('ignore', 'project_types', 'enumerator', 'tags')


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
    config: ProjscopeConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when configuration parsing or validation fails."""
    pass


class ConfigParser:
    """
    YAML configuration parser with validation and error handling.

    Loads YAML configuration files, validates their contents and converts
    them to ProjscopeConfig objects.
    """

    DEFAULT_CONFIG_NAMES = [
        '.projscope.yaml',
        '.projscope.yml',
        'projscope.yaml',
        'projscope.yml'
    ]

    def __init__(self, strict_mode: bool = False, search_paths: Optional[List[Path]] = None):
        """
        Initialize the configuration parser.

        Args:
            strict_mode: If True, treat warnings as errors
            search_paths: Directories searched for a configuration file
                (defaults to cwd, home and ~/.config/projscope)
        """
        self.strict_mode = strict_mode
        self.search_paths = search_paths
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

        warnings = self._unknown_section_warnings(config_data)
        config = self._build_config(config_data)
        warnings.extend(config.validate_configuration())
        if is_default:
            warnings.append("No configuration file found, using default settings")

        if self.strict_mode and warnings:
            raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

        self.logger.info(f"Configuration loaded successfully from {config_path or 'defaults'}")
        return ConfigParseResult(
            config=config,
            warnings=warnings,
            config_path=config_path,
            is_default=is_default
        )

    def _candidate_dirs(self) -> List[Path]:
        if self.search_paths is not None:
            return [Path(p) for p in self.search_paths]
        return [
            Path.cwd(),
            Path.home(),
            Path.home() / '.config' / 'projscope',
        ]

    def _find_and_load_config(self) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load configuration file from default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        for search_path in self._candidate_dirs():
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.is_file():
                    self.logger.info(f"Found configuration file: {config_file}")
                    return config_file, self._load_yaml_file(config_file)

        self.logger.info("No configuration file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

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

    def _unknown_section_warnings(self, config_data: Dict[str, Any]) -> List[str]:
        return [f"Unknown configuration section ignored: {key}"
                for key in config_data if key not in KNOWN_SECTIONS]

    def _build_config(self, config_data: Dict[str, Any]) -> ProjscopeConfig:
        try:
            return ProjscopeConfig.from_dict(validate_config_dict(config_data))
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def save_config(self, config: ProjscopeConfig, output_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Raises:
            ConfigurationError: If file cannot be written
        """
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self._generate_yaml_with_comments(config.to_dict()))
            self.logger.info(f"Configuration saved to {output_path}")
        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        lines = [
            "# projscope configuration",
            "# Controls project detection, ignore rules and file enumeration",
            "",
        ]

        sections = [
            ("ignore", "Ignore rules applied to every project (directory names, filename wildcards)"),
            ("project_types", "Additional project types, checked before the built-in ones"),
            ("enumerator", "File enumeration backend (find or python)"),
            ("tags", "Tag generation")
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
        Validate a configuration file.

        Returns:
            List of validation errors (empty if valid)
        """
        config_path = Path(config_path)
        if not config_path.exists():
            return [f"Configuration file not found: {config_path}"]

        try:
            self._build_config(self._load_yaml_file(config_path))
        except ConfigurationError as e:
            return [str(e)]
        return []

    def get_config_template(self) -> str:
        """
        Get a template configuration file with all options and comments.
        """
        template_config = {
            'ignore': {
                'directories': list(DEFAULT_IGNORED_DIRS) + ['node_modules'],
                'files': list(DEFAULT_IGNORED_FILES)
            },
            'project_types': [
                {
                    'name': 'Python project',
                    'markers': [['pyproject.toml', 'setup.py', 'setup.cfg']],
                    'ignored_dirs': ['__pycache__', '.venv', '.tox'],
                    'ignored_files': ['*.egg-info']
                }
            ],
            'enumerator': {
                'backend': 'find',
                'find_executable': 'find'
            },
            'tags': {
                'default_command': DEFAULT_TAGS_COMMAND
            }
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
