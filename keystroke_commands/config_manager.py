#!/usr/bin/env python3
"""
Configuration system for the keystroke command layer
Supports YAML files, CLI overrides, and programmatic access
"""

import argparse
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from keystroke_commands.keys import KEY_SPACE_SIZE, LONG_PREFIX


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class EditorConfig:
    """Line editor settings"""
    long_prefix: str = LONG_PREFIX
    prompt_marker: str = "> "
    preview_width: int = 32  # echo field width in fixed-command mode
    buffer_capacity: int = 32

    def __post_init__(self):
        """Validate configuration values"""
        if not isinstance(self.long_prefix, str) or len(self.long_prefix) != 1:
            raise ValueError(f"Invalid long prefix: {self.long_prefix!r}. Must be a single character")
        if self.preview_width < 0:
            raise ValueError(f"Invalid preview width: {self.preview_width}. Must not be negative")
        if self.buffer_capacity < 1:
            raise ValueError(f"Invalid buffer capacity: {self.buffer_capacity}. Must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        return {
            'long_prefix': self.long_prefix,
            'prompt_marker': self.prompt_marker,
            'preview_width': self.preview_width,
            'buffer_capacity': self.buffer_capacity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EditorConfig':
        """Create from dictionary (YAML loading)"""
        return cls(
            long_prefix=data.get('long_prefix', LONG_PREFIX),
            prompt_marker=data.get('prompt_marker', '> '),
            preview_width=data.get('preview_width', 32),
            buffer_capacity=data.get('buffer_capacity', 32),
        )


@dataclass
class HelpConfig:
    """Help listing layout"""
    min_width: int = 5
    first_key: int = 1
    last_key: int = KEY_SPACE_SIZE - 1

    def __post_init__(self):
        """Validate configuration values"""
        if self.min_width < 0:
            raise ValueError(f"Invalid help column width: {self.min_width}")
        if not (0 <= self.first_key <= self.last_key < KEY_SPACE_SIZE):
            raise ValueError(
                f"Invalid help key range: {self.first_key}..{self.last_key}. "
                f"Must lie within 0..{KEY_SPACE_SIZE - 1}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min_width': self.min_width,
            'first_key': self.first_key,
            'last_key': self.last_key,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HelpConfig':
        return cls(
            min_width=data.get('min_width', 5),
            first_key=data.get('first_key', 1),
            last_key=data.get('last_key', KEY_SPACE_SIZE - 1),
        )


@dataclass
class LoggingConfig:
    """Console log output"""
    level: str = "INFO"
    format: str = "%(levelname)s %(name)s: %(message)s"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'format': self.format,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoggingConfig':
        return cls(
            level=str(data.get('level', 'INFO')).upper(),
            format=data.get('format', '%(levelname)s %(name)s: %(message)s'),
        )


@dataclass
class CommandSystemConfig:
    """Complete configuration for the command layer"""
    editor: EditorConfig = field(default_factory=EditorConfig)
    help: HelpConfig = field(default_factory=HelpConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Metadata
    config_version: str = "1.0"
    description: str = "Keystroke command layer configuration"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        return {
            'config_version': self.config_version,
            'description': self.description,
            'editor': self.editor.to_dict(),
            'help': self.help.to_dict(),
            'logging': self.logging.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommandSystemConfig':
        """Create from dictionary (YAML loading), defaults for missing sections"""
        config = cls()

        if 'config_version' in data:
            config.config_version = str(data['config_version'])
        if 'description' in data:
            config.description = data['description']

        if 'editor' in data:
            config.editor = EditorConfig.from_dict(data['editor'] or {})
        if 'help' in data:
            config.help = HelpConfig.from_dict(data['help'] or {})
        if 'logging' in data:
            config.logging = LoggingConfig.from_dict(data['logging'] or {})

        return config


class ConfigurationManager:
    """
    Manages configuration loading, merging, and validation
    """

    def __init__(self, config_file: str = "keystroke_commands.yaml"):
        self.config_file = config_file
        self.config = CommandSystemConfig()
        self.config_file_path: Optional[Path] = None

        self.logger = logging.getLogger(__name__)

        # Standard config file locations (in order of preference)
        self.config_search_paths = [
            Path.cwd() / config_file,  # Current directory
            Path.cwd() / "config" / config_file,  # Config subdirectory
            Path.home() / ".config" / "keystroke_commands" / "config.yaml",  # User config
        ]

    def load_config(self, config_file: Optional[str] = None) -> CommandSystemConfig:
        """
        Load configuration from file with fallback chain

        Args:
            config_file: Specific config file path, or None for auto-discovery

        Returns:
            Loaded configuration object (defaults if nothing usable was found)
        """
        if config_file:
            config_path = Path(config_file)
            if config_path.exists():
                self.config = self._load_yaml_file(config_path)
                self.config_file_path = config_path
                self.logger.info(f"Loaded config from: {config_path}")
            else:
                self.logger.warning(f"Config file not found: {config_path}")
                self.logger.info("Using default configuration")
        else:
            for path in self.config_search_paths:
                if path.exists():
                    self.config = self._load_yaml_file(path)
                    self.config_file_path = path
                    self.logger.info(f"Auto-discovered config: {path}")
                    break
            else:
                self.logger.info("No config file found, using defaults")

        return self.config

    def _load_yaml_file(self, file_path: Path) -> CommandSystemConfig:
        """Load configuration from a YAML file"""
        try:
            with open(file_path, 'r') as f:
                yaml_data = yaml.safe_load(f) or {}

            if not isinstance(yaml_data, dict):
                self.logger.error(f"Config file {file_path} does not hold a mapping")
                return CommandSystemConfig()

            return CommandSystemConfig.from_dict(yaml_data)

        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            self.logger.error(f"Error loading config file {file_path}: {e}")
            return CommandSystemConfig()

    def save_config(self, file_path: Optional[str] = None) -> bool:
        """Save current configuration to a YAML file"""
        target_path = Path(file_path) if file_path else (self.config_file_path or Path(self.config_file))

        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)

            with open(target_path, 'w') as f:
                f.write("# Keystroke command layer configuration\n")
                f.write(f"# Version: {self.config.config_version}\n\n")
                yaml.dump(self.config.to_dict(), f,
                          default_flow_style=False,
                          sort_keys=False,
                          indent=2)

            self.logger.info(f"Configuration saved to: {target_path}")
            return True

        except OSError as e:
            self.logger.error(f"Error saving config to {target_path}: {e}")
            return False

    def create_sample_config(self, file_path: str = "keystroke_commands_sample.yaml") -> bool:
        """Create a sample configuration file with comments"""
        try:
            with open(file_path, 'w') as f:
                f.write(self._generate_sample_yaml())
            self.logger.info(f"Sample configuration created: {file_path}")
            return True

        except OSError as e:
            self.logger.error(f"Error creating sample config: {e}")
            return False

    def _generate_sample_yaml(self) -> str:
        """Generate sample YAML with comments"""
        return """# Keystroke command layer configuration
config_version: "1.0"
description: "Keystroke command layer configuration"

editor:
  # Key that starts a long command (".dial 1234")
  long_prefix: "."
  # Shown in front of the parameter preview
  prompt_marker: "> "
  # Width of the parameter preview; longer input shows its tail
  preview_width: 32
  # Initial size of the edit buffer (grows as needed)
  buffer_capacity: 32

help:
  # Minimum width of the key / name column
  min_width: 5
  # Key values covered by the fixed-command listing
  first_key: 1
  last_key: 255

logging:
  # DEBUG, INFO, WARNING, ERROR, CRITICAL
  level: INFO
  format: "%(levelname)s %(name)s: %(message)s"
"""

    def merge_cli_args(self, args: argparse.Namespace) -> CommandSystemConfig:
        """Apply command line overrides (CLI wins over the config file)"""
        if getattr(args, 'log_level', None):
            self.config.logging.level = args.log_level.upper()
        if getattr(args, 'verbose', False):
            self.config.logging.level = "DEBUG"
        if getattr(args, 'long_prefix', None):
            self.config.editor = EditorConfig(
                long_prefix=args.long_prefix,
                prompt_marker=self.config.editor.prompt_marker,
                preview_width=self.config.editor.preview_width,
                buffer_capacity=self.config.editor.buffer_capacity,
            )
        if getattr(args, 'preview_width', None) is not None:
            self.config.editor.preview_width = args.preview_width
        return self.config

    def validate_config(self) -> tuple[bool, list[str]]:
        """
        Validate configuration for common issues

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.config.logging.level not in LOG_LEVELS:
            errors.append(f"Invalid log level: {self.config.logging.level}. Must be one of {', '.join(LOG_LEVELS)}")

        if self.config.editor.preview_width < 0:
            errors.append(f"Invalid preview width: {self.config.editor.preview_width}")

        prefix = self.config.editor.long_prefix
        if prefix.isspace() or ord(prefix) >= KEY_SPACE_SIZE or ord(prefix) == 0:
            errors.append(f"Invalid long prefix: {prefix!r}")

        return len(errors) == 0, errors

    def get_config(self) -> CommandSystemConfig:
        """Get a copy of the current configuration"""
        return deepcopy(self.config)


def setup_logging(config: LoggingConfig) -> None:
    """Configure the root logger from the logging section"""
    logging.basicConfig(level=getattr(logging, config.level, logging.INFO),
                        format=config.format)


def create_argument_parser() -> argparse.ArgumentParser:
    """Argument parser for the interactive console"""
    parser = argparse.ArgumentParser(
        description='Keystroke command console',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                # Defaults, config auto-discovery
  %(prog)s -c my_config.yaml              # Use specific config file
  %(prog)s --long-prefix :                # Start long commands with ':'
  %(prog)s --create-config sample.yaml    # Create sample config file

Configuration:
  Configuration is loaded in this order (later overrides earlier):
  1. Built-in defaults
  2. Configuration file (YAML)
  3. Command line arguments

  Config file search order:
  - keystroke_commands.yaml (current directory)
  - config/keystroke_commands.yaml
  - ~/.config/keystroke_commands/config.yaml
        """
    )

    config_group = parser.add_argument_group('Configuration')
    config_group.add_argument('-c', '--config', help='Configuration file path')
    config_group.add_argument('--create-config', metavar='FILE',
                              help='Write a sample configuration file and exit')
    config_group.add_argument('--save-config', metavar='FILE',
                              help='Save the effective configuration to FILE')

    editor_group = parser.add_argument_group('Editor')
    editor_group.add_argument('--long-prefix', help='Key that starts a long command')
    editor_group.add_argument('--preview-width', type=int,
                              help='Width of the parameter preview')

    log_group = parser.add_argument_group('Logging')
    log_group.add_argument('--log-level', choices=LOG_LEVELS, type=str.upper,
                           help='Console log level')
    log_group.add_argument('-v', '--verbose', action='store_true',
                           help='Shortcut for --log-level DEBUG')

    return parser


def setup_configuration(argv=None) -> tuple[Optional[CommandSystemConfig], bool, Optional[ConfigurationManager]]:
    """
    Setup configuration system with CLI integration

    Args:
        argv: Command line arguments (None for sys.argv)

    Returns:
        (config_object, should_exit, manager). When should_exit is set,
        config_object is None after --create-config and a default
        config after a configuration error.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    manager = ConfigurationManager()

    if args.create_config:
        manager.create_sample_config(args.create_config)
        return None, True, manager

    manager.load_config(args.config)
    try:
        config = manager.merge_cli_args(args)
    except ValueError as e:
        logging.getLogger(__name__).error(f"Configuration error: {e}")
        # Return a default config instead of exiting directly
        return CommandSystemConfig(), True, manager

    is_valid, errors = manager.validate_config()
    if not is_valid:
        for error in errors:
            logging.getLogger(__name__).error(f"Configuration error: {error}")
        return CommandSystemConfig(), True, manager

    if args.save_config:
        manager.save_config(args.save_config)

    return config, False, manager
