"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for generator settings.
"""

import copy
import json
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict

from .formatter import DEFAULT_FORMATTER_COMMAND


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class GeneratorConfig:
    """Base configuration for code generators."""

    # Output settings
    output_file: Optional[str] = None

    # Package selection
    package: str = ""
    dependencies: Dict[str, str] = field(default_factory=dict)

    # Lines injected at the top of every generated namespace
    prelude: List[str] = field(default_factory=list)

    # Additional metadata
    add_comments: bool = True

    # Formatting
    use_formatter: bool = True
    formatter_command: List[str] = field(
        default_factory=lambda: list(DEFAULT_FORMATTER_COMMAND)
    )
    formatter_timeout: Optional[float] = 30.0

    # Import path of the runtime support package used by generated code
    runtime_module: str = "spatialgen.runtime"

    # Custom settings (language-specific)
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported languages."""
        self._configs["python"] = {
            "add_comments": True,
            "use_formatter": True,
            "formatter_command": list(DEFAULT_FORMATTER_COMMAND),
            "runtime_module": "spatialgen.runtime",
        }

    def get_config(self, language: str = "python",
                   custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Get complete configuration for a language.

        Args:
            language: Target language name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration for the language
        """
        # Start with defaults
        base_config = copy.deepcopy(self._configs.get(language, {}))

        # Load from file if provided
        if config_file:
            file_config = self._load_config_file(config_file)
            base_config.update(file_config)

        # Apply custom overrides
        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == '.json':
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in GeneratorConfig.__dataclass_fields__.values()}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys end up in the custom dict
        if custom_args:
            existing_custom = dict(config_args.get('custom', {}))
            existing_custom.update(custom_args)
            config_args['custom'] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}") from e

    def list_languages(self) -> List[str]:
        """Get list of supported languages."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig, language: str = "python") -> List[str]:
        """
        Validate configuration for a language.

        Returns:
            List of validation warnings/errors
        """
        warnings = []

        if config.package and not all(
            segment.isidentifier() for segment in config.package.split(".")
        ):
            warnings.append(f"Invalid package name: {config.package}")

        for prefix, root in config.dependencies.items():
            if not prefix:
                warnings.append(f"Empty dependency prefix for import root '{root}'")
            if not root or not all(part.isidentifier() for part in root.split(".")):
                warnings.append(f"Invalid import root for dependency '{prefix}': {root!r}")
            if config.package and prefix == config.package:
                warnings.append(f"Dependency '{prefix}' is the package being generated")

        if config.use_formatter and not config.formatter_command:
            warnings.append("Formatting enabled but no formatter_command configured")

        if config.formatter_timeout is not None and config.formatter_timeout <= 0:
            warnings.append(f"Invalid formatter_timeout: {config.formatter_timeout}")

        if language == "python":
            if not all(part.isidentifier() for part in config.runtime_module.split(".")):
                warnings.append(f"Invalid runtime_module: {config.runtime_module}")

        return warnings


# Global configuration manager instance
_config_manager = None

def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(language: str = "python", custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        language: Target language name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration for the language
    """
    manager = get_config_manager()
    return manager.get_config(language, custom_config, config_file)


def validate_config(config: GeneratorConfig, language: str = "python") -> List[str]:
    """Validate a configuration with the global manager."""
    return get_config_manager().validate_config(config, language)


# Example configuration file for reference
EXAMPLE_PYTHON_CONFIG = {
    "package": "example",
    "dependencies": {"improbable": "spatialos_std"},
    "prelude": [],
    "use_formatter": True,
    "formatter_command": ["black", "--quiet", "-"],
    "formatter_timeout": 30,
}
