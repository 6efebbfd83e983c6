"""
Configuration for bicep-docs runs.

Settings are layered: dataclass defaults, then a YAML or JSON file, then
BICEP_DOCS_* environment variables, then command-line flags.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .errors import BicepDocsError, ErrorCategory, InputError
from .models import DEFAULT_SECTIONS, Section

logger = logging.getLogger(__name__)

TRIGGER_FILENAME = "main.bicep"
OUTPUT_FILENAME = "README.md"
MAX_WORKERS_CEILING = 16


class ConfigurationError(BicepDocsError):
    """Raised when configuration validation fails."""

    category = ErrorCategory.CONFIGURATION


def default_max_workers() -> int:
    """A small multiple of the CPU count, capped to bound subprocess pressure."""
    return max(1, min((os.cpu_count() or 1) * 2, MAX_WORKERS_CEILING))


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigurationManager:
    """Finds, reads, merges and validates raw configuration mappings."""

    DEFAULT_CONFIG_PATHS = [
        "bicep-docs.yaml",
        "bicep-docs.yml",
        "bicep-docs.json",
        ".bicep-docs.yaml",
        ".bicep-docs.yml",
        ".bicep-docs.json",
    ]

    @staticmethod
    def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
        """Return the first config file present in the working directory."""
        paths = search_paths or ConfigurationManager.DEFAULT_CONFIG_PATHS

        for path in paths:
            if os.path.isfile(path):
                return path
        return None

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """Read a YAML (.yaml/.yml) or JSON config file into a mapping."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        return data

    @staticmethod
    def load_env_config() -> Dict[str, Any]:
        """Collect BICEP_DOCS_* environment variables."""
        config: Dict[str, Any] = {}

        if os.getenv("BICEP_DOCS_SECTIONS"):
            config["sections"] = [
                s.strip() for s in os.getenv("BICEP_DOCS_SECTIONS").split(",") if s.strip()
            ]

        if os.getenv("BICEP_DOCS_SHOW_ALL_DECORATORS"):
            config["show_all_decorators"] = _env_bool(os.getenv("BICEP_DOCS_SHOW_ALL_DECORATORS"))

        if os.getenv("BICEP_DOCS_VERBOSE"):
            config["verbose"] = _env_bool(os.getenv("BICEP_DOCS_VERBOSE"))

        if os.getenv("BICEP_DOCS_TRIGGER_FILENAME"):
            config["trigger_filename"] = os.getenv("BICEP_DOCS_TRIGGER_FILENAME")

        if os.getenv("BICEP_DOCS_OUTPUT_FILENAME"):
            config["output_filename"] = os.getenv("BICEP_DOCS_OUTPUT_FILENAME")

        if os.getenv("BICEP_DOCS_MAX_WORKERS"):
            try:
                config["max_workers"] = int(os.getenv("BICEP_DOCS_MAX_WORKERS"))
            except ValueError:
                logger.warning("Invalid BICEP_DOCS_MAX_WORKERS value, using default")

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge mappings left to right; nested mappings are merged recursively."""
        result: Dict[str, Any] = {}

        for config in configs:
            if not config:
                continue

            for key, value in config.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = ConfigurationManager.merge_configs(result[key], value)
                else:
                    result[key] = value

        return result

    @staticmethod
    def validate_config(config_data: Dict[str, Any]) -> None:
        """Check section names, worker count and filenames."""
        if "sections" in config_data:
            sections = config_data["sections"]
            if isinstance(sections, str):
                sections = sections.split(",")
            if not isinstance(sections, list):
                raise ConfigurationError("sections must be a list of section names")
            try:
                Section.parse_list([s.value if isinstance(s, Section) else str(s) for s in sections])
            except InputError as e:
                raise ConfigurationError(e.message) from e

        if "max_workers" in config_data:
            workers = config_data["max_workers"]
            if workers is not None and (
                isinstance(workers, bool) or not isinstance(workers, int) or workers <= 0
            ):
                raise ConfigurationError("max_workers must be a positive integer")

        for key in ("trigger_filename", "output_filename"):
            if key in config_data:
                value = config_data[key]
                if not isinstance(value, str) or not value.strip():
                    raise ConfigurationError(f"{key} must be a non-empty string")


@dataclass
class BicepDocsConfig:
    """Settings for one bicep-docs run."""

    sections: List[Section] = field(default_factory=lambda: list(DEFAULT_SECTIONS))
    show_all_decorators: bool = False
    verbose: bool = False
    trigger_filename: str = TRIGGER_FILENAME
    output_filename: str = OUTPUT_FILENAME
    max_workers: int = field(default_factory=default_max_workers)

    @classmethod
    def default(cls) -> "BicepDocsConfig":
        """Settings with every default applied."""
        return cls()

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        use_env: bool = True,
        overrides: Optional[Dict[str, Any]] = None,
        validate: bool = True,
    ) -> "BicepDocsConfig":
        """
        Load configuration from multiple sources with precedence:
        1. Default values
        2. Configuration file
        3. Environment variables (if use_env=True)
        4. Explicit overrides (usually command-line flags)

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            use_env: Whether to load environment variables
            overrides: Values that win over every other source
            validate: Whether to validate the configuration
        """
        configs_to_merge = []

        file_config: Dict[str, Any] = {}
        if config_path:
            file_config = ConfigurationManager.load_config_file(config_path)
        else:
            found_config = ConfigurationManager.find_config_file()
            if found_config:
                file_config = ConfigurationManager.load_config_file(found_config)
                logger.info(f"Loaded configuration from: {found_config}")
        configs_to_merge.append(file_config)

        if use_env:
            configs_to_merge.append(ConfigurationManager.load_env_config())

        if overrides:
            configs_to_merge.append({k: v for k, v in overrides.items() if v is not None})

        merged_config = ConfigurationManager.merge_configs(*configs_to_merge)

        if validate:
            ConfigurationManager.validate_config(merged_config)

        return cls.from_dict(merged_config)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BicepDocsConfig":
        config = cls()
        for key, value in data.items():
            if not hasattr(config, key):
                logger.warning(f"Ignoring unknown configuration key: {key}")
                continue
            if key == "sections":
                if isinstance(value, str):
                    value = value.split(",")
                value = [v if isinstance(v, Section) else Section.from_string(str(v)) for v in value]
            elif key == "max_workers" and value is None:
                value = default_max_workers()
            setattr(config, key, value)
        return config

    @classmethod
    def from_file(cls, config_path: str) -> "BicepDocsConfig":
        """Load configuration from a JSON or YAML file."""
        return cls.load(config_path=config_path, use_env=False)

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping with section identifiers as strings."""
        data = asdict(self)
        data["sections"] = [s.value for s in self.sections]
        return data

    def to_file(self, config_path: str, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            config_path: Path to save configuration
            format: File format ('json' or 'yaml')
        """
        config_data = self.to_dict()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                if format.lower() == "yaml":
                    yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config_data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration file: {e}") from e

    def get_config_summary(self) -> str:
        """One line per setting, for --debug output."""
        return f"""bicep-docs Configuration Summary:
  - Sections: {', '.join(s.value for s in self.sections)}
  - Show all decorators: {self.show_all_decorators}
  - Verbose: {self.verbose}
  - Trigger filename: {self.trigger_filename}
  - Output filename: {self.output_filename}
  - Max workers: {self.max_workers}
"""


def load_config(
    config_path: Optional[str] = None,
    use_env: bool = True,
    overrides: Optional[Dict[str, Any]] = None,
) -> BicepDocsConfig:
    """
    Load configuration from file, environment variables and overrides.

    Args:
        config_path: Path to configuration file
        use_env: Whether to load environment variables
        overrides: Values that take precedence over everything else

    Returns:
        BicepDocsConfig: Loaded configuration
    """
    return BicepDocsConfig.load(config_path=config_path, use_env=use_env, overrides=overrides)
