"""
Config Manager

Loads shutdown settings from YAML with include support and factory-default
fallback, then validates them into ShutdownSettings.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from shutdown_manager.errors import ConfigurationError
from shutdown_manager.models.enums import LogCategory
from shutdown_manager.models.settings import ShutdownSettings
from shutdown_manager.utils.logger import configure_logger, get_logger

log = get_logger().for_category(LogCategory.CONFIG)

FACTORY_DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "config" / "factory_defaults.yaml"
SECTION = "shutdown"


class ConfigManager:
    """
    Configuration manager with include system support

    The settings live under a ``shutdown:`` section so they can share a file
    with the rest of an application's configuration. A top-level
    ``include:`` list loads sibling YAML files first; keys of the main file
    override them.

    Example:
        config = ConfigManager("config/app.yaml")
        settings = config.load()
        config.apply_logging()

        coordinator = create_shutdown_manager(settings)

    config/app.yaml:
        include:
          - logging.yaml
        shutdown:
          timeout_ms: 5000
          logging_prefix: "[app]: "
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        defaults_path: Union[str, Path] = FACTORY_DEFAULTS_PATH
    ):
        """
        Initialize ConfigManager

        Args:
            config_path: Application YAML file, factory defaults only when None
            defaults_path: Factory defaults merged under the application file
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self.factory_defaults_path = Path(defaults_path)
        self.data: Dict[str, Any] = {}
        self.settings: Optional[ShutdownSettings] = None

    def load(self) -> ShutdownSettings:
        """
        Load and validate configuration

        Process:
        1. Load factory defaults (must succeed)
        2. Load the application file, resolving include: entries
        3. On read/parse failure of the application file, keep the defaults
        4. Validate the merged shutdown section

        Returns:
            Validated ShutdownSettings

        Raises:
            ConfigurationError: Factory defaults unreadable or values invalid
        """
        try:
            defaults = self._read_yaml(self.factory_defaults_path)
        except (OSError, yaml.YAMLError) as ex:
            raise ConfigurationError(
                f"Cannot load factory defaults: {ex}", str(self.factory_defaults_path)
            ) from ex

        section = dict(self._section(defaults))

        if self.config_path is not None:
            try:
                section.update(self._section(self._load_application_file(self.config_path)))
            except (OSError, yaml.YAMLError) as ex:
                log.error(
                    f"Failed to load {self.config_path.name}",
                    error=str(ex),
                    error_type=type(ex).__name__
                )
                log.warn("Falling back to factory defaults")

        self.data = section
        try:
            self.settings = ShutdownSettings(**section)
        except ValidationError as ex:
            raise ConfigurationError(
                f"Invalid shutdown configuration: {ex}",
                str(self.config_path or self.factory_defaults_path)
            ) from ex

        log.debug("Shutdown settings loaded", **self.settings.model_dump())
        return self.settings

    def apply_logging(self) -> None:
        """Configure the console logger singleton from the loaded settings."""
        settings = self.settings or self.load()
        configure_logger(settings.log_level, settings.use_colors)

    def _load_application_file(self, path: Path) -> Dict[str, Any]:
        main_config = self._read_yaml(path)
        include = main_config.pop("include", None)
        if not include:
            return main_config

        log.info("Using include-based configuration")
        merged = self._load_with_includes(include, path.parent)
        for key, value in main_config.items():
            if key == SECTION and isinstance(value, dict):
                merged.setdefault(SECTION, {}).update(value)
            else:
                merged[key] = value
        return merged

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict[str, Any]:
        """
        Load and merge multiple YAML files from include list

        Args:
            include_list: List of filenames to load (e.g., ["logging.yaml"])
            config_dir: Directory containing config files

        Returns:
            Merged config dict
        """
        merged: Dict[str, Any] = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                file_data = self._read_yaml(filepath)
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise
            for key, value in file_data.items():
                if key == SECTION and isinstance(value, dict):
                    merged.setdefault(SECTION, {}).update(value)
                else:
                    merged[key] = value
            log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))

        return merged

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise yaml.YAMLError(f"{path.name}: top level must be a mapping")
        return data

    @staticmethod
    def _section(data: Dict[str, Any]) -> Dict[str, Any]:
        section = data.get(SECTION) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"'{SECTION}' must be a mapping")
        return section
