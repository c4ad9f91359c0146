"""
SLA External Service Integrations
==================================

External services for SLA reporting:
- YAML threshold config loading
- Config file watcher for hot reload while the API is running
"""

import threading
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from incident_sla.core.exceptions import ConfigurationException
from incident_sla.shared.infrastructure.logging import get_logger
from incident_sla.sla.application.services import ISLAConfigProvider
from incident_sla.sla.domain.value_objects import SLAThresholdConfig

logger = get_logger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA config file changes."""

    def __init__(self, config_manager: "SLAConfigManager", config_path: Path):
        self.config_manager = config_manager
        self.config_path = config_path
        super().__init__()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.config_path.resolve():
            logger.info(f"Config file changed: {event.src_path}")
            self.config_manager.reload()


class SLAConfigManager(ISLAConfigProvider):
    """
    Thread-safe SLA threshold manager with hot-reload support.

    Uses watchdog to monitor file changes and reload configuration
    without restarting the service.
    """

    def __init__(self):
        self._config: Optional[SLAThresholdConfig] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> SLAThresholdConfig:
        """Initial configuration load."""
        self._path = Path(path)
        self._config = self._load_from_file(self._path)
        return self._config

    @staticmethod
    def _load_from_file(path: Path) -> SLAThresholdConfig:
        """Load and parse YAML config file."""
        if not path.exists():
            logger.warning(f"SLA config file not found: {path}, using defaults")
            return SLAThresholdConfig()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationException(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationException(f"SLA config {path} must be a mapping")

        try:
            return SLAThresholdConfig(**data)
        except ValidationError as e:
            raise ConfigurationException(
                f"Invalid SLA config {path}",
                {"errors": e.errors(include_url=False)}
            ) from e

    def reload(self) -> bool:
        """Reload configuration from file, keeping the previous one on failure."""
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except (ConfigurationException, OSError) as e:
            logger.error(f"Failed to reload SLA config: {e}")
            return False

        with self._lock:
            self._config = new_config
        logger.info("SLA configuration reloaded successfully")
        return True

    def start_watching(self) -> None:
        """
        Start watching configuration file for changes.

        Skips watching if the file doesn't exist or the platform
        doesn't support file system notifications.
        """
        if self._path is None:
            raise RuntimeError("Config not loaded. Call load() first.")

        if not self._path.exists():
            logger.info(
                f"Config file doesn't exist, skipping file watch: {self._path}. "
                "Using default SLA thresholds."
            )
            return

        try:
            self._observer = Observer()
            handler = ConfigFileHandler(self, self._path)
            self._observer.schedule(
                handler,
                str(self._path.resolve().parent),
                recursive=False
            )
            self._observer.start()
            logger.info(f"Started watching config file: {self._path}")
        except OSError as e:
            logger.warning(
                f"File watching not available, using static config: {e}"
            )
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching configuration file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    @property
    def config(self) -> SLAThresholdConfig:
        """Get current configuration."""
        with self._lock:
            if self._config is None:
                raise RuntimeError("SLA configuration not loaded")
            return self._config

    def get_config(self) -> SLAThresholdConfig:
        return self.config


class StaticConfigProvider(ISLAConfigProvider):
    """Fixed configuration, for one-shot runs and tests."""

    def __init__(self, config: Optional[SLAThresholdConfig] = None):
        self._config = config or SLAThresholdConfig()

    def get_config(self) -> SLAThresholdConfig:
        return self._config
