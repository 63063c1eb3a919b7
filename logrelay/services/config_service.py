"""Remote loggers configuration loading."""

import logging
from pathlib import Path

import yaml

from .config_schema import RemoteLoggersConfig

DEFAULT_CONFIG_PATH = "/etc/json-logger-server/remote-loggers.yaml"

logger = logging.getLogger(__name__)


class ConfigService:
    """Load remote loggers configuration from a YAML file."""

    def __init__(self, path: str = DEFAULT_CONFIG_PATH):
        self._path = Path(path)

    def load_config(self) -> RemoteLoggersConfig:
        """
        Load and validate configuration from the YAML file.

        A missing file yields an empty configuration; any other read,
        parse or validation failure is raised to the caller.
        """
        try:
            with self._path.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except FileNotFoundError:
            logger.info(
                "remote loggers file not found, no destination configured",
                extra={"path": str(self._path)},
            )
            return RemoteLoggersConfig.model_validate({})
        return RemoteLoggersConfig.model_validate(raw)

    def get_config_path(self) -> str:
        """
        Return the absolute path to the configuration file.
        """
        return str(self._path.absolute())
