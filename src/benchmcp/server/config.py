"""
benchmcp configuration

YAML-backed configuration with dotted-key access. Values from the
environment (optionally loaded from a ``.env`` file) override the file.
"""

import os
import tempfile
import yaml
import logging
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from ..common.constants import DEFAULT_TOOL_PREFIX, INACTIVITY_TIMEOUT, SERVER_NAME
from ..common.errors import ConfigError

logger = logging.getLogger(__name__)

# environment variable -> (config key, converter)
ENV_OVERRIDES = {
    "BENCHMCP_HOST": ("server.host", str),
    "BENCHMCP_PORT": ("server.port", int),
    "BENCHMCP_TRANSPORT": ("server.transport", str),
    "BENCHMCP_LOG_LEVEL": ("logging.level", str),
    "BENCHMCP_ENV": ("build.mode", str),
}

TRANSPORTS = ("http", "websocket", "stdio")


class ConfigManager:
    """Configuration manager

    Args:
        config_path: YAML file to load. When the file does not exist it is
            created with the defaults. Without a path nothing is persisted.
        use_env: apply ``BENCHMCP_*`` environment overrides
    """

    def __init__(self, config_path: Optional[str] = None, use_env: bool = True):
        self.config_path = config_path
        self.config = self._load_default_config()

        if self.config_path:
            if os.path.exists(self.config_path):
                self._load_config()
            else:
                self._save_config()

        if use_env:
            self._apply_env_overrides()

        self._validate()

    def _load_default_config(self) -> Dict[str, Any]:
        """Default configuration"""
        return {
            "server": {
                "name": SERVER_NAME,
                "host": "localhost",
                "port": 3000,
                "endpoint": "/bench-mcp",
                "transport": "http",
                "tool_prefix": DEFAULT_TOOL_PREFIX,
                "auto_start": True,
            },
            "sessions": {
                "inactivity_timeout": INACTIVITY_TIMEOUT,
                "sweep_interval": 1.0,
            },
            "tools": {
                "import_settle_delay": 3.0,
                "fetch_timeout": 30,
                "disabled": [],
            },
            "logging": {
                "level": "INFO",
                "file": os.path.join(tempfile.gettempdir(), "benchmcp", "benchmcp.log"),
            },
            "build": {
                "mode": "development",
                "source_dir": "src/benchmcp",
                "output_dir": "dist",
                "bundle_name": "mcp.pyz",
                "restricted_modules": ["os", "pathlib", "shutil", "subprocess", "socket"],
                "vendor": ["uvicorn", "starlette", "anyio", "mcp"],
            },
        }

    def _load_config(self) -> None:
        """Merge the YAML file over the defaults"""
        try:
            with open(self.config_path, 'r') as f:
                loaded_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config {self.config_path}: {e}") from e

        if loaded_config:
            if not isinstance(loaded_config, dict):
                raise ConfigError(f"Config root must be a mapping: {self.config_path}")
            self._merge_config(self.config, loaded_config)
            logger.info(f"Loaded config: {self.config_path}")

    def _save_config(self) -> None:
        """Write the current configuration to the file"""
        if not self.config_path:
            return
        try:
            directory = os.path.dirname(self.config_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(self.config_path, 'w') as f:
                yaml.dump(self.config, f, default_flow_style=False)
                logger.info(f"Saved config: {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save config: {e}")

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Deep-merge ``override`` into ``base``"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _apply_env_overrides(self) -> None:
        load_dotenv()
        for env_name, (key, convert) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {env_name}: {raw!r}") from e
            self._set(key, value)
            logger.debug(f"{env_name} overrides {key}")

    def _validate(self) -> None:
        transport = self.get("server.transport")
        if transport not in TRANSPORTS:
            raise ConfigError(f"Unknown transport {transport!r}, expected one of {', '.join(TRANSPORTS)}")
        if float(self.get("sessions.inactivity_timeout")) <= 0:
            raise ConfigError("sessions.inactivity_timeout must be positive")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value

        Args:
            key: dotted key, e.g. "server.host"
            default: returned when the key does not exist

        Returns:
            the configured value
        """
        parts = key.split('.')
        current = self.config

        try:
            for part in parts:
                current = current[part]
            return current
        except (KeyError, TypeError):
            return default

    def _set(self, key: str, value: Any) -> None:
        parts = key.split('.')
        current = self.config

        for part in parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value and persist it

        Args:
            key: dotted key, e.g. "server.host"
            value: new value
        """
        self._set(key, value)
        self._save_config()

    def get_all(self) -> Dict[str, Any]:
        """Copy of the whole configuration"""
        return self.config.copy()

    @property
    def is_production(self) -> bool:
        return str(self.get("build.mode", "")).lower() == "production"
