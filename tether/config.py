"""Configuration management for Tether."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any
import yaml

from . import __version__
from .errors import ConfigError
from .providers.base import ProviderConfig

_log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/tether/config.yaml"


@dataclass
class ServerConfig:
    """How to launch and talk to the tool server."""
    timeout: float = 30.0
    python_command: Optional[str] = None
    node_command: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)


class ConfigManager:
    """Manage Tether configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()
        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            _log.warning("Error reading config %s: %s", self.config_path, e)
            return {}
        return content if isinstance(content, dict) else {}

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            "model": {
                "api_key": "${GEMINI_API_KEY}",
                "model": "gemini-2.0-flash-001",
                "api_version": "v1alpha",
                "timeout": 60,
            },
            "server": {
                "timeout": 30,
                "env": {},
            },
            "client": {
                "name": "tether",
                "version": __version__,
            },
        }

        with open(self.config_path, "w") as f:
            yaml.dump(default_config, f, default_flow_style=False)

    def _resolve_env_var(self, value: Any) -> Any:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not isinstance(value, str):
            return value
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_provider_config(self, model: Optional[str] = None) -> ProviderConfig:
        """Build the model endpoint config.

        Args:
            model: Overrides the configured model name.

        Raises:
            ConfigError: If no API key resolves.
        """
        model_data = self.data.get("model") or {}

        api_key = self._resolve_env_var(model_data.get("api_key", "${GEMINI_API_KEY}"))
        if not api_key:
            raise ConfigError(
                f"No Gemini API key configured. Set GEMINI_API_KEY or edit {self.config_path}"
            )

        defaults = ProviderConfig(api_key=api_key)
        return ProviderConfig(
            api_key=api_key,
            model=model or model_data.get("model") or defaults.model,
            base_url=model_data.get("base_url"),
            api_version=model_data.get("api_version") or defaults.api_version,
            temperature=model_data.get("temperature"),
            max_tokens=model_data.get("max_tokens"),
            timeout=float(model_data.get("timeout") or defaults.timeout),
        )

    def get_server_config(self) -> ServerConfig:
        """Get tool server launch configuration."""
        server_data = self.data.get("server") or {}
        env = {
            str(k): str(self._resolve_env_var(v))
            for k, v in (server_data.get("env") or {}).items()
        }
        return ServerConfig(
            timeout=float(server_data.get("timeout") or ServerConfig.timeout),
            python_command=server_data.get("python_command"),
            node_command=server_data.get("node_command"),
            env=env,
        )

    def get_client_name(self) -> str:
        """Name this client reports during the handshake."""
        return (self.data.get("client") or {}).get("name", "tether")


    def get_client_version(self) -> str:
        """Version this client reports during the handshake."""
        version = (self.data.get("client") or {}).get("version")
        return str(version) if version else __version__
