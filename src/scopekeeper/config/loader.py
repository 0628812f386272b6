"""Configuration loading from files and environment variables."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from scopekeeper._package import ENV_PREFIX
from scopekeeper.domain.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def expand_env_vars(value: Any) -> Any:
    """Expand ``$VAR`` and ``${VAR}`` in strings, recursively; unknown variables are kept."""
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(v) for v in value]
    return value


class ConfigurationLoader:
    """Loads raw configuration dictionaries before validation."""

    def __init__(self, env_prefix: str = ENV_PREFIX):
        self.env_prefix = env_prefix

    def load_from_file(self, path: str) -> Dict[str, Any]:
        """
        Load a JSON or YAML configuration file.

        Args:
            path: Path to a .json, .yml or .yaml file

        Returns:
            Raw configuration dictionary with environment variables expanded

        Raises:
            ConfigurationError: If the file is missing or cannot be parsed
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                if file_path.suffix in ('.yml', '.yaml'):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration from {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration in {path} must be a mapping")

        logger.debug("Loaded configuration from %s", path)
        return expand_env_vars(data)

    def load_configuration(self, config_file: Optional[str] = None) -> Dict[str, Any]:
        """Load from the given file, the file named by the environment, or nothing."""
        config_file = config_file or os.environ.get(f"{self.env_prefix}_CONFIG_FILE")
        if config_file:
            return self.load_from_file(config_file)
        return {}

    def apply_environment_overrides(self, config: Dict[str, Any],
                                    environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """
        Apply ``<PREFIX>_<SECTION>__<FIELD>`` overrides.

        ``SCOPEKEEPER_AWS__REGION=eu-west-1`` sets ``config["aws"]["region"]``;
        ``SCOPEKEEPER_ENVIRONMENT=testing`` sets a top-level field. Values are
        parsed as YAML scalars so numbers and booleans keep their types.
        """
        environ = os.environ if environ is None else environ
        prefix = f"{self.env_prefix}_"
        result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in config.items()}

        for key, raw in environ.items():
            if not key.startswith(prefix) or key == f"{prefix}CONFIG_FILE":
                continue
            path = [part.lower() for part in key[len(prefix):].split("__") if part]
            if not path:
                continue
            try:
                value = yaml.safe_load(raw) if raw != "" else raw
            except yaml.YAMLError:
                value = raw
            target = result
            for part in path[:-1]:
                node = target.get(part)
                if not isinstance(node, dict):
                    node = {}
                    target[part] = node
                target = node
            target[path[-1]] = value
            logger.debug("Applied environment override %s", key)

        return result
