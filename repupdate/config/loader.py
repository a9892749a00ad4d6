"""
Config Loader — Load and validate the hosts YAML file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import HostsConfig

logger = logging.getLogger(__name__)

DEFAULT_HOSTS_FILE = "hosts.yml"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return its contents."""
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_host_config(path: Union[str, Path] = DEFAULT_HOSTS_FILE) -> HostsConfig:
    """
    Load the host configuration file.

    Raises:
        ConfigError: file missing, unparsable, or not matching the schema
    """
    config_path = Path(path)

    if not config_path.exists():
        raise ConfigError(f"Host config not found: {config_path}")

    try:
        data = load_yaml(config_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: expected a mapping at top level")

    try:
        config = HostsConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid host config {config_path}: {e}") from e

    logger.debug(
        f"Loaded {len(config.hosts)} host(s) and {len(config.keep)} kept "
        f"repository name(s) from {config_path}"
    )
    return config
