"""
pakman configuration.

Read from a YAML file (pakman.yml in the working directory by default):

    localPath: /path/to/local/repository
    remotePath: https://example.com/paks   # or a directory
    debug: false                           # optional
    cacheTTL: 60                           # optional, seconds
    timeout: 30                            # optional, seconds
    retries: 0                             # optional
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = "pakman.yml"


class ConfigError(Exception):
    """Configuration file is missing or invalid."""


@dataclass
class Config:
    local_path: str
    remote_path: str
    debug: bool = False
    cache_ttl: float = 60.0
    timeout: float = 30.0
    retries: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        for key in ("localPath", "remotePath"):
            if not data.get(key):
                raise ConfigError(f"{key} is required")

        try:
            return cls(
                local_path=str(data["localPath"]),
                remote_path=str(data["remotePath"]),
                debug=bool(data.get("debug", False)),
                cache_ttl=float(data.get("cacheTTL", 60.0)),
                timeout=float(data.get("timeout", 30.0)),
                retries=int(data.get("retries", 0)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid config value: {e}") from e


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> Config:
    """Load configuration from a YAML file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"opening config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"reading config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    return Config.from_dict(data)
