"""
Configuration for the cafeteria store, read from <base_path>/config.yaml.

Base path priority: --data-dir flag > CAFETERIA_BASE_PATH env var > ~/.cafeteria
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .helper import DB_NAME

DEFAULT_BASE_PATH = Path.home() / ".cafeteria"
CONFIG_FILENAME = "config.yaml"
BASE_PATH_ENV = "CAFETERIA_BASE_PATH"

CONFIG_TEMPLATE = f"""# Cafeteria Configuration File

database:
  name: {DB_NAME}  # stored as <name>.sqlite in the data directory
  wal: false
  allow_downgrade: false

logging:
  level: WARNING
"""


@dataclass
class CafeteriaConfig:
    """Settings used to open the store."""
    db_name: str = DB_NAME
    wal: bool = False
    allow_downgrade: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CafeteriaConfig':
        database = data.get('database') or {}
        logging_section = data.get('logging') or {}
        for name, section in (('database', database), ('logging', logging_section)):
            if not isinstance(section, dict):
                raise ValueError(
                    f"'{name}' section in {CONFIG_FILENAME} must be a mapping, "
                    f"got {type(section).__name__}"
                )
        return cls(
            db_name=str(database.get('name', DB_NAME)),
            wal=bool(database.get('wal', False)),
            allow_downgrade=bool(database.get('allow_downgrade', False)),
            log_level=str(logging_section.get('level', "WARNING")).upper(),
        )


def get_base_path(ctx_data_dir: Optional[Path] = None) -> Path:
    """
    Get the base path for cafeteria data.

    Args:
        ctx_data_dir: Value from --data-dir CLI option, if provided.
    """
    if ctx_data_dir:
        return Path(ctx_data_dir)
    env_path = os.getenv(BASE_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_BASE_PATH


def _read_config_file(base_path: Union[str, Path]) -> Dict[str, Any]:
    config_path = Path(base_path) / CONFIG_FILENAME
    if not config_path.exists():
        return {}

    data = yaml.safe_load(config_path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping at the top level")
    return data


def load_config(base_path: Union[str, Path]) -> CafeteriaConfig:
    """
    Load config.yaml from base_path, falling back to defaults when absent.

    Raises:
        ValueError: If the file's top level, or its database or logging
                    section, is not a mapping
        yaml.YAMLError: If the file is not valid YAML
    """
    return CafeteriaConfig.from_dict(_read_config_file(base_path))


def write_default_config(base_path: Union[str, Path]) -> bool:
    """Write the config template unless one exists. Returns True if written."""
    config_path = Path(base_path) / CONFIG_FILENAME
    if config_path.exists():
        return False
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(CONFIG_TEMPLATE)
    return True


def get_config_value(base_path: Union[str, Path], key: str) -> Any:
    """
    Look up a dotted key such as 'database.name'.

    Raises:
        KeyError: If any part of the key is missing
    """
    current: Any = _read_config_file(base_path)
    for part in key.split('.'):
        if not isinstance(current, dict) or part not in current:
            raise KeyError(key)
        current = current[part]
    return current


def set_config_value(base_path: Union[str, Path], key: str, value: str) -> Any:
    """
    Set a dotted key, creating intermediate sections. The value is parsed as
    a YAML scalar so 'true' and '3' are stored as bool and int.

    Returns:
        The parsed value that was stored
    """
    config_path = Path(base_path) / CONFIG_FILENAME
    config_data = _read_config_file(base_path)

    parsed = yaml.safe_load(value) if value != "" else ""

    keys = key.split('.')
    current = config_data
    for part in keys[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[keys[-1]] = parsed

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(yaml.dump(config_data, default_flow_style=False))
    return parsed
