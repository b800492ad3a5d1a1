"""Configuration file handling for storegate.

Loads the optional YAML file that customises the display-label alias table,
the route guard fallback and logging. Example::

    module_aliases:
      Dashboard: [dashboard]
      Inventory: [inventory, stock_transfers]
    guard:
      fallback_path: /
      placeholder_message: Loading permissions...
    logging:
      level: INFO
      dir: ${STOREGATE_LOG_DIR}
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_FALLBACK_PATH = "/"
DEFAULT_PLACEHOLDER_MESSAGE = "Loading permissions..."


@dataclass
class GuardConfig:
    """Configuration for route guards."""

    fallback_path: str = DEFAULT_FALLBACK_PATH
    placeholder_message: str = DEFAULT_PLACEHOLDER_MESSAGE


@dataclass
class LoggingConfig:
    """Configuration for logging output."""

    level: str = "INFO"
    dir: str = "/var/log/storegate"
    file_logging: bool = False


@dataclass
class StoreGateConfig:
    """Top-level configuration for storegate."""

    module_aliases: Dict[str, List[str]] = field(default_factory=dict)
    guard: GuardConfig = field(default_factory=GuardConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_module_aliases(aliases_dict: Dict[str, Any]) -> Dict[str, List[str]]:
    """Parse the ``module_aliases`` section.

    A label may map to a single module key or a list of keys.

    Raises:
        TypeError: If the section is not a mapping
    """
    if not isinstance(aliases_dict, dict):
        raise TypeError(
            f"module_aliases must be a mapping, got {type(aliases_dict).__name__}"
        )

    aliases = {}
    for label, keys in aliases_dict.items():
        if isinstance(keys, str):
            keys = [keys]
        aliases[str(label)] = [str(k) for k in (keys or [])]
    return aliases


def parse_guard_config(guard_dict: Dict[str, Any]) -> GuardConfig:
    """Parse route guard configuration dictionary."""
    return GuardConfig(
        fallback_path=guard_dict.get("fallback_path", DEFAULT_FALLBACK_PATH),
        placeholder_message=guard_dict.get(
            "placeholder_message", DEFAULT_PLACEHOLDER_MESSAGE
        ),
    )


def parse_logging_config(logging_dict: Dict[str, Any]) -> LoggingConfig:
    """Parse logging configuration dictionary."""
    return LoggingConfig(
        level=logging_dict.get("level", "INFO"),
        dir=logging_dict.get("dir", "/var/log/storegate"),
        file_logging=logging_dict.get("file_logging", False),
    )


def parse_config(config_dict: Dict[str, Any]) -> StoreGateConfig:
    """Parse the full configuration dictionary.

    Args:
        config_dict: Full configuration dictionary

    Returns:
        StoreGateConfig instance
    """
    module_aliases = {}
    if config_dict.get("module_aliases"):
        module_aliases = parse_module_aliases(config_dict["module_aliases"])

    return StoreGateConfig(
        module_aliases=module_aliases,
        guard=parse_guard_config(config_dict.get("guard") or {}),
        logging=parse_logging_config(config_dict.get("logging") or {}),
    )


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return _expand_env_vars(config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_typed_config(config_path: Optional[str] = None) -> StoreGateConfig:
    """Load and parse configuration into typed dataclasses.

    With no path the built-in defaults are returned.
    """
    if not config_path:
        return StoreGateConfig()
    return parse_config(load_config(config_path))


def get_alias_table(config: StoreGateConfig):
    """Freeze the configured aliases into a ModuleAliasTable.

    Falls back to the built-in retail sidebar vocabulary when the
    configuration defines no aliases.
    """
    from storegate.core.rbac.aliases import DEFAULT_ALIAS_TABLE, ModuleAliasTable

    if not config.module_aliases:
        return DEFAULT_ALIAS_TABLE
    return ModuleAliasTable(config.module_aliases)
