"""
OXA Tree Configuration

Engine settings with defaults, file-based and environment-based loading.
"""

import json
import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .core.registry import SchemaRegistry, create_default_registry
from .core.validator import Validator

ENV_PREFIX = "OXA_TREE_"


@dataclass
class EngineConfig:
    """Main configuration class for the tree engine"""

    # Logging
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Validation
    allow_deprecated_data: bool = True
    check_data_json: bool = True

    # Schemas loaded on top of the reference type set
    schema_paths: List[str] = field(default_factory=list)

    # Output
    default_format: str = "json"


def get_default_config() -> EngineConfig:
    """Get default configuration"""
    return EngineConfig()


def load_config_from_file(config_path: Union[str, Path]) -> EngineConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        EngineConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return _config_from_dict(data or {})


def load_config_from_env(environ: Optional[Dict[str, str]] = None) -> EngineConfig:
    """
    Load configuration from environment variables

    Environment variables are prefixed with OXA_TREE_
    For example: OXA_TREE_LOG_LEVEL=DEBUG, OXA_TREE_ALLOW_DEPRECATED_DATA=false

    Returns:
        EngineConfig instance
    """
    environ = os.environ if environ is None else environ
    config = EngineConfig()

    def to_bool(x: str) -> bool:
        return x.lower() in ["true", "1", "yes"]

    env_mappings = {
        "LOG_LEVEL": ("log_level", str),
        "LOG_FORMAT": ("log_format", str),
        "ALLOW_DEPRECATED_DATA": ("allow_deprecated_data", to_bool),
        "CHECK_DATA_JSON": ("check_data_json", to_bool),
        "SCHEMA_PATHS": ("schema_paths", lambda x: [p for p in x.split(os.pathsep) if p]),
        "DEFAULT_FORMAT": ("default_format", str),
    }

    for suffix, (attr, convert) in env_mappings.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if raw is not None:
            setattr(config, attr, convert(raw))

    _check_config(config)
    return config


def _config_from_dict(data: Dict[str, Any]) -> EngineConfig:
    """Create configuration from dictionary"""
    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = EngineConfig(**data)
    _check_config(config)
    return config


def _check_config(config: EngineConfig) -> None:
    if config.default_format not in ("json", "yaml"):
        raise ValueError(f"default_format must be json or yaml, got {config.default_format!r}")
    if not isinstance(logging.getLevelName(config.log_level.upper()), int):
        raise ValueError(f"Unknown log level: {config.log_level!r}")


def configure_logging(config: EngineConfig) -> None:
    """Install a stream handler on the root logger if none is configured"""
    level = logging.getLevelName(config.log_level.upper())
    root_logger = logging.getLogger()

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(config.log_format))
        root_logger.addHandler(handler)

    root_logger.setLevel(level)


def build_registry(config: EngineConfig) -> SchemaRegistry:
    """Create the reference registry plus the configured schema files"""
    registry = create_default_registry()
    for schema_path in config.schema_paths:
        registry.load_file(schema_path)
    return registry


def build_validator(
    config: EngineConfig, registry: Optional[SchemaRegistry] = None
) -> Validator:
    """Create a validator using the configured options"""
    return Validator(
        registry if registry is not None else build_registry(config),
        allow_deprecated_data=config.allow_deprecated_data,
        check_data_json=config.check_data_json,
    )
