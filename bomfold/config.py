"""
Configuration for bomfold runs.

Settings come from environment variables, optionally seeded from a .env file:

- BOMFOLD_ID_KEY, BOMFOLD_NAME_KEY, BOMFOLD_QUANTITY_KEY, BOMFOLD_LEVEL_KEY:
  input header names (defaults: "Part Number", "Part Name", "Quantity", "level")
- BOMFOLD_ROOT_LEVEL: level value that starts a new top-level assembly (default 0)
- BOMFOLD_SUB_BOMS: also emit BOM records for nested sub-assemblies (default false)
- BOMFOLD_OUTPUT_FORMAT: csv, excel or json (default csv)
- BOMFOLD_LOG_LEVEL, BOMFOLD_LOG_FILE: logging setup for the command line tool
  (level is one of DEBUG, INFO, WARNING, ERROR, CRITICAL)

Command line flags override whatever is loaded here.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Union

from dotenv import dotenv_values

from .exceptions import ConfigurationError
from .schema import (
    LEVEL_HEADER,
    OUTPUT_FORMATS,
    PART_NAME_HEADER,
    PART_NUMBER_HEADER,
    QUANTITY_HEADER,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "BOMFOLD_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class FoldRules:
    """Which columns carry the part fields and how levels are interpreted."""
    id_key: str = PART_NUMBER_HEADER
    name_key: str = PART_NAME_HEADER
    quantity_key: str = QUANTITY_HEADER
    level_key: str = LEVEL_HEADER
    root_level: int = 0
    include_sub_boms: bool = False

    def required_headers(self) -> List[str]:
        return [self.id_key, self.name_key, self.quantity_key, self.level_key]


@dataclass
class Settings:
    rules: FoldRules = field(default_factory=FoldRules)
    output_format: str = "csv"
    log_level: str = "WARNING"
    log_file: Optional[str] = None


def parse_bool(value: str, name: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}", field=name, value=value)


def parse_root_level(value: Union[str, int], name: str = "root_level") -> int:
    try:
        level = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", field=name, value=str(value))
    if level < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {level}", field=name, value=str(value))
    return level


def parse_output_format(value: str, name: str = "output_format") -> str:
    normalized = value.strip().lower()
    if normalized not in OUTPUT_FORMATS:
        raise ConfigurationError(
            f"{name} must be one of {', '.join(OUTPUT_FORMATS)}, got {value!r}",
            field=name,
            value=value
        )
    return normalized


def parse_log_level(value: str, name: str = "log_level") -> str:
    normalized = value.strip().upper()
    if normalized not in LOG_LEVELS:
        raise ConfigurationError(
            f"{name} must be one of {', '.join(LOG_LEVELS)}, got {value!r}",
            field=name,
            value=value
        )
    return normalized


def load_settings(
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Build Settings from a .env file and the process environment.

    Args:
        env_file: Path to a .env file. Values from it are used only where the
            environment does not set the same variable. Defaults to ./.env.
        environ: Environment mapping to read (defaults to os.environ)

    Returns:
        Settings with defaults for every unset variable

    Raises:
        ConfigurationError: If a variable holds an unusable value
    """
    env_path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    values = {}
    if env_path.is_file():
        values.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
        logger.debug(f"Loaded settings file {env_path}")
    values.update(os.environ if environ is None else environ)

    def get(name: str) -> Optional[str]:
        return values.get(ENV_PREFIX + name)

    rules = FoldRules()
    for attr, name in (
        ("id_key", "ID_KEY"),
        ("name_key", "NAME_KEY"),
        ("quantity_key", "QUANTITY_KEY"),
        ("level_key", "LEVEL_KEY"),
    ):
        value = get(name)
        if value:
            setattr(rules, attr, value)

    root_level = get("ROOT_LEVEL")
    if root_level is not None:
        rules.root_level = parse_root_level(root_level, ENV_PREFIX + "ROOT_LEVEL")

    sub_boms = get("SUB_BOMS")
    if sub_boms is not None:
        rules.include_sub_boms = parse_bool(sub_boms, ENV_PREFIX + "SUB_BOMS")

    settings = Settings(rules=rules)

    output_format = get("OUTPUT_FORMAT")
    if output_format:
        settings.output_format = parse_output_format(output_format, ENV_PREFIX + "OUTPUT_FORMAT")

    log_level = get("LOG_LEVEL")
    if log_level:
        settings.log_level = parse_log_level(log_level, ENV_PREFIX + "LOG_LEVEL")

    settings.log_file = get("LOG_FILE") or None
    return settings
