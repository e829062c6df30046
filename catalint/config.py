"""Configuration management for catalint.

Settings are resolved with the following precedence (highest to lowest):
1. CLI argument
2. Environment variable (CATALINT_<KEY>)
3. Project config file (.catalint.yaml, found by walking up from the catalog)
4. Built-in default

Usage:
    from catalint.config import get_setting, load_config, resolve_settings

    scope = get_setting("key_scope", cli_value=cli_scope, config=load_config(path))
    settings = resolve_settings(start=catalog_path.parent, key_scope=cli_scope)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from catalint.constants import DEFAULT_KEY_SCOPE, KEY_SCOPES, MAX_CONFIG_SEARCH_DEPTH
from catalint.errors import ConfigParseError, InvalidSettingError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".catalint.yaml"

OUTPUT_FORMATS: tuple[str, ...] = ("text", "json")

# Built-in defaults; also the set of known settings
DEFAULTS: dict[str, Any] = {
    "key_scope": DEFAULT_KEY_SCOPE,
    "strict": False,
    "format": "text",
}

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class Settings:
    """Fully resolved settings for one run.

    Attributes:
        key_scope: "namespace" or "document".
        strict: If True, warnings also fail the CLI exit code.
        format: "text" or "json" CLI output.
        config_path: Config file the values were read from, if any.
    """

    key_scope: str = DEFAULT_KEY_SCOPE
    strict: bool = False
    format: str = "text"
    config_path: Path | None = None


def find_config_file(start: Path) -> Path | None:
    """Find the nearest .catalint.yaml at or above ``start``.

    Args:
        start: Directory to start searching from.

    Returns:
        Path to the config file, or None if none was found.
    """
    current = start.resolve()
    for _ in range(MAX_CONFIG_SEARCH_DEPTH):
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


def load_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the config file, or None.

    Returns:
        Config dictionary. Returns empty dict if the file doesn't exist or is empty.

    Raises:
        ConfigParseError: If the file is not valid YAML or not a mapping.
    """
    if config_path is None or not config_path.exists():
        return {}

    content = config_path.read_text(encoding="utf-8")
    if not content.strip():
        return {}

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise ConfigParseError(str(config_path), str(err)) from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(str(config_path), "top level must be a mapping")
    return data


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to environment variable name.

    Args:
        key: Setting key (e.g., "key_scope")

    Returns:
        Environment variable name (e.g., "CATALINT_KEY_SCOPE")
    """
    return f"CATALINT_{key.upper()}"


def get_setting(
    key: str,
    cli_value: Any | None = None,
    config: dict[str, Any] | None = None,
) -> Any | None:
    """Resolve a single setting with full precedence.

    Args:
        key: Setting key (e.g., "key_scope", "strict").
        cli_value: Value passed via CLI argument (highest precedence).
        config: Already-loaded config file contents.

    Returns:
        Resolved value, or the built-in default (None for unknown keys).
    """
    # 1. CLI argument takes highest precedence
    if cli_value is not None:
        return cli_value

    # 2. Environment variable
    env_value = os.environ.get(_get_env_var_name(key))
    if env_value is not None:
        return env_value

    # 3. Config file
    if config and key in config:
        return config[key]

    # 4. Default
    return DEFAULTS.get(key)


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise InvalidSettingError(key, value, ("true", "false"))


def _to_choice(key: str, value: Any, choices: tuple[str, ...]) -> str:
    text = str(value).strip().lower()
    if text not in choices:
        raise InvalidSettingError(key, value, choices)
    return text


def resolve_settings(
    start: Path | None = None,
    *,
    key_scope: str | None = None,
    strict: bool | None = None,
    output_format: str | None = None,
) -> Settings:
    """Resolve all settings for a run.

    Args:
        start: Directory to search for .catalint.yaml (None skips the file).
        key_scope: CLI value for key_scope.
        strict: CLI value for strict.
        output_format: CLI value for format.

    Returns:
        Validated Settings.

    Raises:
        ConfigParseError: If the config file cannot be parsed.
        InvalidSettingError: If a setting has an unsupported value.
    """
    config_path = find_config_file(start) if start is not None else None
    config = load_config(config_path)
    if config_path is not None:
        logger.debug("Loaded config from %s", config_path)

    unknown = sorted(set(config) - set(DEFAULTS))
    if unknown:
        logger.warning("Ignoring unknown settings in %s: %s", config_path, ", ".join(unknown))

    return Settings(
        key_scope=_to_choice("key_scope", get_setting("key_scope", key_scope, config), KEY_SCOPES),
        strict=_to_bool("strict", get_setting("strict", strict, config)),
        format=_to_choice("format", get_setting("format", output_format, config), OUTPUT_FORMATS),
        config_path=config_path,
    )
