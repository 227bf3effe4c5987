"""
SC Resolver Configuration System.

Priority order (highest to lowest):
1. Command-line arguments
2. Environment variables
3. Configuration file (YAML)
4. Default values
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from sc_resolver.auth.client_id import FALLBACK_CLIENT_ID
from sc_resolver.http import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


MAX_TIMEOUT = 60.0

# Valid log levels
VALID_LOG_LEVELS = {"debug", "info", "warning", "error"}

# Environment variable -> (config path, value parser)
ENV_MAPPINGS: dict[str, tuple[tuple[str, str], Callable[[str], Any]]] = {
    # SoundCloud
    "SOUNDCLOUD_CLIENT_ID": (("soundcloud", "client_id"), str),
    "SOUNDCLOUD_CLIENT_SECRET": (("soundcloud", "client_secret"), str),
    "SCRESOLVER_FALLBACK_CLIENT_ID": (("soundcloud", "fallback_client_id"), str),
    # HTTP
    "SCRESOLVER_HTTP_TIMEOUT": (("http", "timeout"), float),
    "SCRESOLVER_USER_AGENT": (("http", "user_agent"), str),
    # Logging
    "SCRESOLVER_LOG_LEVEL": (("logging", "level"), str.lower),
}


class ConfigError(Exception):
    """Configuration error."""

    pass


@dataclass
class SoundCloudConfig:
    """SoundCloud application credentials."""

    client_id: str = ""
    client_secret: str = ""  # Only needed for the client-credentials token exchange
    fallback_client_id: str = FALLBACK_CLIENT_ID


@dataclass
class HttpConfig:
    """Outbound request settings."""

    timeout: float = DEFAULT_TIMEOUT  # Seconds, per request
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class Config:
    """Complete SC Resolver configuration."""

    soundcloud: SoundCloudConfig = field(default_factory=SoundCloudConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def validate_client_id(client_id: str) -> bool:
    """Validate client id format."""
    return bool(re.match(r"^[a-zA-Z0-9]+$", client_id))


def validate_config(config: Config) -> None:
    """
    Validate configuration.

    Raises:
        ConfigError: If configuration is invalid
    """
    errors = []

    # SoundCloud credentials
    sc = config.soundcloud
    if sc.client_id and not validate_client_id(sc.client_id):
        errors.append(f"Invalid client_id: {sc.client_id}")

    if sc.client_secret and not sc.client_id:
        errors.append("client_secret requires client_id")

    if not sc.fallback_client_id:
        errors.append("fallback_client_id must not be empty")
    elif not validate_client_id(sc.fallback_client_id):
        errors.append(f"Invalid fallback_client_id: {sc.fallback_client_id}")

    # HTTP
    if not isinstance(config.http.timeout, (int, float)) or not (
        0 < config.http.timeout <= MAX_TIMEOUT
    ):
        errors.append(
            f"Invalid http timeout: {config.http.timeout}. Must be in (0, {MAX_TIMEOUT:g}]"
        )

    if not config.http.user_agent:
        errors.append("http user_agent must not be empty")

    # Logging
    if config.logging.level.lower() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid log level: {config.logging.level}. "
            f"Valid values: {sorted(VALID_LOG_LEVELS)}"
        )

    if errors:
        raise ConfigError("Configuration validation failed:\n  - " + "\n  - ".join(errors))


def load_yaml_config(path: Path) -> dict:
    """
    Read the YAML config file.

    A missing file is not an error. An empty file yields ``{}``.

    Raises:
        ConfigError: If the file is unreadable, malformed or not a mapping
    """
    if not path.is_file():
        logger.debug(f"No config file at {path}")
        return {}

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML config: {e}")
    except OSError as e:
        raise ConfigError(f"Error reading config file {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.debug(f"Loaded config from {path}")
    return data


def set_nested(d: dict, path: tuple, value: Any) -> None:
    """Set ``d[path[0]][path[1]]...`` creating intermediate sections."""
    *sections, key = path
    for section in sections:
        d = d.setdefault(section, {})
    d[key] = value


def load_env_config() -> dict:
    """Collect the settings present in the environment."""
    result: dict = {}
    for env_var, (path, parse) in ENV_MAPPINGS.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            set_nested(result, path, parse(raw))
        except ValueError:
            logger.warning(f"Ignoring {env_var}: cannot parse {raw!r}")
    return result


def merge_configs(*configs: dict) -> dict:
    """Merge config dictionaries section by section. Later configs win."""
    merged: dict = {}
    for config in configs:
        for key, value in config.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = merge_configs(current, value)
            else:
                merged[key] = value
    return merged


def dict_to_config(d: dict) -> Config:
    """Convert a dictionary to Config dataclass."""
    config = Config()

    # SoundCloud
    if "soundcloud" in d:
        sc = d["soundcloud"] or {}
        config.soundcloud.client_id = str(sc.get("client_id") or config.soundcloud.client_id)
        config.soundcloud.client_secret = str(
            sc.get("client_secret") or config.soundcloud.client_secret
        )
        config.soundcloud.fallback_client_id = str(
            sc.get("fallback_client_id") or config.soundcloud.fallback_client_id
        )

    # HTTP
    if "http" in d:
        h = d["http"] or {}
        config.http.timeout = h.get("timeout", config.http.timeout)
        config.http.user_agent = h.get("user_agent", config.http.user_agent)

    # Logging
    if "logging" in d:
        config.logging.level = (d["logging"] or {}).get("level", config.logging.level)

    return config


def load_config(
    config_path: Optional[Path] = None,
    cli_args: Optional[dict] = None,
) -> Config:
    """
    Build the validated configuration from file, environment and CLI.

    Args:
        config_path: YAML config file, if any
        cli_args: Nested dictionary from ``cli.args_to_dict``

    Raises:
        ConfigError: If a source is unreadable or the result is invalid
    """
    file_config = load_yaml_config(config_path) if config_path else {}
    config = dict_to_config(merge_configs(file_config, load_env_config(), cli_args or {}))
    validate_config(config)
    return config
