"""Configuration loading from CLI args, env vars, and optional YAML file.

Precedence (lowest to highest): defaults, YAML file, environment, CLI.
"""

import logging
import os
from dataclasses import dataclass

import yaml

from tailfollow.follower import DECODE_POLICIES, DEFAULT_CHUNK_SIZE
from tailfollow.opener import DEFAULT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    path: str = ""
    poll_interval: float = 0.1
    max_open_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_delay: float = 1.0
    read_chunk_size: int = DEFAULT_CHUNK_SIZE
    decode_errors: str = "skip"
    watch: bool = False
    log_level: str = "WARNING"


# field name -> (environment variable, converter)
_FIELDS = {
    "path": ("TAIL_PATH", str),
    "poll_interval": ("POLL_INTERVAL", float),
    "max_open_attempts": ("MAX_OPEN_ATTEMPTS", int),
    "retry_delay": ("RETRY_DELAY", float),
    "read_chunk_size": ("READ_CHUNK_SIZE", int),
    "decode_errors": ("DECODE_ERRORS", str),
    "watch": ("WATCH", _parse_bool),
    "log_level": ("LOG_LEVEL", str),
}


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ValueError(f"Config file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def validate(config: Config) -> Config:
    if not config.path:
        raise ValueError("a file path to follow is required")
    if config.poll_interval <= 0:
        raise ValueError("poll_interval must be positive")
    if config.max_open_attempts < 1:
        raise ValueError("max_open_attempts must be at least 1")
    if config.retry_delay < 0:
        raise ValueError("retry_delay must not be negative")
    if config.read_chunk_size < 1:
        raise ValueError("read_chunk_size must be positive")
    if config.decode_errors not in DECODE_POLICIES:
        raise ValueError(f"decode_errors must be one of {DECODE_POLICIES}")
    if config.log_level not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {LOG_LEVELS}")
    return config


def _convert(key: str, value, source: str):
    try:
        return _FIELDS[key][1](value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid {key} from {source}: {value!r}") from e


def load_config(cli_args=None, yaml_data: dict | None = None) -> Config:
    """Build Config from YAML data, env vars and CLI args, then validate it.

    `cli_args` is an argparse namespace; attributes that are None are
    treated as not given.
    """
    kwargs: dict = {}

    for key, value in (yaml_data or {}).items():
        if key not in _FIELDS:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        if value is None:
            continue
        kwargs[key] = _convert(key, value, "config file")

    for key, (env_name, _) in _FIELDS.items():
        raw = os.environ.get(env_name)
        if raw is not None:
            kwargs[key] = _convert(key, raw, env_name)

    if cli_args is not None:
        for key in _FIELDS:
            value = getattr(cli_args, key, None)
            if value is not None:
                kwargs[key] = _convert(key, value, "command line")

    if "log_level" in kwargs:
        kwargs["log_level"] = kwargs["log_level"].upper()

    return validate(Config(**kwargs))
