import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import yaml

from definitions import SESSION_FILE

DEFAULT_SERVICE_URL = "https://bsky.social"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_LOG_FILE_NAME = "sidetrackbot"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised for a missing/invalid configuration file or missing required settings."""

    pass


@dataclass
class Settings:
    bluesky_handle: Optional[str] = None
    bluesky_password: Optional[str] = None
    bluesky_service_url: str = DEFAULT_SERVICE_URL
    session_file: Path = SESSION_FILE
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    dry_run: bool = False
    log_file_name: str = DEFAULT_LOG_FILE_NAME


def load_config(config_file: str):
    """
    Load configuration settings from a YAML file.

    Args:
        config_file (str): The file path to the YAML configuration file.

    Returns:
        dict: The parsed configuration (empty dict for an empty file).

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or is not a mapping.

    Example Usage:
        config = load_config("config/config.yaml")
        print(config["bluesky"]["handle"])
    """
    try:
        with open(config_file, encoding="utf-8") as file:
            config = yaml.safe_load(file)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file {config_file} not found.")
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file: {e}")

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration file {config_file} must contain a mapping at the top level.")
    return config


def _truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def resolve_settings(config: Mapping, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Merge YAML config with environment variables into Settings.

    Precedence: ENV > YAML > defaults. Empty env values are ignored.
    """
    env = os.environ if environ is None else environ

    def pick(env_key: str, section: str, key: str, default=None):
        env_value = env.get(env_key, "")
        if env_value.strip():
            return env_value.strip()
        value = (config.get(section) or {}).get(key)
        return default if value is None else value

    return Settings(
        bluesky_handle=pick("BLUESKY_IDENTIFIER", "bluesky", "handle"),
        bluesky_password=pick("BLUESKY_PASSWORD", "bluesky", "app_password"),
        bluesky_service_url=pick("BLUESKY_SERVICE_URL", "bluesky", "service_url", DEFAULT_SERVICE_URL),
        session_file=Path(pick("BLUESKY_SESSION_FILE", "bluesky", "session_file", SESSION_FILE)),
        openai_model=pick("OPENAI_MODEL", "openai", "model", DEFAULT_OPENAI_MODEL),
        openai_api_key=pick("OPENAI_API_KEY", "openai", "api_key"),
        openai_base_url=pick("OPENAI_BASE_URL", "openai", "base_url"),
        dry_run=_truthy(pick("DRY_RUN", "script", "dry_run", False)),
        log_file_name=(config.get("script") or {}).get("log_file_name") or DEFAULT_LOG_FILE_NAME,
    )
