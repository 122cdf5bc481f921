"""Configuration loader for agent-credtoolkit."""
import os
import logging
from pathlib import Path
from typing import Dict, Any
import yaml

from .preferences import get_preference

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    """Default config location: ~/.config/agent-credtoolkit/config.yml"""
    return Path.home() / ".config" / "agent-credtoolkit" / "config.yml"


def _get_config_path() -> str:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/agent-credtoolkit/preferences.json)
    2. Default location: ~/.config/agent-credtoolkit/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.debug(f"Using config from preference: {config_path}")
            return str(config_path)
        else:
            logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.debug(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   credtoolkit config set-path /path/to/your/config.yml\n"
    )


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def _require_mapping(value: Any, section: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"'{section}' in config must be a mapping")
    return value


def load_config() -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Only the file itself is validated here. Each section is checked by the
    accessor that reads it (get_profile, get_secret_manager_settings), so a
    broken section does not affect sources that never read it.

    Returns:
        Dict containing configuration with optional keys:
        - credentials: mapping of profile name -> {identifier, secret}
        - secret_manager: dict with project_id, identifier_secret, secret_secret
          and an optional service_account_path

    Raises:
        FileNotFoundError: If no config file can be located
        ConfigError: If config file is empty, unreadable or not a YAML mapping
    """
    # Resolved on every call so preference changes apply without a restart
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict):
        raise ConfigError(f"Config root at {config_path} must be a mapping")

    logger.debug(f"Configuration loaded successfully from {config_path}")
    return config


def get_profile(config: Dict[str, Any], profile_name: str) -> Dict[str, Any]:
    """
    Look up a credential profile in a loaded config.

    Raises:
        ConfigError: If the credentials section or the profile is missing or malformed
    """
    profiles = _require_mapping(config.get('credentials') or {}, "credentials")
    if profile_name not in profiles:
        raise ConfigError(
            f"Credential profile '{profile_name}' not found in config\n"
            f"Required format:\n"
            f"credentials:\n"
            f"  {profile_name}:\n"
            f"    identifier: <identifier>\n"
            f"    secret: <secret>"
        )
    return _require_mapping(profiles[profile_name], f"credentials.{profile_name}")


def get_secret_manager_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Read and validate the secret_manager section of a loaded config.

    Returns:
        The section, or an empty dict if it is absent

    Raises:
        ConfigError: If the section is malformed or references a missing service account file
    """
    section = _require_mapping(config.get('secret_manager') or {}, "secret_manager")

    service_account_path = section.get('service_account_path')
    if service_account_path:
        if not os.path.exists(service_account_path):
            raise ConfigError(
                f"Service account file not found at: {service_account_path}\n"
                f"Please ensure the file exists or update secret_manager.service_account_path"
            )
        if not os.path.isfile(service_account_path):
            raise ConfigError(
                f"Service account path is not a file: {service_account_path}"
            )
    return section
