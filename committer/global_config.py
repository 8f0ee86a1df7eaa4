"""Global configuration management for committer.

Handles user-level configuration stored in ~/.config/committer/:
- config.yaml: Model and preference settings
- credentials: The OpenRouter API key
"""

import os
import stat
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from committer.config import API_KEY_ENV_VAR, CommitterConfig


class GlobalConfigError(Exception):
    """Raised when there's an error with global configuration."""
    pass


_CONFIG_DIR = Path.home() / ".config" / "committer"


def get_global_config_dir() -> Path:
    """Get the global committer configuration directory.

    Returns:
        Path to ~/.config/committer/
    """
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to ~/.config/committer/
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    return get_global_config_dir() / "config.yaml"


def get_credentials_file_path() -> Path:
    return get_global_config_dir() / "credentials"


def load_global_config() -> Dict[str, Any]:
    """Load the raw configuration mapping from config.yaml.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.

    Raises:
        GlobalConfigError: If the file cannot be read or is not a mapping.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise GlobalConfigError(f"Config file {config_file} must contain a mapping")
    return config


def save_global_config(config: Dict[str, Any]) -> None:
    """Save the raw configuration mapping to config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save config to {config_file}: {e}")


def load_config() -> CommitterConfig:
    """Load and validate the user configuration.

    Unknown keys are ignored; missing keys take their defaults.

    Raises:
        GlobalConfigError: If the file is unreadable or a value is invalid.
    """
    raw = load_global_config()
    known = {key: value for key, value in raw.items() if key in CommitterConfig.model_fields}
    try:
        return CommitterConfig(**known)
    except ValidationError as e:
        raise GlobalConfigError(f"Invalid configuration in {get_config_file_path()}:\n{e}")


def save_config(config: CommitterConfig) -> None:
    """Persist a CommitterConfig, keeping unknown keys already in the file."""
    raw = load_global_config()
    raw.update(config.to_dict())
    save_global_config(raw)


def update_config(**changes: Any) -> CommitterConfig:
    """Validate and persist changes to individual settings.

    Args:
        **changes: Field names and their new values.

    Returns:
        The updated configuration.

    Raises:
        GlobalConfigError: If a value is invalid.
    """
    current = load_config()
    try:
        updated = CommitterConfig(**{**current.model_dump(), **changes})
    except ValidationError as e:
        raise GlobalConfigError(f"Invalid configuration value:\n{e}")
    save_config(updated)
    return updated


def _read_credentials_file(credentials_file: Path) -> Dict[str, str]:
    credentials = {}
    with open(credentials_file, "r") as f:
        for line in f:
            line = line.strip()
            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue

            # Parse KEY=value format
            if "=" in line:
                key, value = line.split("=", 1)
                credentials[key.strip()] = value.strip()
    return credentials


def load_credentials() -> Dict[str, str]:
    """Load API keys from ~/.config/committer/credentials.

    Returns:
        Dictionary mapping variable names to API keys.
    """
    credentials_file = get_credentials_file_path()

    if not credentials_file.exists():
        return {}

    try:
        return _read_credentials_file(credentials_file)
    except OSError as e:
        raise GlobalConfigError(f"Failed to load credentials from {credentials_file}: {e}")


def save_credential(key_name: str, api_key: str) -> None:
    """Save or update an API key in the credentials file.

    The file is written with owner read/write permissions only.

    Args:
        key_name: Environment variable name (e.g., "OPENROUTER_API_KEY")
        api_key: The API key value.
    """
    ensure_global_config_dir()
    credentials_file = get_credentials_file_path()

    existing_creds = load_credentials()
    existing_creds[key_name] = api_key

    try:
        with open(credentials_file, "w") as f:
            f.write("# committer API credentials\n")
            f.write("# Format: OPENROUTER_API_KEY=your_key_here\n\n")

            for key, value in existing_creds.items():
                f.write(f"{key}={value}\n")

        os.chmod(credentials_file, stat.S_IRUSR | stat.S_IWUSR)

    except OSError as e:
        raise GlobalConfigError(f"Failed to save credential: {e}")


def get_credential(key_name: str) -> Optional[str]:
    return load_credentials().get(key_name)


def get_api_key() -> Optional[str]:
    """Look up the OpenRouter API key.

    Checks in order:
    1. OPENROUTER_API_KEY environment variable (a loaded .env counts)
    2. ~/.config/committer/credentials file

    Returns:
        The API key, or None when it is not configured.
    """
    key = os.environ.get(API_KEY_ENV_VAR)
    if key:
        return key
    return get_credential(API_KEY_ENV_VAR)


def api_key_source() -> Optional[str]:
    """Describe where the API key comes from, for `config show`."""
    if os.environ.get(API_KEY_ENV_VAR):
        return "env"
    if get_credential(API_KEY_ENV_VAR):
        return "credentials"
    return None
