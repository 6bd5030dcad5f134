"""Service key lookup for the data store."""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Tuple

import keyring
from dotenv import dotenv_values
from keyring.errors import KeyringError

from hubcalendar.config.constants import (
    KEYRING_ACCOUNT_NAME,
    KEYRING_SERVICE_NAME,
    PREFERRED_KEY_ENV_VAR,
    PRIMARY_KEY_ENV_VAR,
)

logger = logging.getLogger(__name__)


def get_user_config_dir() -> Path:
    """Return a per-user config directory that works across platforms.

    Returns:
        Path to the user's config directory for this application.
    """
    if sys.platform.startswith("win"):
        base_str = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        base = Path(base_str) if base_str else (Path.home() / "AppData" / "Roaming")
        return base / "hubcalendar"

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "hubcalendar"

    base_str = os.environ.get("XDG_CONFIG_HOME")
    base = Path(base_str) if base_str else (Path.home() / ".config")
    return base / "hubcalendar"


def get_env_file_path() -> Path:
    return get_user_config_dir() / ".env"


def load_from_keyring() -> Optional[str]:
    """Load the service key from the OS keyring.

    Returns:
        The key if found, None otherwise (including when no backend works).
    """
    try:
        return keyring.get_password(KEYRING_SERVICE_NAME, KEYRING_ACCOUNT_NAME)
    except KeyringError as e:
        logger.warning("Keyring lookup failed: %s", e)
        return None


def load_from_env_file(path: Path) -> Optional[str]:
    """Load the service key from an environment file.

    Args:
        path: Path to the .env file.

    Returns:
        The key if found, None otherwise.
    """
    if not path.exists():
        return None

    # Parse without mutating os.environ
    values = dotenv_values(path)
    key = values.get(PREFERRED_KEY_ENV_VAR) or values.get(PRIMARY_KEY_ENV_VAR)
    if not key:
        return None
    return str(key).strip().strip("'\"").strip()


def get_service_key_source() -> Tuple[Optional[str], str]:
    """Find the service key and describe where it came from.

    Lookup order: environment variables, OS keyring, per-user config .env.

    Returns:
        Tuple of (key, source_description).
    """
    for var in (PREFERRED_KEY_ENV_VAR, PRIMARY_KEY_ENV_VAR):
        env_key = os.environ.get(var)
        if env_key and env_key.strip():
            return env_key.strip(), f"Environment Variable ({var})"

    keyring_key = load_from_keyring()
    if keyring_key:
        return keyring_key, "OS Keyring"

    env_file = get_env_file_path()
    env_file_key = load_from_env_file(env_file)
    if env_file_key:
        return env_file_key, f"User Config: {env_file}"

    return None, "No Service Key Found"


def load_service_key() -> Optional[str]:
    key, source = get_service_key_source()
    logger.debug("Service key source: %s", source)
    return key
