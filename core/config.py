"""
Persistent configuration management for PlanTables.

Handles editor preferences and config file storage.
"""

import os
import sys
import json
from pathlib import Path

from version_info import VERSION_STRING


CONFIG_DIR_ENV = 'PLAN_TABLES_CONFIG_DIR'


def get_config_dir():
    """
    Get platform-specific config directory.

    Returns:
        Path: Config directory path

    Platform paths:
    - Windows: C:/Users/{username}/AppData/Roaming/PlanTables
    - Mac: ~/Library/Application Support/PlanTables
    - Linux: ~/.config/PlanTables

    The PLAN_TABLES_CONFIG_DIR environment variable overrides all of these.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        config_dir = Path(override)
    elif sys.platform == 'win32':
        # Windows: AppData/Roaming
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
        config_dir = Path(base) / 'PlanTables'
    elif sys.platform == 'darwin':
        # macOS: ~/Library/Application Support
        config_dir = Path.home() / 'Library' / 'Application Support' / 'PlanTables'
    else:
        # Linux: ~/.config
        config_dir = Path.home() / '.config' / 'PlanTables'

    # Create directory if it doesn't exist
    config_dir.mkdir(parents=True, exist_ok=True)

    return config_dir


def get_config_path():
    """
    Get full path to config file.

    Returns:
        Path: Config file path (e.g., ~/.config/PlanTables/config.json)
    """
    return get_config_dir() / 'config.json'


def default_config():
    """
    Default config values.

    Returns:
        dict: Config dictionary with keys:
            - max_undo (int): Undo history depth
            - focus_retry_attempts (int): Retries after the first focus attempt
            - persist_row_metadata (bool): Save row kinds and pair ids explicitly
            - storage_scope (int|str|None): Default storage scope (None = legacy key)
            - database_path (str|None): SQLite file, None for the config directory
            - version (str): Version that wrote the file
    """
    return {
        'max_undo': 100,
        'focus_retry_attempts': 4,
        'persist_row_metadata': False,
        'storage_scope': None,
        'database_path': None,
        'version': VERSION_STRING,
    }


def load_config():
    """
    Load config from file. Returns default config if file doesn't exist.

    Keys missing from the file are filled from the defaults; an unreadable
    file falls back to the defaults entirely.

    Returns:
        dict: Config dictionary (see default_config)
    """
    config_path = get_config_path()
    defaults = default_config()

    if not config_path.exists():
        return defaults

    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError("config root must be an object")

        # Merge with defaults (in case new keys added in update)
        for key, value in defaults.items():
            if key not in config:
                config[key] = value

        return config

    except Exception as e:
        print(f"[plan-config] Warning: Could not load config: {e}")
        return defaults


def save_config(config):
    """
    Save config to file.

    Args:
        config (dict): Config dictionary to save

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        config_path = get_config_path()

        with open(config_path, 'w') as f:
            json.dump(config, indent=2, fp=f)

        return True

    except Exception as e:
        print(f"[plan-config] Warning: Could not save config: {e}")
        return False


def update_config(key, value):
    """
    Update a single config value and save.

    Args:
        key (str): Config key to update
        value: New value

    Returns:
        bool: True if successful, False otherwise
    """
    config = load_config()
    config[key] = value
    return save_config(config)


# Convenience functions
def get_max_undo():
    """Undo history depth (at least 1)."""
    try:
        return max(int(load_config().get('max_undo', 100)), 1)
    except (TypeError, ValueError):
        return 100


def get_focus_retry_attempts():
    """Retries after the first focus attempt (at least 0)."""
    try:
        return max(int(load_config().get('focus_retry_attempts', 4)), 0)
    except (TypeError, ValueError):
        return 4


def is_row_metadata_persisted():
    """Check if row kinds and pair ids are written explicitly."""
    return bool(load_config().get('persist_row_metadata', False))


def get_storage_scope():
    """Default storage scope (None selects the legacy key)."""
    return load_config().get('storage_scope')


def get_database_path():
    """
    Get path to the plan database.

    Returns:
        Path: Configured database path, or plan_tables.db in the config directory
    """
    configured = load_config().get('database_path')
    if configured:
        return Path(configured)
    return get_config_dir() / 'plan_tables.db'


# ============================================================================
# Error Logging
# ============================================================================

def get_error_log_path():
    """
    Get path to error log file.

    Returns:
        Path: Error log file path
    """
    return get_config_dir() / 'error_log.json'
