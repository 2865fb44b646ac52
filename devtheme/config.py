"""
Configuration loader for Dev Theme.
Reads settings from settings.ini file.
"""

import os
import configparser
from pathlib import Path


def find_settings_file():
    """Find settings.ini file, searching up from current directory."""
    # Check current directory first
    if os.path.exists('settings.ini'):
        return 'settings.ini'

    # Check in parent directories up to 3 levels
    current = Path.cwd()
    for _ in range(3):
        settings_path = current / 'settings.ini'
        if settings_path.exists():
            return str(settings_path)
        current = current.parent

    # Check in package directory
    package_dir = Path(__file__).parent.parent
    settings_path = package_dir / 'settings.ini'
    if settings_path.exists():
        return str(settings_path)

    return None


def parse_permissions(value):
    """Parse an octal mode string such as '0755' or '0o755'."""
    value = str(value).strip().lower()
    if value.startswith('0o'):
        value = value[2:]
    return int(value, 8)


def load_settings(settings_path=None):
    """
    Load settings from INI file.
    Returns a dict with all configuration values.
    """
    if settings_path is None:
        settings_path = find_settings_file()

    if settings_path is None or not os.path.exists(settings_path):
        raise FileNotFoundError(
            "settings.ini not found. Copy settings.ini.example to settings.ini "
            "and configure your themes directory."
        )

    config = configparser.ConfigParser()
    config.read(settings_path)

    # Get base directory (where settings.ini is located)
    base_dir = os.path.dirname(os.path.abspath(settings_path))

    def resolve_path(path):
        """Resolve relative paths against base directory."""
        if path.startswith('./') or path.startswith('../'):
            return os.path.normpath(os.path.join(base_dir, path))
        return path

    template = config.get('Themes', 'template', fallback='').strip()

    settings = {
        # Theme slot settings
        'themes_directory': resolve_path(
            config.get('Themes', 'themes_directory', fallback='./themes')
        ),
        'template': template,
        'stylesheet': config.get('Themes', 'stylesheet', fallback=template).strip(),
        'directory_permissions': parse_permissions(
            config.get('Themes', 'directory_permissions', fallback='0755')
        ),

        # Per-user preference store
        'preferences_database': resolve_path(
            config.get('Preferences', 'database_path', fallback='./data/preferences.db')
        ),

        # Deploy settings
        'lock_directory': resolve_path(
            config.get('Deploy', 'lock_directory', fallback='')
        ),
        'lock_timeout': config.getint('Deploy', 'lock_timeout', fallback=7200),

        # Request authentication headers (set by the fronting proxy)
        'user_header': config.get('Auth', 'user_header', fallback='X-Remote-User'),
        'roles_header': config.get('Auth', 'roles_header', fallback='X-Remote-Roles'),

        # Browser settings
        'host': config.get('Browser', 'host', fallback='127.0.0.1'),
        'port': config.getint('Browser', 'port', fallback=5000),
        'debug': config.getboolean('Browser', 'debug', fallback=False),
        'secret_key': config.get('Browser', 'secret_key', fallback=''),
    }

    return settings


class Settings:
    """Singleton-like settings object for easy access."""
    _settings = None

    @classmethod
    def get(cls, key=None, settings_path=None):
        """Get settings value or all settings."""
        if cls._settings is None:
            cls._settings = load_settings(settings_path)

        if key is None:
            return cls._settings
        return cls._settings.get(key)

    @classmethod
    def reload(cls, settings_path=None):
        """Reload settings from file."""
        cls._settings = load_settings(settings_path)
        return cls._settings
