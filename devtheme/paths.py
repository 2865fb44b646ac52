"""
Theme slot path resolution.

All managed directories are siblings directly under the themes root:

    <slot-name>      live theme
    <slot-name>-bk   backup of the previous live theme
    dev-theme        development copy
    dev-theme-bk     backup of the previous development copy

Path functions are pure; they never touch the filesystem.
"""

import os
from collections import namedtuple

from .errors import ConfigurationError

DEV_THEME_NAME = 'dev-theme'
BACKUP_SUFFIX = '-bk'

Slot = namedtuple('Slot', ['name', 'is_child'])
ThemePaths = namedtuple('ThemePaths', ['live', 'live_backup', 'dev', 'dev_backup'])


def is_child_theme(settings):
    """A child theme is active when the stylesheet differs from the template."""
    template = settings.get('template') or ''
    stylesheet = settings.get('stylesheet') or template
    return stylesheet != template


def resolve_slot_name(settings, is_child):
    """
    Return the directory name of the live theme slot.

    Child slots are named by the 'stylesheet' key, parent slots by 'template'.
    Raises ConfigurationError if the key is missing or unusable as a
    sibling directory name.
    """
    key = 'stylesheet' if is_child else 'template'
    name = (settings.get(key) or '').strip()

    if not name:
        raise ConfigurationError(f"No theme configured for '{key}'")
    if name in ('.', '..') or '/' in name or os.sep in name:
        raise ConfigurationError(f"Theme name '{name}' is not a plain directory name")
    if name in (DEV_THEME_NAME, DEV_THEME_NAME + BACKUP_SUFFIX):
        raise ConfigurationError(f"Theme name '{name}' collides with a managed directory")

    return name


def current_slot(settings, is_child=None):
    """Build the Slot for the configured theme."""
    if is_child is None:
        is_child = is_child_theme(settings)
    return Slot(resolve_slot_name(settings, is_child), is_child)


def live_directory_path(themes_dir, slot):
    return os.path.join(themes_dir, slot.name)


def live_backup_path(themes_dir, slot):
    return live_directory_path(themes_dir, slot) + BACKUP_SUFFIX


def dev_directory_path(themes_dir):
    return os.path.join(themes_dir, DEV_THEME_NAME)


def dev_backup_path(themes_dir):
    return dev_directory_path(themes_dir) + BACKUP_SUFFIX


def theme_paths(themes_dir, slot):
    """All four managed paths for a slot."""
    return ThemePaths(
        live=live_directory_path(themes_dir, slot),
        live_backup=live_backup_path(themes_dir, slot),
        dev=dev_directory_path(themes_dir),
        dev_backup=dev_backup_path(themes_dir),
    )
