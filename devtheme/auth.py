"""
Authorization checks for deploy and profile actions.

Callers are identified upstream (by the fronting proxy); this module only
decides whether a caller's capabilities allow an action.
"""

from collections import namedtuple

Caller = namedtuple('Caller', ['user_id', 'capabilities'])

ADMIN_ROLES = ('administrator', 'super_admin')
MANAGE_OPTIONS = 'manage_options'
EDIT_THEME_OPTIONS = 'edit_theme_options'


def parse_capabilities(value):
    """Turn a comma-separated header value into a set of capabilities."""
    if not value:
        return frozenset()
    return frozenset(c.strip().lower() for c in value.split(',') if c.strip())


def can_deploy(caller, extra_condition=None):
    """
    Whether caller may run promote/capture.

    extra_condition is an optional callable taking the caller; returning a
    false value disables deploys (e.g. during a freeze).
    """
    if caller is None:
        return False
    caps = caller.capabilities
    if not any(role in caps for role in ADMIN_ROLES) or MANAGE_OPTIONS not in caps:
        return False
    if extra_condition is not None:
        return bool(extra_condition(caller))
    return True


def can_edit_theme_options(caller):
    return caller is not None and EDIT_THEME_OPTIONS in caller.capabilities


def can_edit_profile(caller, user_id):
    """Own profile with edit_theme_options; someone else's needs an admin role too."""
    if not can_edit_theme_options(caller):
        return False
    return caller.user_id == user_id or any(role in caller.capabilities for role in ADMIN_ROLES)
