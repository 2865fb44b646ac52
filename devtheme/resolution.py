"""
Request-time theme resolution.

Decides, from a user's dev-mode preference, which theme directory names a
request is served from. No request or storage access happens here.
"""

from collections import namedtuple

from .paths import DEV_THEME_NAME

LIVE = 'live'
DEV = 'dev'

DEV_TITLE_PREFIX = '** DEV ** '

ThemeSelection = namedtuple('ThemeSelection', ['template', 'stylesheet', 'target'])


def logical_target(dev_enabled):
    return DEV if dev_enabled else LIVE


def resolve_template(template, dev_enabled, is_child):
    """
    Parent ("template") theme name for the request.

    A child slot keeps its real parent; only the child itself is swapped.
    """
    if dev_enabled and not is_child:
        return DEV_THEME_NAME
    return template


def resolve_stylesheet(stylesheet, dev_enabled):
    """Active ("stylesheet") theme name for the request."""
    if dev_enabled:
        return DEV_THEME_NAME
    return stylesheet


def resolve_theme(template, stylesheet, dev_enabled):
    """Resolve both theme names for a user."""
    is_child = stylesheet != template
    return ThemeSelection(
        template=resolve_template(template, dev_enabled, is_child),
        stylesheet=resolve_stylesheet(stylesheet, dev_enabled),
        target=logical_target(dev_enabled),
    )


def dev_title(title):
    return f"{DEV_TITLE_PREFIX}{title}"


def page_title(title, dev_enabled):
    """Mark page titles while a user is looking at the dev theme."""
    return dev_title(title) if dev_enabled else title
