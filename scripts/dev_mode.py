#!/usr/bin/env python3
"""
CLI script to switch a user between the live theme and dev-theme.

Usage:
    python scripts/dev_mode.py on 42       # user 42 sees dev-theme
    python scripts/dev_mode.py off 42      # user 42 sees the live theme
    python scripts/dev_mode.py status 42
    python scripts/dev_mode.py list        # all users in dev mode
"""

import os
import sys
import argparse

# Add parent directory for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from devtheme.config import Settings
from devtheme.preferences import PreferenceStore


def main():
    parser = argparse.ArgumentParser(
        description='Manage the per-user Dev Theme switch'
    )
    parser.add_argument(
        'action',
        choices=('on', 'off', 'status', 'list')
    )
    parser.add_argument(
        'user_id',
        type=int,
        nargs='?',
        help='User id (not needed for list)'
    )
    parser.add_argument(
        '--config',
        help='Path to settings.ini file'
    )

    args = parser.parse_args()

    if args.action != 'list' and args.user_id is None:
        parser.error(f"'{args.action}' needs a user id")

    # Load settings
    try:
        if args.config:
            Settings.reload(args.config)
        settings = Settings.get()
    except FileNotFoundError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    store = PreferenceStore(settings['preferences_database'])

    if args.action == 'list':
        users = store.dev_users()
        print(f"{len(users)} user(s) in dev mode")
        for user_id in users:
            print(f"  {user_id}")
    elif args.action == 'status':
        state = 'dev' if store.is_dev_enabled(args.user_id) else 'live'
        print(f"User {args.user_id}: {state}")
    else:
        store.set_dev_enabled(args.user_id, args.action == 'on')
        print(f"User {args.user_id}: {'dev' if args.action == 'on' else 'live'}")


if __name__ == '__main__':
    main()
