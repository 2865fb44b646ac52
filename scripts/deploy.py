#!/usr/bin/env python3
"""
CLI script to promote dev-theme to the live theme, or capture the live
theme into dev-theme.

Usage:
    python scripts/deploy.py promote            # dev-theme -> live theme
    python scripts/deploy.py capture            # live theme -> dev-theme
    python scripts/deploy.py promote --child    # use the [Themes] stylesheet slot
"""

import os
import sys
import logging
import argparse

# Add parent directory for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from devtheme.config import Settings
from devtheme.errors import DeployError
from devtheme.paths import current_slot
from devtheme.swap import SwapEngine, OPERATIONS


def print_report(report):
    """Print one line per step."""
    for step in report.steps:
        line = f"  [{step.status:<7}] {step.name}"
        if step.detail:
            line += f" - {step.detail}"
        print(line)


def main():
    parser = argparse.ArgumentParser(
        description='Swap content between the live theme and dev-theme'
    )
    parser.add_argument(
        'operation',
        choices=OPERATIONS,
        help='promote: dev-theme -> live, capture: live -> dev-theme'
    )
    parser.add_argument(
        '--config',
        help='Path to settings.ini file'
    )
    parser.add_argument(
        '--child',
        action='store_true',
        default=None,
        help='Treat the slot as a child theme (default: detect from settings)'
    )
    parser.add_argument(
        '--no-child',
        action='store_false',
        dest='child',
        help='Treat the slot as a parent theme'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    print("=" * 60)
    print(f"Dev Theme {args.operation.upper()}")
    print("=" * 60)

    # Load settings
    try:
        if args.config:
            Settings.reload(args.config)
        settings = Settings.get()
    except FileNotFoundError as e:
        print(f"\nError: {e}")
        print("\nPlease copy settings.ini.example to settings.ini and configure your settings.")
        sys.exit(1)

    try:
        slot = current_slot(settings, args.child)
        engine = SwapEngine.from_settings(settings, slot)
        print(f"\nThemes directory: {settings['themes_directory']}")
        print(f"Live theme: {slot.name}{' (child theme)' if slot.is_child else ''}\n")
        report = engine.run(args.operation)
    except DeployError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    print_report(report)

    if not report.ok:
        print(f"\n{args.operation} did not complete. Fix the failed steps and run it again.")
        sys.exit(1)

    print(f"\n{args.operation} complete!")


if __name__ == '__main__':
    main()
