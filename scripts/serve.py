#!/usr/bin/env python3
"""
CLI script to start the Dev Theme admin web server.

Usage:
    python scripts/serve.py              # Start development server
    python scripts/serve.py --port 8080  # Custom port

For production:
    gunicorn -w 4 -b 0.0.0.0:5000 webadmin.app:app
"""

import os
import sys
import logging
import argparse

# Add parent directory for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from devtheme.config import Settings
from devtheme.errors import ConfigurationError
from devtheme.paths import current_slot, dev_directory_path
from webadmin.app import create_app


def main():
    parser = argparse.ArgumentParser(
        description='Start the Dev Theme admin web server'
    )
    parser.add_argument(
        '--host',
        help='Host to bind to (default: from settings.ini)'
    )
    parser.add_argument(
        '--port',
        type=int,
        help='Port to bind to (default: from settings.ini)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode'
    )
    parser.add_argument(
        '--config',
        help='Path to settings.ini file'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    print("=" * 60)
    print("Dev Theme Admin Web Server")
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

    # Apply command line overrides
    host = args.host or settings['host']
    port = args.port or settings['port']
    debug = args.debug or settings['debug']

    print(f"\nThemes directory: {settings['themes_directory']}")
    print(f"Preferences: {settings['preferences_database']}")

    app = create_app(args.config)

    try:
        slot = current_slot(settings)
        print(f"Live theme: {slot.name}{' (child theme)' if slot.is_child else ''}")
    except ConfigurationError as e:
        print(f"\nWarning: {e}")
        print("Deploys are disabled until [Themes] template is set in settings.ini.")

    if not os.path.isdir(dev_directory_path(settings['themes_directory'])):
        print("\nWarning: dev-theme does not exist yet!")
        print("Run 'python scripts/deploy.py capture' first, or capture from the web UI.")

    print(f"\nStarting server at http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    try:
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\nServer stopped.")


if __name__ == '__main__':
    main()
