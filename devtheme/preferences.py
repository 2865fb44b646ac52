"""
Per-user dev theme preference, stored in SQLite.
"""

import os
import sqlite3
import logging

logger = logging.getLogger(__name__)

# Value written by the profile checkbox when dev mode is on
CHECKED = 'checked'


class PreferenceStore:
    """Read and write the dev-mode flag of each user id."""

    def __init__(self, db_path):
        self.db_path = db_path

    def init_db(self):
        """Initialize SQLite database."""
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        conn.execute('''
            CREATE TABLE IF NOT EXISTS user_preferences (
                user_id INTEGER PRIMARY KEY,
                dev_theme TEXT NOT NULL DEFAULT ''
            )
        ''')
        conn.commit()
        conn.close()

    def get_db(self):
        """Get database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def is_dev_enabled(self, user_id):
        """True if the user has switched to the dev theme."""
        if user_id is None or not os.path.exists(self.db_path):
            return False
        conn = self.get_db()
        row = conn.execute(
            'SELECT dev_theme FROM user_preferences WHERE user_id = ?',
            (int(user_id),)
        ).fetchone()
        conn.close()
        return row is not None and row['dev_theme'] == CHECKED

    def set_dev_enabled(self, user_id, enabled):
        """Store the user's dev-mode flag."""
        self.init_db()
        value = CHECKED if enabled else ''
        conn = self.get_db()
        conn.execute('''
            INSERT INTO user_preferences (user_id, dev_theme) VALUES (?, ?)
            ON CONFLICT(user_id) DO UPDATE SET dev_theme = excluded.dev_theme
        ''', (int(user_id), value))
        conn.commit()
        conn.close()
        logger.info(f"User {user_id}: dev theme {'enabled' if enabled else 'disabled'}")

    def dev_users(self):
        """User ids currently browsing the dev theme."""
        if not os.path.exists(self.db_path):
            return []
        conn = self.get_db()
        rows = conn.execute(
            'SELECT user_id FROM user_preferences WHERE dev_theme = ? ORDER BY user_id',
            (CHECKED,)
        ).fetchall()
        conn.close()
        return [row['user_id'] for row in rows]
