import os
from pathlib import Path

import pytest

from devtheme.paths import Slot

ADMIN_HEADERS = {
    'X-Remote-User': '1',
    'X-Remote-Roles': 'administrator,manage_options,edit_theme_options',
}


def write_tree(root, files):
    """Create files under root from a {relative_path: content} dict."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
    return root


def read_tree(root):
    """Snapshot a tree as {relative_path: content}, symlinks as ('link', target)."""
    snapshot = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            full = os.path.join(dirpath, name)
            rel = os.path.relpath(full, root)
            if os.path.islink(full):
                snapshot[rel] = ('link', os.readlink(full))
            elif os.path.isfile(full):
                snapshot[rel] = Path(full).read_text(encoding='utf-8')
    return snapshot


@pytest.fixture
def tree_writer():
    return write_tree


@pytest.fixture
def tree_reader():
    return read_tree


@pytest.fixture
def themes_dir(tmp_path):
    root = tmp_path / 'themes'
    root.mkdir()
    return root


@pytest.fixture
def slot():
    return Slot('mytheme', False)


@pytest.fixture
def live_and_dev(themes_dir):
    """Live theme {a.txt: 1}, dev theme {a.txt: 2}."""
    write_tree(themes_dir / 'mytheme', {'a.txt': '1'})
    write_tree(themes_dir / 'dev-theme', {'a.txt': '2'})
    return themes_dir


@pytest.fixture
def settings_file(tmp_path, themes_dir):
    path = tmp_path / 'settings.ini'
    path.write_text(
        "[Themes]\n"
        "themes_directory = ./themes\n"
        "template = mytheme\n"
        "\n"
        "[Preferences]\n"
        "database_path = ./data/preferences.db\n"
        "\n"
        "[Deploy]\n"
        "lock_directory = ./locks\n",
        encoding='utf-8'
    )
    return path


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def flask_app(settings_file):
    from webadmin.app import create_app

    app = create_app(str(settings_file))
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture
def csrf_token(client):
    """Form token stored in the test client's session."""
    with client.session_transaction() as sess:
        sess['csrf_token'] = 'test-form-token'
    return 'test-form-token'
