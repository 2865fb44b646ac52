from devtheme.preferences import PreferenceStore


def test_unknown_user_is_live(tmp_path):
    store = PreferenceStore(str(tmp_path / 'prefs.db'))

    assert store.is_dev_enabled(7) is False
    assert store.is_dev_enabled(None) is False
    assert store.dev_users() == []


def test_toggle_dev_mode(tmp_path):
    store = PreferenceStore(str(tmp_path / 'data' / 'prefs.db'))

    store.set_dev_enabled(7, True)
    assert store.is_dev_enabled(7) is True
    assert store.is_dev_enabled(8) is False

    store.set_dev_enabled(7, False)
    assert store.is_dev_enabled(7) is False


def test_dev_users(tmp_path):
    store = PreferenceStore(str(tmp_path / 'prefs.db'))
    store.init_db()

    store.set_dev_enabled(3, True)
    store.set_dev_enabled(1, True)
    store.set_dev_enabled(2, False)

    assert store.dev_users() == [1, 3]


def test_string_user_ids_are_accepted(tmp_path):
    store = PreferenceStore(str(tmp_path / 'prefs.db'))

    store.set_dev_enabled('5', True)

    assert store.is_dev_enabled(5) is True
