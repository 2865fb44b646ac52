import os
import stat

import pytest

from devtheme.dir_ops import atomic_rename, recursive_copy, recursive_delete
from devtheme.errors import CopyError, RenameError


# =============================================================================
# recursive_delete
# =============================================================================

def test_delete_removes_nested_tree_and_dotfiles(tmp_path, tree_writer):
    root = tree_writer(tmp_path / 'theme', {
        'style.css': 'body {}',
        '.hidden': 'x',
        'inc/functions.php': '<?php',
        'inc/.keep': '',
        'inc/deep/deeper/file.txt': 'deep',
    })
    (root / 'empty').mkdir()

    recursive_delete(str(root))

    assert not root.exists()


def test_delete_refuses_plain_file(tmp_path):
    target = tmp_path / 'file.txt'
    target.write_text('keep me')

    with pytest.raises(NotADirectoryError):
        recursive_delete(str(target))

    assert target.read_text() == 'keep me'


def test_delete_refuses_missing_path(tmp_path):
    with pytest.raises(NotADirectoryError):
        recursive_delete(str(tmp_path / 'missing'))


def test_delete_does_not_follow_symlinks(tmp_path, tree_writer):
    outside = tree_writer(tmp_path / 'outside', {'precious.txt': 'data'})
    root = tree_writer(tmp_path / 'theme', {'a.txt': '1'})
    os.symlink(str(outside), str(root / 'linked-dir'))
    os.symlink(str(outside / 'precious.txt'), str(root / 'linked-file'))

    recursive_delete(str(root))

    assert not root.exists()
    assert (outside / 'precious.txt').read_text() == 'data'


def test_delete_refuses_symlink_to_directory(tmp_path, tree_writer):
    real = tree_writer(tmp_path / 'real', {'a.txt': '1'})
    link = tmp_path / 'link'
    os.symlink(str(real), str(link))

    with pytest.raises(NotADirectoryError):
        recursive_delete(str(link))

    assert (real / 'a.txt').exists()


# =============================================================================
# recursive_copy
# =============================================================================

def test_copy_reproduces_tree(tmp_path, tree_writer, tree_reader):
    source = tree_writer(tmp_path / 'src', {
        'a.txt': '1',
        '.env': 'secret',
        'sub/b.txt': '2',
        'sub/inner/c.txt': '3',
    })
    dest = tmp_path / 'dest'

    assert recursive_copy(str(source), str(dest)) is True

    assert tree_reader(dest) == tree_reader(source)


def test_copy_then_delete_leaves_source_untouched(tmp_path, tree_writer, tree_reader):
    source = tree_writer(tmp_path / 'src', {'a.txt': '1', 'sub/b.txt': '2'})
    os.symlink('a.txt', str(source / 'alias'))
    before = tree_reader(source)

    recursive_copy(str(source), str(tmp_path / 'dest'))
    recursive_delete(str(tmp_path / 'dest'))

    assert tree_reader(source) == before


def test_copy_keeps_symlinks_as_symlinks(tmp_path, tree_writer):
    source = tree_writer(tmp_path / 'src', {'a.txt': '1'})
    os.symlink('a.txt', str(source / 'relative-link'))
    os.symlink('/nonexistent/target', str(source / 'dangling-link'))
    dest = tmp_path / 'dest'

    recursive_copy(str(source), str(dest))

    assert os.path.islink(dest / 'relative-link')
    assert os.readlink(dest / 'relative-link') == 'a.txt'
    assert os.path.islink(dest / 'dangling-link')
    assert os.readlink(dest / 'dangling-link') == '/nonexistent/target'


def test_copy_single_file(tmp_path):
    source = tmp_path / 'one.bin'
    source.write_bytes(b'\x00\x01\xff')

    recursive_copy(str(source), str(tmp_path / 'two.bin'))

    assert (tmp_path / 'two.bin').read_bytes() == b'\x00\x01\xff'


def test_copy_creates_directories_with_permissions(tmp_path, tree_writer):
    source = tree_writer(tmp_path / 'src', {'sub/a.txt': '1'})
    dest = tmp_path / 'dest'

    recursive_copy(str(source), str(dest), permissions=0o700)

    assert stat.S_IMODE(os.stat(dest).st_mode) == 0o700
    assert stat.S_IMODE(os.stat(dest / 'sub').st_mode) == 0o700


def test_copy_failure_raises_copy_error(tmp_path):
    source = tmp_path / 'a.txt'
    source.write_text('1')

    with pytest.raises(CopyError):
        recursive_copy(str(source), str(tmp_path / 'missing-parent' / 'a.txt'))


# =============================================================================
# atomic_rename
# =============================================================================

def test_rename_moves_directory(tmp_path, tree_writer):
    source = tree_writer(tmp_path / 'src', {'a.txt': '1'})
    dest = tmp_path / 'dest'

    atomic_rename(str(source), str(dest))

    assert not source.exists()
    assert (dest / 'a.txt').read_text() == '1'


def test_rename_refuses_existing_destination(tmp_path, tree_writer):
    source = tree_writer(tmp_path / 'src', {'a.txt': '1'})
    dest = tree_writer(tmp_path / 'dest', {'b.txt': '2'})

    with pytest.raises(RenameError):
        atomic_rename(str(source), str(dest))

    assert (source / 'a.txt').exists()
    assert (dest / 'b.txt').exists()


def test_rename_missing_source_raises(tmp_path):
    with pytest.raises(RenameError):
        atomic_rename(str(tmp_path / 'missing'), str(tmp_path / 'dest'))


needs_mkfifo = pytest.mark.skipif(not hasattr(os, 'mkfifo'), reason='no named pipes on this platform')


@needs_mkfifo
def test_copy_rejects_named_pipe_in_tree(tmp_path, tree_writer):
    source = tree_writer(tmp_path / 'src', {'a.txt': '1'})
    os.mkfifo(str(source / 'pipe'))

    with pytest.raises(CopyError):
        recursive_copy(str(source), str(tmp_path / 'dest'))

    assert not os.path.isdir(tmp_path / 'dest' / 'pipe')


@needs_mkfifo
def test_copy_rejects_named_pipe_source(tmp_path):
    os.mkfifo(str(tmp_path / 'pipe'))

    with pytest.raises(CopyError, match='unsupported file type'):
        recursive_copy(str(tmp_path / 'pipe'), str(tmp_path / 'dest'))

    assert not os.path.lexists(tmp_path / 'dest')


def test_copy_into_existing_directory(tmp_path, tree_writer):
    source = tree_writer(tmp_path / 'src', {'sub/a.txt': '1'})
    dest = tmp_path / 'dest'
    dest.mkdir()

    recursive_copy(str(source), str(dest), permissions=0o700)

    assert stat.S_IMODE(os.stat(dest / 'sub').st_mode) == 0o700
    assert (dest / 'sub' / 'a.txt').read_text() == '1'
