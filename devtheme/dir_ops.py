"""
Filesystem primitives used by the swap engine.
Delete a directory tree, copy a tree preserving symlinks, rename a directory.
"""

import os
import shutil
import logging

from .errors import CopyError, RenameError

logger = logging.getLogger(__name__)


def recursive_delete(path):
    """
    Delete a directory and everything inside it, dotfiles included.

    Only real subdirectories are recursed into; symlinks are unlinked and
    never followed, so nothing outside the tree is touched.

    Raises:
        NotADirectoryError: path is missing, a plain file, or a symlink
    """
    if os.path.islink(path) or not os.path.isdir(path):
        raise NotADirectoryError(f"{path} must be a directory")

    with os.scandir(path) as entries:
        children = list(entries)

    for entry in children:
        if entry.is_dir(follow_symlinks=False):
            recursive_delete(entry.path)
        else:
            os.unlink(entry.path)

    os.rmdir(path)
    logger.debug(f"Deleted {path}")


def recursive_copy(source, dest, permissions=0o755):
    """
    Copy a file, a symlink, or a whole directory tree.

    Args:
        source: Path to copy from (never modified)
        dest: Path to copy to
        permissions: Mode for directories created at dest

    Returns:
        True on success

    Raises:
        CopyError: the underlying filesystem call failed, or the tree holds
            something other than files, directories and symlinks
    """
    try:
        # Symlinks are recreated with the same target string
        if os.path.islink(source):
            os.symlink(os.readlink(source), dest)
        elif os.path.isfile(source):
            shutil.copyfile(source, dest)
        elif os.path.isdir(source):
            existing = _directories_under(dest)
            shutil.copytree(source, dest, symlinks=True,
                            copy_function=shutil.copyfile, dirs_exist_ok=True)
            for path in _directories_under(dest) - existing:
                os.chmod(path, permissions)
        else:
            raise CopyError(f"Failed to copy {source}: unsupported file type")
    except OSError as e:
        raise CopyError(f"Failed to copy {source} to {dest}: {e}") from e
    return True


def _directories_under(root):
    """Real directories at and below root (symlinked ones excluded)."""
    if os.path.islink(root) or not os.path.isdir(root):
        return set()
    found = {root}
    for dirpath, dirnames, _ in os.walk(root):
        for name in dirnames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                found.add(path)
    return found


def atomic_rename(source, dest):
    """
    Rename source to dest with a single rename call.

    Raises:
        RenameError: dest already exists, or the rename failed
    """
    if os.path.lexists(dest):
        raise RenameError(f"Cannot rename {source}: {dest} already exists")
    try:
        os.rename(source, dest)
    except OSError as e:
        raise RenameError(f"Failed to rename {source} to {dest}: {e}") from e
    logger.debug(f"Renamed {source} -> {dest}")
