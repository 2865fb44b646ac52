"""
Exception types raised by the deploy core.

Missing or non-directory delete targets use the built-in NotADirectoryError.
"""


class DeployError(Exception):
    """Base class for deploy failures."""


class ConfigurationError(DeployError):
    """The theme slot name could not be resolved from configuration."""


class RenameError(DeployError):
    """A directory rename failed or its destination already exists."""


class CopyError(DeployError):
    """A recursive copy failed partway."""


class LockError(DeployError):
    """The slot lock could not be created or checked."""


class DeployLockedError(LockError):
    """Another deploy currently holds the lock for this slot."""
