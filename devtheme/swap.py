"""
Swap engine: promote the development theme to live, or capture the live
theme into the development copy.

Each operation is a fixed sequence of steps. Every step checks the current
filesystem state before acting and is skipped when its precondition is
false, so an interrupted operation can simply be run again. Failures are
recorded on the report and never retried.
"""

import os
import logging
from contextlib import nullcontext

from .dir_ops import recursive_copy, recursive_delete, atomic_rename
from .errors import DeployError
from .locking import SlotLock, DEFAULT_LOCK_TIMEOUT
from .paths import current_slot, theme_paths

logger = logging.getLogger(__name__)

PROMOTE = 'promote'
CAPTURE = 'capture'
OPERATIONS = (PROMOTE, CAPTURE)

DONE = 'done'
SKIPPED = 'skipped'
FAILED = 'failed'


class StepResult:
    """Outcome of one step of a swap operation."""

    def __init__(self, name, status, detail='', warning=False):
        self.name = name
        self.status = status
        self.detail = detail
        self.warning = warning

    def to_dict(self):
        return {
            'name': self.name,
            'status': self.status,
            'detail': self.detail,
            'warning': self.warning,
        }

    def __repr__(self):
        return f"StepResult({self.name!r}, {self.status!r}, {self.detail!r})"


class SwapReport:
    """Ordered step outcomes of a single promote or capture run."""

    def __init__(self, operation, slot):
        self.operation = operation
        self.slot = slot
        self.steps = []

    def add(self, name, status, detail='', warning=False):
        step = StepResult(name, status, detail, warning)
        self.steps.append(step)
        return step

    def step(self, name):
        for step in self.steps:
            if step.name == name:
                return step
        return None

    @property
    def ok(self):
        return not self.failed_steps

    @property
    def failed_steps(self):
        return [s for s in self.steps if s.status == FAILED]

    @property
    def warnings(self):
        return [s.detail for s in self.steps if s.warning]

    def to_dict(self):
        return {
            'operation': self.operation,
            'slot': self.slot.name,
            'is_child': self.slot.is_child,
            'ok': self.ok,
            'steps': [s.to_dict() for s in self.steps],
        }


class SwapEngine:
    """Run promote/capture for one theme slot under a themes root."""

    def __init__(self, themes_dir, slot, permissions=0o755,
                 lock_directory=None, lock_timeout=DEFAULT_LOCK_TIMEOUT):
        self.themes_dir = themes_dir
        self.slot = slot
        self.permissions = permissions
        self.lock_directory = lock_directory or None
        self.lock_timeout = lock_timeout
        self.paths = theme_paths(themes_dir, slot)

    @classmethod
    def from_settings(cls, settings, slot=None):
        """Build an engine from loaded settings; resolves the slot if not given."""
        if slot is None:
            slot = current_slot(settings)
        return cls(
            settings['themes_directory'],
            slot,
            permissions=settings.get('directory_permissions', 0o755),
            lock_directory=settings.get('lock_directory'),
            lock_timeout=settings.get('lock_timeout', DEFAULT_LOCK_TIMEOUT),
        )

    def promote(self):
        """Copy dev-theme over the live theme, keeping the old live as <slot>-bk."""
        return self.run(PROMOTE)

    def capture(self):
        """Copy the live theme over dev-theme, keeping the old dev as dev-theme-bk."""
        return self.run(CAPTURE)

    def run(self, operation):
        if operation == PROMOTE:
            plan = (self.paths.dev, self.paths.live, self.paths.live_backup, 'dev', 'live')
        elif operation == CAPTURE:
            plan = (self.paths.live, self.paths.dev, self.paths.dev_backup, 'live', 'dev')
        else:
            raise ValueError(f"Unknown operation: {operation}")

        with self._lock():
            report = self._swap(operation, *plan)

        if report.ok:
            logger.info(f"[{operation}] {self.slot.name}: completed")
        else:
            names = ', '.join(s.name for s in report.failed_steps)
            logger.error(f"[{operation}] {self.slot.name}: failed steps: {names}")
        return report

    def _lock(self):
        if not self.lock_directory:
            return nullcontext()
        return SlotLock(self.lock_directory, self.slot.name, self.lock_timeout)

    def _swap(self, operation, source, target, backup, source_label, target_label):
        report = SwapReport(operation, self.slot)
        logger.info(f"[{operation}] {source} -> {target} (backup: {backup})")

        # Nothing is touched unless there is something to copy in
        if not os.path.isdir(source):
            report.add('check-source', FAILED, f"{source_label} directory {source} does not exist")
            logger.error(f"[{operation}] {source_label} directory {source} does not exist")
            return report
        report.add('check-source', DONE)

        # 1. Drop the previous backup; kept while the target is missing
        name = f"delete-{target_label}-backup"
        if not os.path.lexists(backup):
            self._skip(report, name, "no previous backup")
        elif not os.path.lexists(target):
            self._skip(report, name, f"{target_label} directory missing, keeping {backup}", warning=True)
        else:
            self._attempt(report, name, recursive_delete, backup)

        # 2. Move the current target aside
        name = f"backup-{target_label}"
        if os.path.lexists(backup):
            self._skip(report, name, f"{backup} still present")
        elif not os.path.lexists(target):
            self._skip(report, name, f"{target_label} directory {target} missing, nothing to back up",
                       warning=True)
        else:
            self._attempt(report, name, atomic_rename, target, backup)

        # 3. Fill the now-empty target from the source
        name = f"copy-{source_label}-to-{target_label}"
        if not os.path.isdir(source):
            self._skip(report, name, f"{source_label} directory {source} missing")
        elif os.path.lexists(target):
            self._skip(report, name, f"{target} still present")
        elif not self._attempt(report, name, recursive_copy, source, target, self.permissions):
            self._discard_partial(operation, target)

        return report

    def _attempt(self, report, name, action, *args):
        try:
            action(*args)
        except (DeployError, OSError) as e:
            logger.error(f"[{report.operation}] {name} failed: {e}")
            report.add(name, FAILED, str(e))
            return False
        logger.info(f"[{report.operation}] {name}: done")
        report.add(name, DONE)
        return True

    def _skip(self, report, name, reason, warning=False):
        if warning:
            logger.warning(f"[{report.operation}] {name} skipped: {reason}")
        else:
            logger.info(f"[{report.operation}] {name} skipped: {reason}")
        report.add(name, SKIPPED, reason, warning)

    def _discard_partial(self, operation, target):
        """Remove a half-copied target so a re-run starts from 'target absent'."""
        if os.path.islink(target) or not os.path.isdir(target):
            return
        try:
            recursive_delete(target)
        except OSError as e:
            logger.error(f"[{operation}] could not remove partial copy {target}: {e}")
        else:
            logger.warning(f"[{operation}] removed partial copy {target}")
