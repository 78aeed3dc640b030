"""Atomic document writes with optional deferral and git auto-commit.

A dev server that watches the content directory reloads the page as soon as a
source file changes. With the deferred policy the write lands a moment after
the response has gone out, so the client applies its own optimistic update
first. Writes always go through a temporary file and ``os.replace`` so watchers
see one change event and never a truncated file.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

from source_notes.data_models import PersistenceSettings
from source_notes.errors import PersistenceError

logger = logging.getLogger(__name__)


def atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a sibling temporary file and a rename.

    Raises:
        PersistenceError: If writing or renaming fails. The temporary file is
            removed and ``path`` keeps its previous contents.
    """
    path = Path(path)
    tmp_path = path.with_name(f"{path.name}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as exc:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
        raise PersistenceError(f"Failed to write '{path.name}': {exc}") from exc


class PersistenceCoordinator:
    """Schedules document writes and best-effort git snapshots.

    One coordinator is shared by all requests of a server. It holds no document
    state, only the timers it has started, so tests and shutdown code can wait
    for outstanding work with :meth:`wait_for_pending`.
    """

    def __init__(self, settings: PersistenceSettings, repo_root: Path) -> None:
        self.settings = settings
        self.repo_root = Path(repo_root)
        self._pending: list[threading.Timer] = []
        self._lock = threading.Lock()

    def commit(self, path: Path, content: str, message: str) -> None:
        """Persist ``content`` to ``path`` according to the configured policy.

        Synchronous policy writes before returning and raises on failure.
        Deferred policy schedules the write and returns immediately; a failed
        deferred write is logged, since the caller has already responded.

        Args:
            path: Absolute path of the document.
            content: Full document text.
            message: Commit message for the follow-up git snapshot.

        Raises:
            PersistenceError: Synchronous policy only, if the write fails.
        """
        if self.settings.deferred:
            self._schedule(self.settings.write_delay, self._deferred_write, path, content, message)
            logger.debug("Scheduled write of '%s' in %.2fs", path, self.settings.write_delay)
            return

        atomic_write(path, content)
        logger.debug("Wrote '%s'", path)
        self._schedule_snapshot(path, message)

    def snapshot(self, path: Path, message: str) -> bool:
        """Stage and commit one file. Failures are logged and never raised.

        Returns:
            ``True`` when the commit succeeded.
        """
        path = Path(path)
        try:
            target = path.resolve().relative_to(self.repo_root.resolve())
        except ValueError:
            target = path

        try:
            self._run_git("add", str(target))
            self._run_git("commit", "-m", message)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip() or exc
            logger.warning("Git auto-commit skipped for '%s': %s", target, detail)
            return False
        except OSError as exc:
            logger.warning("Git auto-commit skipped for '%s': %s", target, exc)
            return False

        logger.info("Auto-committed '%s' (%s)", target, message)
        return True

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """Block until every scheduled write and snapshot has run.

        Timers scheduled by running timers (a snapshot after a deferred write)
        are waited for too.

        Returns:
            ``True`` if nothing is pending any more, ``False`` on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                alive = [timer for timer in self._pending if timer.is_alive()]
                self._pending = alive
            if not alive:
                return True
            for timer in alive:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                timer.join(remaining)
            if deadline is not None and time.monotonic() >= deadline:
                with self._lock:
                    return not any(timer.is_alive() for timer in self._pending)

    # ------------------------------------------------------------------

    def _deferred_write(self, path: Path, content: str, message: str) -> None:
        try:
            atomic_write(path, content)
        except PersistenceError:
            logger.exception("Deferred write of '%s' failed; edit discarded", path)
            return
        logger.debug("Wrote '%s'", path)
        self._schedule_snapshot(path, message)

    def _schedule_snapshot(self, path: Path, message: str) -> None:
        if not self.settings.auto_commit:
            return
        self._schedule(self.settings.commit_delay, self.snapshot, path, message)

    def _schedule(self, delay: float, func: Callable[..., Any], *args: Any) -> None:
        timer = threading.Timer(delay, func, args=args)
        timer.daemon = True
        with self._lock:
            self._pending = [pending for pending in self._pending if pending.is_alive()]
            self._pending.append(timer)
            timer.start()

    def _run_git(self, *args: str) -> None:
        subprocess.run(
            ["git", *args],
            cwd=self.repo_root,
            capture_output=True,
            text=True,
            check=True,
        )
