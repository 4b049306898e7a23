import logging
import os
import subprocess
from typing import Callable, Dict, Iterable, Optional

import click
from opentelemetry import trace

from .config import SyncConfig
from .errors import BareRepositoryError, InconsistentStateError, NotARepositoryError, TimesyncError
from .models import VERBOSE_ONLY_STATUSES, SyncOutcome, SyncSummary
from .providers.repository import GitRepositoryProvider, RepositoryProvider
from .timestamps.setters import TimestampSetter

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ProviderFactory = Callable[[str], RepositoryProvider]


class TimestampSynchronizer:
    """
    Aligns the mtime of tracked files with the time of the last revision that
    touched them.

    **Decision procedure** (`decide_and_apply`), first match wins:
    1.  Missing on disk: `deleted` when git records the deletion, otherwise an
        inconsistent state (fatal for that path).
    2.  Not tracked: reported, left alone.
    3.  No revision in history: reported, left alone.
    4.  Already equal to the revision time: `in_sync`.
    5.  Local staged/unstaged changes: reported, never touched.
    6.  Clean and out of sync: reported in dry-run, stamped in apply mode.

    The repository is only read; the sole mutation is the timestamp of clean,
    out-of-sync files, done through the injected `TimestampSetter`.
    """

    def __init__(
        self,
        config: SyncConfig,
        setter: TimestampSetter,
        provider_factory: Optional[ProviderFactory] = None,
        echo: Callable[..., None] = click.echo,
    ):
        self.config = config
        self.setter = setter
        self.provider_factory = provider_factory or GitRepositoryProvider
        self.echo = echo
        self._providers: Dict[str, RepositoryProvider] = {}

    def _provider(self, directory: str) -> RepositoryProvider:
        if directory not in self._providers:
            self._providers[directory] = self.provider_factory(directory)
        return self._providers[directory]

    # ------------------------------------------------------------------
    #  Entry points
    # ------------------------------------------------------------------

    def synchronize(self, targets: Iterable[str] = ()) -> SyncSummary:
        """
        Processes the whole working copy (no targets) or an explicit list.

        Directory targets are recursed with their own bare-repository check and
        a failure inside one does not stop the next target. Plain paths share a
        single check against the current directory's repository.
        """
        targets = list(targets)
        summary = SyncSummary()

        with tracer.start_as_current_span("timesync.synchronize") as span:
            span.set_attribute("timesync.dry_run", self.config.dry_run)
            span.set_attribute("timesync.targets", len(targets))

            if not targets:
                self._sync_directory_into(".", summary)
                return self._finish(summary)

            need_check_bare = True
            for target in targets:
                if os.path.isdir(target) and not os.path.islink(target):
                    self.echo(f"now inside {target}")
                    self._sync_directory_into(target, summary)
                    continue

                if need_check_bare:
                    try:
                        self.ensure_not_bare(".")
                    except TimesyncError as e:
                        self.echo(str(e), err=True)
                        summary.fail(str(e))
                        continue
                    need_check_bare = False

                try:
                    self._record(summary, self.decide_and_apply(target))
                except InconsistentStateError as e:
                    summary.record(SyncOutcome(path=target, status="missing"))
                    summary.fail(str(e))

        return self._finish(summary)

    def sync_directory(self, directory: str = ".") -> SyncSummary:
        """Processes every tracked, non-deleted path under `directory`."""
        summary = SyncSummary()
        self._sync_directory_into(directory, summary)
        return self._finish(summary)

    # ------------------------------------------------------------------
    #  Internals
    # ------------------------------------------------------------------

    def ensure_not_bare(self, directory: str) -> None:
        bare = self._provider(directory).is_bare()
        if bare is True:
            raise BareRepositoryError(self._describe_dir(directory))
        if bare is None:
            raise NotARepositoryError(self._describe_dir(directory))

    def _sync_directory_into(self, directory: str, summary: SyncSummary) -> None:
        with tracer.start_as_current_span("timesync.directory") as span:
            span.set_attribute("timesync.directory", directory)
            try:
                self.ensure_not_bare(directory)
            except TimesyncError as e:
                span.record_exception(e)
                self.echo(str(e), err=True)
                summary.fail(str(e))
                return

            repo = self._provider(directory)
            for path in repo.list_tracked_files():
                if repo.is_deleted(path):
                    continue
                try:
                    self._record(summary, self.decide_and_apply(path, directory))
                except InconsistentStateError as e:
                    # Only reachable through a concurrent change of the tree
                    summary.record(SyncOutcome(path=e.path, status="missing"))
                    summary.fail(str(e), fatal=False)

    def _describe_dir(self, directory: str) -> str:
        return os.path.abspath(directory)

    def _display_path(self, path: str, directory: str) -> str:
        if directory in ("", "."):
            return path
        return os.path.join(directory, path)

    def _record(self, summary: SyncSummary, outcome: SyncOutcome) -> None:
        summary.record(outcome)
        if outcome.status == "failed":
            summary.fail(outcome.report_line(), fatal=False)

    def _finish(self, summary: SyncSummary) -> SyncSummary:
        for message in summary.tolerated_errors:
            logger.warning(message)
        logger.info(
            f"Timesync finished: {summary.counts} "
            f"({summary.mutations} stamped, {len(summary.errors)} fatal errors)"
        )
        return summary

    def _emit(self, outcome: SyncOutcome) -> SyncOutcome:
        if outcome.is_error:
            self.echo(outcome.report_line(), err=True)
        elif outcome.status not in VERBOSE_ONLY_STATUSES or self.config.verbose:
            self.echo(outcome.report_line())
        return outcome

    # ------------------------------------------------------------------
    #  Core decision procedure
    # ------------------------------------------------------------------

    def decide_and_apply(self, path: str, directory: str = ".") -> SyncOutcome:
        """
        Decides what to do with a single path and applies it.

        `path` is relative to `directory` (the repository queries run there).
        Raises `InconsistentStateError` when the path is absent from disk but
        git does not record it as deleted; every other case returns an outcome.
        """
        repo = self._provider(directory)
        fs_path = os.path.join(directory, path)
        shown = self._display_path(path, directory)

        with tracer.start_as_current_span("timesync.file") as span:
            span.set_attribute("file.path", shown)

            # lexists: a dangling symlink is still something we can stamp
            if not os.path.lexists(fs_path):
                if repo.is_deleted(path):
                    span.set_attribute("file.status", "deleted")
                    return self._emit(SyncOutcome(path=shown, status="deleted"))
                self._emit(SyncOutcome(path=shown, status="missing"))
                raise InconsistentStateError(shown)

            if not repo.is_tracked(path):
                span.set_attribute("file.status", "untracked")
                return self._emit(SyncOutcome(path=shown, status="untracked"))

            revision = repo.last_revision(path)
            timestamp = repo.revision_timestamp(revision) if revision else None
            if timestamp is None:
                span.set_attribute("file.status", "no_history")
                return self._emit(SyncOutcome(path=shown, status="no_history"))

            # Whole seconds on both sides: git stores no sub-second time, and a
            # fractional mtime within the commit second counts as in sync
            current_mtime = int(os.lstat(fs_path).st_mtime)
            outcome = SyncOutcome(path=shown, status="in_sync", revision=timestamp, current_mtime=current_mtime)

            if self.config.debug:
                self.echo(
                    f"DEBUG: {shown} (git_time={timestamp.epoch} "
                    f"current_time={current_mtime} delta={outcome.delta})",
                    err=True,
                )
            logger.debug(f"{shown}: revision={timestamp.revision} delta={outcome.delta}")

            if current_mtime == timestamp.epoch:
                outcome.status = "in_sync"
            elif repo.is_modified(path):
                outcome.status = "modified"
            elif self.config.dry_run:
                outcome.status = "desync"
            else:
                outcome.status = "synced"

            self._emit(outcome)

            if outcome.status == "synced":
                try:
                    self.setter.set_mtime(fs_path, timestamp)
                except (OSError, subprocess.CalledProcessError) as e:
                    span.record_exception(e)
                    span.set_status(trace.Status(trace.StatusCode.ERROR))
                    outcome.status = "failed"
                    outcome.error = str(e)
                    self._emit(outcome)

            span.set_attribute("file.status", outcome.status)
            span.set_attribute("file.state", outcome.state)
            return outcome
