import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

# Classification of a path at decision time
FileState = Literal["untracked", "deleted", "missing", "clean", "modified"]

# Result of a single decision
SyncStatus = Literal[
    "in_sync",
    "modified",
    "desync",
    "synced",
    "untracked",
    "deleted",
    "no_history",
    "missing",
    "failed",
]

# Statuses whose report line is only printed in verbose mode
VERBOSE_ONLY_STATUSES = {"in_sync", "untracked", "deleted"}

STATE_BY_STATUS: Dict[str, FileState] = {
    "untracked": "untracked",
    "deleted": "deleted",
    "missing": "missing",
    "modified": "modified",
    "in_sync": "clean",
    "desync": "clean",
    "synced": "clean",
    "failed": "clean",
}


@dataclass(frozen=True)
class RevisionTimestamp:
    """
    Author time of the most recent revision touching a path.

    Carries both representations git can hand out: the epoch seconds (`%at`)
    used for comparisons and by the epoch setter, and the ISO-like date
    (`%ai`) consumed by the calendar setter.
    """

    revision: str
    epoch: int
    iso: Optional[str] = None

    def as_iso(self) -> str:
        """Returns `%ai`-formatted date, deriving a UTC one when git gave none."""
        if self.iso:
            return self.iso
        moment = datetime.datetime.fromtimestamp(self.epoch, tz=datetime.timezone.utc)
        return moment.strftime("%Y-%m-%d %H:%M:%S %z")


@dataclass
class SyncOutcome:
    """
    Outcome of `decide_and_apply` for one path.

    `revision` and `current_mtime` are only populated once the decision got far
    enough to read them (i.e. not for untracked/deleted/missing paths).
    """

    path: str
    status: SyncStatus
    revision: Optional[RevisionTimestamp] = None
    current_mtime: Optional[int] = None
    error: Optional[str] = None

    @property
    def delta(self) -> Optional[int]:
        if self.revision is None or self.current_mtime is None:
            return None
        return self.current_mtime - self.revision.epoch

    @property
    def state(self) -> Optional[FileState]:
        """Classification of the path, None when history was missing."""
        return STATE_BY_STATUS.get(self.status)

    @property
    def is_error(self) -> bool:
        return self.status in ("missing", "failed")

    def report_line(self) -> str:
        """Renders the status line printed for this path."""
        if self.status == "deleted":
            return f"?  {self.path} (deleted)"
        if self.status == "missing":
            return f"ERROR: Unknown bug ?! No sych target {self.path}"
        if self.status == "failed":
            return f"ERROR: cannot set time of {self.path}: {self.error}"
        if self.status == "untracked":
            return f"?  {self.path}"
        if self.status == "no_history":
            return f"?! {self.path} (not found in git)"
        if self.status == "in_sync":
            return f"ok {self.path}"
        if self.status == "modified":
            return f"C  {self.path} (modified, not commited, {self.delta}s recent)"
        if self.status == "desync":
            return f"!! {self.path} (desync: {self.delta}s, no change)"
        return f"!! {self.path} (desync: {self.delta}s, syncing...)"


@dataclass
class SyncSummary:
    """Aggregated result of a `synchronize` run."""

    counts: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    # Errors that are reported but do not flip the process exit status
    # (a missing path found while recursing a directory argument, a failed stamp).
    tolerated_errors: List[str] = field(default_factory=list)

    def record(self, outcome: SyncOutcome) -> None:
        self.counts[outcome.status] = self.counts.get(outcome.status, 0) + 1

    def fail(self, message: str, fatal: bool = True) -> None:
        if fatal:
            self.errors.append(message)
        else:
            self.tolerated_errors.append(message)

    @property
    def mutations(self) -> int:
        return self.counts.get("synced", 0)

    @property
    def exit_code(self) -> int:
        return 1 if self.errors else 0
