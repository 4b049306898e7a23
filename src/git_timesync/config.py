import os
import platform
from dataclasses import dataclass, field

# ==============================================================================
#  RUNTIME CONFIGURATION & DEFAULTS
# ==============================================================================

"""
Defines the run configuration of the timestamp synchronizer.

The CLI fills it from its flags, which fall back to the GIT_TIMESYNC_FORCE,
GIT_TIMESYNC_VERBOSE and GIT_TIMESYNC_DEBUG variables (a `.env` file in the
current directory is loaded first).
"""

# Platforms whose `touch` accepts an arbitrary epoch instant
EPOCH_PLATFORMS = {"Linux"}
# Platforms that need a calendar stamp for `touch -t`
CALENDAR_PLATFORMS = {"Darwin", "FreeBSD"}


def resolve_os_name() -> str:
    """The `OS` environment variable overrides platform detection."""
    return os.getenv("OS") or platform.system()


@dataclass(frozen=True)
class SyncConfig:
    """
    Immutable configuration handed to the synchronizer at construction.

    The tool is dry-run unless `force` is requested, and an explicit dry-run
    request always wins over `force`.
    """

    force: bool = False
    dry_run_flag: bool = False
    verbose: bool = True
    debug: bool = False
    os_name: str = field(default_factory=resolve_os_name)

    @property
    def dry_run(self) -> bool:
        return self.dry_run_flag or not self.force
