from .config import SyncConfig
from .errors import (
    BareRepositoryError,
    InconsistentStateError,
    NotARepositoryError,
    TimesyncError,
    UnsupportedPlatformError,
)
from .models import RevisionTimestamp, SyncOutcome, SyncSummary
from .providers.repository import GitRepositoryProvider, RepositoryProvider
from .synchronizer import TimestampSynchronizer
from .timestamps import CalendarTimestampSetter, EpochTimestampSetter, TimestampSetter, select_timestamp_setter

__all__ = [
    "TimestampSynchronizer",
    "SyncConfig",
    "RepositoryProvider", "GitRepositoryProvider",
    "TimestampSetter", "EpochTimestampSetter", "CalendarTimestampSetter", "select_timestamp_setter",
    "RevisionTimestamp", "SyncOutcome", "SyncSummary",
    "TimesyncError", "BareRepositoryError", "NotARepositoryError",
    "InconsistentStateError", "UnsupportedPlatformError",
]
