import datetime
import logging
import os
import subprocess
from abc import ABC, abstractmethod

from opentelemetry import trace

from ..config import CALENDAR_PLATFORMS, EPOCH_PLATFORMS
from ..errors import UnsupportedPlatformError
from ..models import RevisionTimestamp

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

GIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"
TOUCH_STAMP_FORMAT = "%Y%m%d%H%M.%S"


class TimestampSetter(ABC):
    """
    Strategy for stamping a path with a revision's time.

    Implementations must leave the same UTC instant on disk; they only differ
    in which platform facility they go through. Symbolic links are always
    stamped themselves, never their target.
    """

    name = "abstract"

    @abstractmethod
    def set_mtime(self, path: str, timestamp: RevisionTimestamp) -> None:
        pass


class EpochTimestampSetter(TimestampSetter):
    """Sets access and modification time straight from epoch seconds (Linux)."""

    name = "epoch"

    def set_mtime(self, path: str, timestamp: RevisionTimestamp) -> None:
        with tracer.start_as_current_span("timesync.touch") as span:
            span.set_attribute("touch.strategy", self.name)
            span.set_attribute("touch.path", path)
            times = (timestamp.epoch, timestamp.epoch)
            if os.path.islink(path):
                os.utime(path, times, follow_symlinks=False)
            else:
                os.utime(path, times)


def format_touch_stamp(git_date: str) -> str:
    """
    Converts a `%ai` git date into the local-time `[[CC]YY]MMDDhhmm[.SS]` form
    expected by `touch -t`.

    `touch -t` interprets its argument in the local timezone, so the instant is
    first moved to local time; the offset carried by git is what keeps the
    result on the same UTC instant.
    """
    moment = datetime.datetime.strptime(git_date, GIT_DATE_FORMAT)
    return moment.astimezone().strftime(TOUCH_STAMP_FORMAT)


class CalendarTimestampSetter(TimestampSetter):
    """
    Goes through `touch -t` with a calendar stamp (Darwin, FreeBSD).

    Used where `touch` cannot take an epoch value directly.
    """

    name = "calendar"

    def __init__(self, touch_binary: str = "touch"):
        self.touch_binary = touch_binary

    def build_command(self, path: str, timestamp: RevisionTimestamp) -> list:
        cmd = [self.touch_binary]
        if os.path.islink(path):
            cmd.append("-h")
        cmd += ["-t", format_touch_stamp(timestamp.as_iso()), "--", path]
        return cmd

    def set_mtime(self, path: str, timestamp: RevisionTimestamp) -> None:
        cmd = self.build_command(path, timestamp)
        with tracer.start_as_current_span("timesync.touch") as span:
            span.set_attribute("touch.strategy", self.name)
            span.set_attribute("touch.path", path)
            try:
                subprocess.run(cmd, check=True, capture_output=True)
            except subprocess.CalledProcessError as e:
                error_msg = e.stderr.decode() if e.stderr else str(e)
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR))
                logger.error(f"touch failed for {path}: {error_msg}")
                raise e


def select_timestamp_setter(os_name: str) -> TimestampSetter:
    """Picks the strategy for `os_name` once, at startup."""
    if os_name in EPOCH_PLATFORMS:
        return EpochTimestampSetter()
    if os_name in CALENDAR_PLATFORMS:
        return CalendarTimestampSetter()
    raise UnsupportedPlatformError(os_name)
