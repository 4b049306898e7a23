class TimesyncError(Exception):
    """Base class for fatal conditions that abort a unit of work."""


class BareRepositoryError(TimesyncError):
    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(f"{directory}: Cannot run this script on a bare Repository")


class NotARepositoryError(TimesyncError):
    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(
            f"{directory}: Error appended during core.bare detection. Are you really inside a repository ?"
        )


class InconsistentStateError(TimesyncError):
    """A path is absent from disk without git recording it as deleted."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"ERROR: Unknown bug ?! No sych target {path}")


class UnsupportedPlatformError(TimesyncError):
    def __init__(self, os_name: str):
        self.os_name = os_name
        super().__init__("Unknown Operating System to perform timestamp update")
