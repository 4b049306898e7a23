import os
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import RevisionTimestamp
from ..utils.git import GitClient


class RepositoryProvider(ABC):
    """
    Abstract Interface for the repository queries the synchronizer relies on.

    Decouples the decision procedure from the Version Control System. Paths are
    relative to the directory the provider is bound to.
    """

    @abstractmethod
    def is_bare(self) -> Optional[bool]:
        """True/False for a bare/non-bare repository, None when it cannot be determined."""
        pass

    @abstractmethod
    def list_tracked_files(self) -> List[str]:
        """Every path tracked under the bound directory."""
        pass

    @abstractmethod
    def last_revision(self, path: str) -> Optional[str]:
        """Most recent revision reachable from HEAD that modified `path`."""
        pass

    @abstractmethod
    def revision_timestamp(self, revision: str) -> Optional[RevisionTimestamp]:
        pass

    @abstractmethod
    def is_tracked(self, path: str) -> bool:
        pass

    @abstractmethod
    def is_deleted(self, path: str) -> bool:
        """True when the path is tracked but removed from the working tree."""
        pass

    @abstractmethod
    def is_modified(self, path: str) -> bool:
        """True when the path has staged or unstaged changes relative to HEAD."""
        pass


class GitRepositoryProvider(RepositoryProvider):
    """
    Standard Git-based Repository Provider.

    Uses a `GitClient` (CLI wrapper) bound to `directory`. Every query is a
    separate git invocation; a failing command reads as an empty answer.
    """

    def __init__(self, directory: str = "."):
        self.directory = directory
        self.git = GitClient(os.path.abspath(directory))

    def is_bare(self) -> Optional[bool]:
        value = self.git.get_core_bare()
        if value == "true":
            return True
        if value == "false":
            return False
        return None

    def list_tracked_files(self) -> List[str]:
        return self.git.ls_files()

    def last_revision(self, path: str) -> Optional[str]:
        return self.git.get_last_revision(path)

    def revision_timestamp(self, revision: str) -> Optional[RevisionTimestamp]:
        epoch = self.git.get_author_time(revision)
        if epoch is None:
            return None
        return RevisionTimestamp(revision=revision, epoch=epoch, iso=self.git.get_author_date(revision))

    def is_tracked(self, path: str) -> bool:
        return bool(self.git.ls_files_cached(path))

    def is_deleted(self, path: str) -> bool:
        return bool(self.git.ls_files_deleted(path))

    def is_modified(self, path: str) -> bool:
        # `git status` refreshes the index first, so a bare mtime change
        # (including one we made ourselves) is not reported as a modification.
        return bool(self.git.status_porcelain(path))
