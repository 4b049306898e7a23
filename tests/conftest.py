import os
import subprocess
from typing import Dict, List, Optional, Set

import pytest

from git_timesync.models import RevisionTimestamp
from git_timesync.providers.repository import RepositoryProvider
from git_timesync.timestamps.setters import EpochTimestampSetter


class FakeRepository(RepositoryProvider):
    """In-memory repository: every answer comes from plain sets and dicts."""

    def __init__(self, directory: str = "."):
        self.directory = directory
        self.bare: Optional[bool] = False
        self.tracked: List[str] = []
        self.history: Dict[str, int] = {}
        self.deleted: Set[str] = set()
        self.modified: Set[str] = set()

    def track(self, path: str, epoch: Optional[int] = None) -> None:
        self.tracked.append(path)
        if epoch is not None:
            self.history[path] = epoch

    def is_bare(self) -> Optional[bool]:
        return self.bare

    def list_tracked_files(self) -> List[str]:
        return list(self.tracked)

    def last_revision(self, path: str) -> Optional[str]:
        return f"rev-{path}" if path in self.history else None

    def revision_timestamp(self, revision: str) -> Optional[RevisionTimestamp]:
        path = revision[len("rev-"):]
        return RevisionTimestamp(revision=revision, epoch=self.history[path])

    def is_tracked(self, path: str) -> bool:
        return path in self.tracked

    def is_deleted(self, path: str) -> bool:
        return path in self.deleted

    def is_modified(self, path: str) -> bool:
        return path in self.modified


class RecordingSetter(EpochTimestampSetter):
    """Epoch setter that remembers every path it stamped."""

    def __init__(self):
        self.calls = []

    def set_mtime(self, path, timestamp):
        self.calls.append((path, timestamp.epoch))
        super().set_mtime(path, timestamp)


class EchoRecorder:
    def __init__(self):
        self.out: List[str] = []
        self.err: List[str] = []

    def __call__(self, message: str = "", err: bool = False) -> None:
        (self.err if err else self.out).append(message)


@pytest.fixture
def fake_repo():
    return FakeRepository()


@pytest.fixture
def recording_setter():
    return RecordingSetter()


@pytest.fixture
def echo():
    return EchoRecorder()


@pytest.fixture
def create_file_helper():
    def _create(root, rel_path: str, content: str = "", mtime: Optional[int] = None):
        full_path = os.path.join(str(root), rel_path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w") as f:
            f.write(content)
        if mtime is not None:
            os.utime(full_path, (mtime, mtime))
        return full_path

    return _create


def run_git(repo, *args, epoch: Optional[int] = None):
    env = dict(os.environ)
    if epoch is not None:
        env["GIT_AUTHOR_DATE"] = f"{epoch} +0000"
        env["GIT_COMMITTER_DATE"] = f"{epoch} +0000"
    return subprocess.run(
        ["git", *args], cwd=str(repo), env=env, check=True, capture_output=True, text=True
    )


@pytest.fixture
def git_commit():
    """Stages everything given and commits it with a fixed author/committer time."""

    def _commit(repo, paths, epoch: int, message: str = "commit"):
        run_git(repo, "add", "--", *paths)
        run_git(repo, "commit", "-q", "-m", message, epoch=epoch)

    return _commit


@pytest.fixture
def temp_git_repo(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "dev@example.com")
    run_git(repo, "config", "user.name", "Dev")
    run_git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def git_run():
    return run_git
