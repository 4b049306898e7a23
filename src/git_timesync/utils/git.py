import subprocess
from typing import List, Optional


class GitClient:
    def __init__(self, repo_path: str):
        self.repo_path = repo_path

    def _run_git_raw(self, args: List[str]) -> str:
        # Paths are file names, not patterns: "[ab].txt" must not match "a.txt"
        try:
            return subprocess.check_output(
                ["git", "--literal-pathspecs"] + args, cwd=self.repo_path, text=True, stderr=subprocess.DEVNULL
            )
        except subprocess.CalledProcessError:
            return ""

    def _run_git(self, args: List[str]) -> str:
        return self._run_git_raw(args).strip()

    def get_core_bare(self) -> str:
        return self._run_git(["config", "core.bare"])

    def ls_files(self) -> List[str]:
        # -z keeps unusual file names (newlines, quotes, non-ascii) intact
        output = self._run_git_raw(["ls-files", "-z"])
        return [entry for entry in output.split("\0") if entry]

    def ls_files_cached(self, path: str) -> str:
        return self._run_git(["ls-files", "-t", "-c", "--", path])

    def ls_files_deleted(self, path: str) -> str:
        return self._run_git(["ls-files", "-t", "-d", "--", path])

    def status_porcelain(self, path: str) -> str:
        return self._run_git(["status", "--porcelain", "--untracked-files=no", "--", path])

    def get_last_revision(self, path: str) -> Optional[str]:
        return self._run_git(["rev-list", "-n", "1", "HEAD", "--", path]) or None

    def get_author_time(self, revision: str) -> Optional[int]:
        raw = self._run_git(["show", "-s", "--format=%at", revision])
        if not raw:
            return None
        try:
            return int(raw.splitlines()[0])
        except ValueError:
            return None

    def get_author_date(self, revision: str) -> Optional[str]:
        raw = self._run_git(["show", "-s", "--format=%ai", revision])
        return raw.splitlines()[0] if raw else None
