from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest


class GitRepos:
    """Bare remotes and seed clones under a temporary directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def git(self, cwd: Path, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise RuntimeError(
                f"git {' '.join(args)} failed (code {result.returncode}): {result.stderr.strip()}"
            )
        return result.stdout.strip()

    def remote_path(self, name: str) -> Path:
        return self.root / "remotes" / f"{name}.git"

    def seed_path(self, name: str) -> Path:
        return self.root / "seeds" / name

    def create(self, name: str, *, default_branch: str = "main") -> str:
        """Create a bare remote with one commit on ``default_branch``; return its URL."""
        remote = self.remote_path(name)
        seed = self.seed_path(name)
        remote.parent.mkdir(parents=True, exist_ok=True)
        seed.mkdir(parents=True)

        self.git(self.root, "init", "--bare", "-b", default_branch, str(remote))
        self.git(seed, "init", "-b", default_branch)
        self.git(seed, "remote", "add", "origin", remote.as_uri())
        self.commit(name, "v1\n", "init")
        return remote.as_uri()

    def commit(self, name: str, content: str, message: str) -> str:
        """Commit to the seed clone, push it and return the new sha."""
        seed = self.seed_path(name)
        (seed / "hello.txt").write_text(content, encoding="utf-8")
        self.git(seed, "add", "hello.txt")
        self.git(seed, "commit", "-m", message)
        self.git(seed, "push", "origin", "HEAD")
        return self.git(seed, "rev-parse", "HEAD")

    def remote_ref(self, name: str, ref: str) -> str | None:
        result = subprocess.run(
            ["git", "--git-dir", str(self.remote_path(name)), "rev-parse", "--verify", "--quiet", ref],
            capture_output=True,
            text=True,
            check=False,
        )
        return result.stdout.strip() or None


@pytest.fixture
def gitrepos(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> GitRepos:
    if shutil.which("git") is None:
        pytest.skip("git not available")

    # Isolate git from the user's configuration
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")

    root = tmp_path / "git"
    root.mkdir()
    return GitRepos(root)
