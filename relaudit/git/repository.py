"""Git repository abstraction.

This module provides the Repository class for the single-repo operations
the apply path needs. All operations return Result types.

Usage:
    match clone(url, workspace.clone_path("framework")):
        case Ok(repo):
            repo.checkout("main")
        case Err(e):
            print(f"clone failed: {e.message}")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from relaudit.core.result import Err, Ok, Result
from relaudit.platform.process import ProcessError
from relaudit.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"clone", "fetch", "pull", "push"})

__all__ = [
    "GitError",
    "Repository",
    "Tracer",
    "clone",
]

type Tracer = Callable[[list[str]], None]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _timeout_for(args: list[str]) -> float:
    command = args[0] if args else ""
    if command in _NETWORK_COMMANDS:
        return _GIT_NETWORK_TIMEOUT_SECONDS
    return _GIT_TIMEOUT_SECONDS


def _to_git_error(command: str, error: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or f"git {command} failed",
        returncode=error.returncode,
    )


def clone(url: str, dest: Path, *, tracer: Tracer | None = None) -> Result[Repository, GitError]:
    """Clone ``url`` into ``dest`` (parent directories are created)."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    cmd = ["git", "clone", url, str(dest)]
    if tracer is not None:
        tracer(cmd)
    result = run_process(cmd, cwd=dest.parent, timeout=_GIT_NETWORK_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(_to_git_error("clone", result.error))
    return Ok(Repository(dest, tracer=tracer))


class Repository:
    """A local clone.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, *, tracer: Tracer | None = None) -> None:
        self.path = path
        self._tracer = tracer

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    def has_remote_branch(self, branch: str, remote: str = "origin") -> bool:
        """True if the clone knows ``<remote>/<branch>``.

        Only local remote-tracking refs are consulted; nothing is fetched.
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/remotes/{remote}/{branch}"])
        return isinstance(result, Ok)

    def default_branch(self, remote: str = "origin") -> str | None:
        """Branch ``<remote>/HEAD`` points at, or None if unknown."""
        result = self._run(["symbolic-ref", "--short", f"refs/remotes/{remote}/HEAD"])
        match result:
            case Ok(stdout):
                ref = stdout.strip()
                prefix = f"{remote}/"
                return ref[len(prefix) :] if ref.startswith(prefix) else (ref or None)
            case Err(_):
                return None

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def checkout(self, branch: str) -> Result[None, GitError]:
        return self._simple(["checkout", branch])

    def pull_rebase(self) -> Result[None, GitError]:
        """Update the current branch from its upstream with --rebase."""
        return self._simple(["pull", "--rebase"])

    def force_branch(self, branch: str, start_point: str) -> Result[None, GitError]:
        """Create ``branch`` at ``start_point``, resetting it if it exists.

        ``branch`` must not be the checked-out branch.
        """
        return self._simple(["branch", "--force", branch, start_point])

    def push(self, branch: str, remote: str = "origin") -> Result[None, GitError]:
        return self._simple(["push", remote, branch])

    def _simple(self, args: list[str]) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_to_git_error(args[0], result.error))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        cmd = ["git", "-C", str(self.path), *args]
        if self._tracer is not None:
            self._tracer(cmd)
        return run_process(cmd, cwd=self.path, timeout=_timeout_for(args))
