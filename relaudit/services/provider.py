"""Repository provider: manifest listing, refs API and git behind one seam.

``AuditService`` only talks to a ``RepositoryProvider``. ``GitProvider``
is the real implementation; tests substitute a fake.
"""

from __future__ import annotations

from typing import Protocol

from relaudit.core.config import AuditConfig
from relaudit.core.release import repo_name_from_url
from relaudit.core.result import Err, Ok, Result
from relaudit.git.repository import GitError, Repository, clone
from relaudit.output.console import ConsoleProtocol
from relaudit.platform.process import format_command
from relaudit.services.errors import ProviderError
from relaudit.services.http import HttpClient, RealHttpClient
from relaudit.services.manifest import ManifestTool
from relaudit.services.refs_api import RefsApi

__all__ = [
    "FALLBACK_DEFAULT_BRANCH",
    "GitProvider",
    "RepositoryProvider",
]

# Used when origin/HEAD is not recorded in a clone.
FALLBACK_DEFAULT_BRANCH = "master"


class RepositoryProvider(Protocol):
    def list_labels(self) -> Result[list[str], ProviderError]:
        """All labels defined by the manifests."""
        ...

    def list_repos(self, label: str) -> Result[list[str], ProviderError]:
        """Clone URLs of the repositories carrying ``label``."""
        ...

    def cached_branch_exists(self, url: str, branch: str) -> bool:
        """True if the local clone of ``url`` knows ``origin/<branch>``."""
        ...

    def remote_branches(self, repo_name: str) -> Result[list[str], ProviderError]:
        """Branch names reported by the refs API."""
        ...

    def create_branch(self, url: str, branch: str) -> Result[None, ProviderError]:
        """Create ``branch`` from the default branch tip and push it."""
        ...


def _git_failed(repo_name: str, error: GitError) -> ProviderError:
    return ProviderError(
        kind="git_failed",
        message=f"{repo_name}: git {error.command} failed",
        hint=error.message,
    )


class GitProvider:
    """Provider backed by the manifest tool, the refs API and git clones."""

    def __init__(
        self,
        *,
        config: AuditConfig,
        console: ConsoleProtocol,
        http: HttpClient | None = None,
    ) -> None:
        self._config = config
        self._console = console
        self._manifest = ManifestTool.from_config(config, tracer=self._trace_command)
        self._refs = RefsApi(
            http=http or RealHttpClient(config.credentials, timeout=config.api_timeout),
            base_url=config.api_url,
            tracer=self._trace,
        )

    def list_labels(self) -> Result[list[str], ProviderError]:
        return self._manifest.list_labels()

    def list_repos(self, label: str) -> Result[list[str], ProviderError]:
        return self._manifest.list_repos(label)

    def cached_branch_exists(self, url: str, branch: str) -> bool:
        entry = self._cache_entry(url)
        if isinstance(entry, Err):
            return False
        _name, repo = entry.value
        return repo.exists() and repo.has_remote_branch(branch)

    def remote_branches(self, repo_name: str) -> Result[list[str], ProviderError]:
        return self._refs.branches(repo_name)

    def create_branch(self, url: str, branch: str) -> Result[None, ProviderError]:
        entry = self._cache_entry(url)
        if isinstance(entry, Err):
            return entry
        name, repo = entry.value

        updated = self._ensure_clone(url, name, repo)
        if isinstance(updated, Err):
            return updated
        repo, default = updated.value

        created = repo.force_branch(branch, default)
        if isinstance(created, Err):
            return Err(_git_failed(name, created.error))
        pushed = repo.push(branch)
        if isinstance(pushed, Err):
            return Err(_git_failed(name, pushed.error))

        if repo.current_branch() != default:
            checkout = repo.checkout(default)
            if isinstance(checkout, Err):
                return Err(_git_failed(name, checkout.error))
        return Ok(None)

    def _ensure_clone(
        self, url: str, name: str, repo: Repository
    ) -> Result[tuple[Repository, str], ProviderError]:
        """Clone ``url`` into the cache, or bring an existing clone up to date.

        Either way the clone ends on its default branch, whose name is
        returned alongside the repository.
        """
        dest = repo.path
        if not dest.exists():
            cloned = clone(url, dest, tracer=self._trace_command)
            if isinstance(cloned, Err):
                return Err(_git_failed(name, cloned.error))
            repo = cloned.value
            return Ok((repo, repo.default_branch() or FALLBACK_DEFAULT_BRANCH))

        if not repo.exists():
            return Err(
                ProviderError(
                    kind="cache_invalid",
                    message=f"{name}: cache entry is not a git repository",
                    hint=f"Remove {dest} and run again",
                )
            )

        default = repo.default_branch() or FALLBACK_DEFAULT_BRANCH
        checkout = repo.checkout(default)
        if isinstance(checkout, Err):
            return Err(_git_failed(name, checkout.error))
        pull = repo.pull_rebase()
        if isinstance(pull, Err):
            return Err(_git_failed(name, pull.error))
        return Ok((repo, default))

    def _cache_entry(self, url: str) -> Result[tuple[str, Repository], ProviderError]:
        match repo_name_from_url(url):
            case Err(error):
                return Err(ProviderError(kind="invalid_url", message=error.message, hint=error.hint))
            case Ok(name):
                path = self._config.workspace.clone_path(name)
                return Ok((name, Repository(path, tracer=self._trace_command)))

    def _trace(self, message: str) -> None:
        if self._config.trace:
            self._console.trace(message)

    def _trace_command(self, cmd: list[str]) -> None:
        self._trace(format_command(cmd))
