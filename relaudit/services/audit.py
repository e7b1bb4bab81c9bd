"""Release branch audit.

For every repository of every target label the service decides one of:

    BRANCH_PRESENT  branch found in the clone cache or via the refs API
    REPORTED_FAIL   branch missing, apply not requested
    BRANCHED        branch missing, created from the default branch and pushed
    ERROR           the provider failed for this repository

Per-repository failures never stop the run; only target resolution
(the manifest tool) can abort it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from relaudit.core.config import AuditConfig
from relaudit.core.errors import ErrorCode
from relaudit.core.release import repo_name_from_url
from relaudit.core.result import Err, Ok, Result
from relaudit.output.console import ConsoleProtocol, Style
from relaudit.services.errors import ProviderError
from relaudit.services.manifest import resolve_targets
from relaudit.services.provider import RepositoryProvider


class RepoState(Enum):
    BRANCH_PRESENT = auto()
    REPORTED_FAIL = auto()
    BRANCHED = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class RepoOutcome:
    """Final state of one repository.

    Attributes:
        url: Clone URL as listed by the manifest tool
        target: Label the repository was audited under
        branch: Release branch looked for
        state: Terminal state
        error: Provider error when state is ERROR
    """

    url: str
    target: str
    branch: str
    state: RepoState
    error: ProviderError | None = None

    def line(self) -> str:
        prefix = f"Repo {self.url} ('{self.target}' target)"
        match self.state:
            case RepoState.BRANCH_PRESENT:
                return f"{prefix}: OK"
            case RepoState.REPORTED_FAIL:
                return f"{prefix}: FAIL (no '{self.branch}' branch, use -a to apply)"
            case RepoState.BRANCHED:
                return f"{prefix}: APPLIED (created '{self.branch}' branch)"
            case RepoState.ERROR:
                message = self.error.message if self.error else "unknown error"
                return f"{prefix}: ERROR ({message})"


def _empty_outcomes() -> list[RepoOutcome]:
    return []


@dataclass
class AuditReport:
    branch: str
    outcomes: list[RepoOutcome] = field(default_factory=_empty_outcomes)

    def count(self, state: RepoState) -> int:
        return sum(1 for o in self.outcomes if o.state == state)

    def has_failures(self) -> bool:
        return self.count(RepoState.REPORTED_FAIL) > 0

    def has_errors(self) -> bool:
        return self.count(RepoState.ERROR) > 0

    def exit_code(self, *, strict: bool = False) -> ErrorCode:
        if self.has_errors() or (strict and self.has_failures()):
            return ErrorCode.REPO_ERROR
        return ErrorCode.OK

    def summary(self) -> str:
        return (
            f"{len(self.outcomes)} repositories: "
            f"{self.count(RepoState.BRANCH_PRESENT)} ok, "
            f"{self.count(RepoState.REPORTED_FAIL)} missing, "
            f"{self.count(RepoState.BRANCHED)} applied, "
            f"{self.count(RepoState.ERROR)} errors"
        )


_STATE_STYLES = {
    RepoState.BRANCH_PRESENT: Style.DEFAULT,
    RepoState.REPORTED_FAIL: Style.WARNING,
    RepoState.BRANCHED: Style.SUCCESS,
    RepoState.ERROR: Style.ERROR,
}


class AuditService:
    def __init__(
        self,
        *,
        config: AuditConfig,
        provider: RepositoryProvider,
        console: ConsoleProtocol,
    ) -> None:
        self._config = config
        self._provider = provider
        self._console = console

    def run(self) -> Result[AuditReport, ProviderError]:
        """Audit every target repository, printing one line per repository."""
        groups = resolve_targets(
            self._provider,
            targets=self._config.targets,
            excluded_label=self._config.excluded_label,
        )
        if isinstance(groups, Err):
            return groups

        report = AuditReport(branch=self._config.branch)
        for group in groups.value:
            for url in group.urls:
                outcome = self.audit_repo(url, group.label)
                report.outcomes.append(outcome)
                self._console.print(outcome.line(), _STATE_STYLES[outcome.state])
                if outcome.error is not None and outcome.error.hint:
                    self._console.hint(outcome.error.hint)
        return Ok(report)

    def audit_repo(self, url: str, target: str) -> RepoOutcome:
        branch = self._config.branch

        def outcome(state: RepoState, error: ProviderError | None = None) -> RepoOutcome:
            return RepoOutcome(url=url, target=target, branch=branch, state=state, error=error)

        name = repo_name_from_url(url)
        if isinstance(name, Err):
            bad = name.error
            return outcome(
                RepoState.ERROR,
                ProviderError(kind="invalid_url", message=bad.message, hint=bad.hint),
            )

        if self._provider.cached_branch_exists(url, branch):
            return outcome(RepoState.BRANCH_PRESENT)

        match self._provider.remote_branches(name.value):
            case Err(error):
                return outcome(RepoState.ERROR, error)
            case Ok(branches):
                if branch in branches:
                    return outcome(RepoState.BRANCH_PRESENT)

        if not self._config.apply:
            return outcome(RepoState.REPORTED_FAIL)

        created = self._provider.create_branch(url, branch)
        if isinstance(created, Err):
            return outcome(RepoState.ERROR, created.error)
        return outcome(RepoState.BRANCHED)
