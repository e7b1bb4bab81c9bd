"""Tests for services/audit.py."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from relaudit.core.config import AuditConfig
from relaudit.core.errors import ErrorCode
from relaudit.core.result import Err, Ok, Result
from relaudit.core.workspace import Workspace
from relaudit.output.console import MockConsole
from relaudit.services.audit import AuditReport, AuditService, RepoOutcome, RepoState
from relaudit.services.errors import ProviderError

BRANCH = "release-20240131"


def _name(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1].removesuffix(".git")


@dataclass
class FakeProvider:
    """In-memory provider; ``remote`` maps repo name to its branches."""

    labels: dict[str, list[str]]
    remote: dict[str, list[str]] = field(default_factory=dict[str, list[str]])
    cached: set[str] = field(default_factory=set[str])
    api_errors: set[str] = field(default_factory=set[str])
    create_errors: set[str] = field(default_factory=set[str])
    created: list[tuple[str, str]] = field(default_factory=list[tuple[str, str]])
    api_calls: list[str] = field(default_factory=list[str])
    cache_checks: list[str] = field(default_factory=list[str])

    def list_labels(self) -> Result[list[str], ProviderError]:
        return Ok(list(self.labels))

    def list_repos(self, label: str) -> Result[list[str], ProviderError]:
        return Ok(self.labels.get(label, []))

    def cached_branch_exists(self, url: str, branch: str) -> bool:
        self.cache_checks.append(url)
        return url in self.cached

    def remote_branches(self, repo_name: str) -> Result[list[str], ProviderError]:
        self.api_calls.append(repo_name)
        if repo_name in self.api_errors:
            return Err(ProviderError(kind="api_failed", message=f"refs lookup failed for {repo_name}", hint="HTTP 500"))
        return Ok(self.remote.get(repo_name, ["master"]))

    def create_branch(self, url: str, branch: str) -> Result[None, ProviderError]:
        if url in self.create_errors:
            return Err(ProviderError(kind="git_failed", message=f"{_name(url)}: git push failed"))
        self.created.append((url, branch))
        self.remote.setdefault(_name(url), []).append(branch)
        return Ok(None)


def _config(tmp_path: Path, **overrides: object) -> AuditConfig:
    return AuditConfig(
        branch=BRANCH,
        workspace=Workspace(root=tmp_path),
        credentials="u:p",
        manifests=("m.yaml",),
        **overrides,  # type: ignore[arg-type]
    )


def _run(tmp_path: Path, provider: FakeProvider, **overrides: object) -> tuple[AuditReport, MockConsole]:
    console = MockConsole()
    service = AuditService(config=_config(tmp_path, **overrides), provider=provider, console=console)
    result = service.run()
    assert isinstance(result, Ok)
    return result.value, console


class TestOutcomeLines:
    def test_ok(self) -> None:
        o = RepoOutcome("git@h:o/foo.git", "core", BRANCH, RepoState.BRANCH_PRESENT)
        assert o.line() == "Repo git@h:o/foo.git ('core' target): OK"

    def test_fail(self) -> None:
        o = RepoOutcome("https://h/o/bar", "web", BRANCH, RepoState.REPORTED_FAIL)
        assert o.line() == (
            "Repo https://h/o/bar ('web' target): FAIL (no 'release-20240131' branch, use -a to apply)"
        )

    def test_applied(self) -> None:
        o = RepoOutcome("https://h/o/bar", "web", BRANCH, RepoState.BRANCHED)
        assert o.line() == "Repo https://h/o/bar ('web' target): APPLIED (created 'release-20240131' branch)"

    def test_error(self) -> None:
        err = ProviderError(kind="api_failed", message="refs lookup failed for bar")
        o = RepoOutcome("https://h/o/bar", "web", BRANCH, RepoState.ERROR, err)
        assert o.line() == "Repo https://h/o/bar ('web' target): ERROR (refs lookup failed for bar)"


class TestAuditService:
    def test_cache_hit_skips_api(self, tmp_path: Path) -> None:
        provider = FakeProvider(labels={"core": ["git@h:o/foo.git"]}, cached={"git@h:o/foo.git"})
        report, console = _run(tmp_path, provider)

        assert [o.state for o in report.outcomes] == [RepoState.BRANCH_PRESENT]
        assert provider.api_calls == []
        assert console.stdout_lines[0] == "Repo git@h:o/foo.git ('core' target): OK"

    def test_api_hit(self, tmp_path: Path) -> None:
        provider = FakeProvider(
            labels={"core": ["git@h:o/foo.git"]},
            remote={"foo": ["master", BRANCH]},
        )
        report, _ = _run(tmp_path, provider)
        assert report.outcomes[0].state == RepoState.BRANCH_PRESENT
        assert provider.api_calls == ["foo"]

    def test_branch_match_is_exact(self, tmp_path: Path) -> None:
        provider = FakeProvider(
            labels={"core": ["git@h:o/foo.git"]},
            remote={"foo": [f"{BRANCH}-hotfix", "release-2024013"]},
        )
        report, _ = _run(tmp_path, provider)
        assert report.outcomes[0].state == RepoState.REPORTED_FAIL

    def test_missing_without_apply_reports_fail(self, tmp_path: Path) -> None:
        provider = FakeProvider(labels={"web": ["https://h/o/bar"]})
        report, console = _run(tmp_path, provider)

        assert report.outcomes[0].state == RepoState.REPORTED_FAIL
        assert provider.created == []
        assert console.stdout_lines == [
            "Repo https://h/o/bar ('web' target): FAIL (no 'release-20240131' branch, use -a to apply)"
        ]
        assert report.exit_code() == ErrorCode.OK
        assert report.exit_code(strict=True) == ErrorCode.REPO_ERROR

    def test_missing_with_apply_creates_branch(self, tmp_path: Path) -> None:
        provider = FakeProvider(labels={"web": ["https://h/o/bar"]})
        report, console = _run(tmp_path, provider, apply=True)

        assert report.outcomes[0].state == RepoState.BRANCHED
        assert provider.created == [("https://h/o/bar", BRANCH)]
        assert console.stdout_lines == [
            "Repo https://h/o/bar ('web' target): APPLIED (created 'release-20240131' branch)"
        ]

    def test_apply_twice_is_idempotent(self, tmp_path: Path) -> None:
        provider = FakeProvider(labels={"web": ["https://h/o/bar"]})
        _run(tmp_path, provider, apply=True)
        report, _ = _run(tmp_path, provider, apply=True)

        assert report.outcomes[0].state == RepoState.BRANCH_PRESENT
        assert len(provider.created) == 1

    def test_errors_are_collected_and_run_continues(self, tmp_path: Path) -> None:
        provider = FakeProvider(
            labels={"core": ["git@h:o/a.git", "git@h:o/b.git", "git@h:o/c.git"]},
            remote={"c": [BRANCH]},
            api_errors={"a"},
            create_errors={"git@h:o/b.git"},
        )
        report, console = _run(tmp_path, provider, apply=True)

        assert [o.state for o in report.outcomes] == [
            RepoState.ERROR,
            RepoState.ERROR,
            RepoState.BRANCH_PRESENT,
        ]
        assert report.has_errors()
        assert report.exit_code() == ErrorCode.REPO_ERROR
        assert "hint: HTTP 500" in console.stderr_lines
        assert console.stdout_lines[1] == "Repo git@h:o/b.git ('core' target): ERROR (b: git push failed)"

    def test_url_without_name_is_error_and_untouched(self, tmp_path: Path) -> None:
        provider = FakeProvider(labels={"core": ["https://h/org/.git", "https://h/org/..", "git@h:o/a.git"]})
        report, console = _run(tmp_path, provider, apply=True)

        assert [o.state for o in report.outcomes] == [RepoState.ERROR, RepoState.ERROR, RepoState.BRANCHED]
        assert report.outcomes[0].error is not None
        assert report.outcomes[0].error.kind == "invalid_url"
        assert provider.cache_checks == ["git@h:o/a.git"]
        assert provider.api_calls == ["a"]
        assert provider.created == [("git@h:o/a.git", BRANCH)]
        assert console.stdout_lines[1] == (
            "Repo https://h/org/.. ('core' target): ERROR (no repository name in 'https://h/org/..')"
        )
        assert report.exit_code() == ErrorCode.REPO_ERROR

    def test_excluded_label_skipped_when_auditing_all(self, tmp_path: Path) -> None:
        provider = FakeProvider(
            labels={"core": ["git@h:o/a.git"], "no-release": ["git@h:o/x.git"]},
        )
        report, _ = _run(tmp_path, provider)
        assert [o.url for o in report.outcomes] == ["git@h:o/a.git"]

    def test_explicit_targets(self, tmp_path: Path) -> None:
        provider = FakeProvider(labels={"core": ["git@h:o/a.git"], "web": ["git@h:o/b.git"]})
        report, console = _run(tmp_path, provider, targets=("web",))
        assert [o.target for o in report.outcomes] == ["web"]
        assert console.stdout_lines == [
            "Repo git@h:o/b.git ('web' target): FAIL (no 'release-20240131' branch, use -a to apply)"
        ]

    def test_manifest_failure_aborts(self, tmp_path: Path) -> None:
        class BrokenProvider(FakeProvider):
            def list_labels(self) -> Result[list[str], ProviderError]:
                return Err(ProviderError(kind="manifest_failed", message="jr-manifest: cannot list labels"))

        console = MockConsole()
        service = AuditService(
            config=_config(tmp_path),
            provider=BrokenProvider(labels={}),
            console=console,
        )
        result = service.run()
        assert isinstance(result, Err)
        assert result.error.kind == "manifest_failed"
        assert console.outputs == []

    def test_summary(self, tmp_path: Path) -> None:
        provider = FakeProvider(
            labels={"core": ["git@h:o/a.git", "git@h:o/b.git"]},
            cached={"git@h:o/a.git"},
        )
        report, _ = _run(tmp_path, provider)
        assert report.summary() == "2 repositories: 1 ok, 1 missing, 0 applied, 0 errors"
