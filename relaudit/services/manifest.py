"""Repository lists from the manifest tool.

The manifest tool reads the files named by ``JR_MANIFESTS`` and answers two
queries, one item per output line:

    <tool> labels          every label defined by the manifests
    <tool> repos <label>   clone URLs of the repositories carrying <label>
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relaudit.core.config import AuditConfig
from relaudit.core.result import Err, Ok, Result
from relaudit.platform.process import run as run_process
from relaudit.services.errors import ProviderError

_MANIFEST_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class TargetGroup:
    """Repositories audited under one label."""

    label: str
    urls: tuple[str, ...]


class ManifestTool:
    def __init__(
        self,
        *,
        tool: str,
        cwd: Path,
        env: dict[str, str],
        tracer: Callable[[list[str]], None] | None = None,
    ) -> None:
        self._tool = tool
        self._cwd = cwd
        self._env = env
        self._tracer = tracer

    @classmethod
    def from_config(
        cls,
        config: AuditConfig,
        tracer: Callable[[list[str]], None] | None = None,
    ) -> ManifestTool:
        return cls(
            tool=config.manifest_tool,
            cwd=config.workspace.root,
            env=config.extra_env,
            tracer=tracer,
        )

    def list_labels(self) -> Result[list[str], ProviderError]:
        return self._query(["labels"], what="labels")

    def list_repos(self, label: str) -> Result[list[str], ProviderError]:
        return self._query(["repos", label], what=f"repositories for label '{label}'")

    def _query(self, args: list[str], *, what: str) -> Result[list[str], ProviderError]:
        cmd = [self._tool, *args]
        if self._tracer is not None:
            self._tracer(cmd)
        result = run_process(cmd, cwd=self._cwd, env=self._env, timeout=_MANIFEST_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ProviderError(
                    kind="manifest_failed",
                    message=f"{self._tool}: cannot list {what}",
                    hint=result.error.detail,
                )
            )
        return Ok(_lines(result.value))


def _lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class LabelSource(Protocol):
    """What target resolution needs from a provider."""

    def list_labels(self) -> Result[list[str], ProviderError]: ...

    def list_repos(self, label: str) -> Result[list[str], ProviderError]: ...


def resolve_targets(
    lister: LabelSource,
    *,
    targets: tuple[str, ...],
    excluded_label: str,
) -> Result[list[TargetGroup], ProviderError]:
    """Expand labels into repository URL groups.

    With no explicit targets every manifest label is used except
    ``excluded_label``. Explicit targets are used as given, even the
    excluded one.
    """
    if targets:
        labels = list(targets)
    else:
        labels_result = lister.list_labels()
        if isinstance(labels_result, Err):
            return labels_result
        labels = [label for label in labels_result.value if label != excluded_label]

    groups: list[TargetGroup] = []
    for label in dict.fromkeys(labels):
        repos_result = lister.list_repos(label)
        if isinstance(repos_result, Err):
            return repos_result
        groups.append(TargetGroup(label=label, urls=tuple(repos_result.value)))
    return Ok(groups)
