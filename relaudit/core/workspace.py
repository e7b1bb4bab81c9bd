"""Workspace (tool root) and its clone cache.

The workspace is the directory the audit runs from. Repositories cloned
for the apply path are kept beneath it and reused by later runs:

    <root>/
        relaudit.toml        optional configuration
        .relaudit/repos/<name>/  one clone per repository
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "ROOT_ENV_VAR",
    "Workspace",
    "WorkspaceError",
    "resolve_workspace",
]

ROOT_ENV_VAR = "RELAUDIT_ROOT"


@dataclass(frozen=True)
class WorkspaceError:
    """Error when the workspace root is unusable."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """The directory holding configuration and the clone cache."""

    root: Path

    @property
    def config_path(self) -> Path:
        """Path to relaudit.toml."""
        return self.root / "relaudit.toml"

    @property
    def state_dir(self) -> Path:
        return self.root / ".relaudit"

    @property
    def cache_dir(self) -> Path:
        """Directory holding one clone per repository."""
        return self.state_dir / "repos"

    def clone_path(self, repo_name: str) -> Path:
        return self.cache_dir / repo_name


def resolve_workspace(
    explicit: Path | None = None,
    environ: dict[str, str] | None = None,
) -> Result[Workspace, WorkspaceError]:
    """Pick the workspace root: explicit path, then RELAUDIT_ROOT, then cwd."""
    env = os.environ if environ is None else environ

    candidate = explicit
    if candidate is None:
        env_root = env.get(ROOT_ENV_VAR, "").strip()
        candidate = Path(env_root) if env_root else Path.cwd()

    try:
        root = candidate.expanduser().resolve()
    except OSError as e:
        return Err(WorkspaceError(message=f"invalid workspace root: {e}"))

    if not root.is_dir():
        return Err(
            WorkspaceError(
                message=f"workspace root is not a directory: {root}",
                hint=f"Pass --workdir or set {ROOT_ENV_VAR}",
            )
        )

    return Ok(Workspace(root=root))
