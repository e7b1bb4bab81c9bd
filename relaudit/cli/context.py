from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from relaudit.cli.commands._helpers import exit_on_error, exit_with_code
from relaudit.core.config import AuditConfig, load_config
from relaudit.core.errors import ErrorCode
from relaudit.core.release import parse_release_branch
from relaudit.core.workspace import resolve_workspace
from relaudit.output.console import ConsoleProtocol, RichConsole

USAGE = "check-repos-for-release [-c CREDS] [-a] [-t TARGET]... [release-]YYYYMMDD"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: AuditConfig
    console: ConsoleProtocol


def build_context(
    *,
    release: str | None,
    credentials: str | None,
    targets: Sequence[str],
    apply: bool,
    strict: bool,
    workdir: Path | None,
    console: ConsoleProtocol | None = None,
) -> CLIContext:
    """Validate CLI input and build the run configuration.

    Exits with a usage error before any network or git activity when the
    release identifier, credentials or manifests are missing or invalid.
    """
    out = console or RichConsole()

    if not release:
        out.error("missing release identifier")
        out.hint(f"usage: {USAGE}")
        exit_with_code(int(ErrorCode.USER_ERROR))

    branch = exit_on_error(parse_release_branch(release), out)
    workspace = exit_on_error(resolve_workspace(workdir), out)
    config = exit_on_error(
        load_config(
            branch=branch,
            workspace=workspace,
            credentials=credentials,
            targets=targets,
            apply=apply,
            strict=strict,
        ),
        out,
    )
    return CLIContext(config=config, console=out)
