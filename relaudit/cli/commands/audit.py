from __future__ import annotations

from pathlib import Path

import typer

from relaudit import __version__
from relaudit.cli.commands._helpers import exit_on_error, exit_with_code
from relaudit.cli.context import build_context
from relaudit.core.errors import ErrorCode
from relaudit.services.audit import AuditService
from relaudit.services.prereqs import ensure_tools
from relaudit.services.provider import GitProvider


def audit(
    release: str | None = typer.Argument(
        None,
        metavar="RELEASE",
        help="Release id, YYYYMMDD or release-YYYYMMDD.",
        show_default=False,
    ),
    credentials: str | None = typer.Option(
        None,
        "-c",
        "--credentials",
        metavar="CREDS",
        help="API credentials (user:password). Default: $MOLYBDENUM_CREDENTIALS.",
    ),
    apply: bool = typer.Option(False, "-a", "--apply", help="Create and push missing branches."),
    target: list[str] | None = typer.Option(
        None,
        "-t",
        "--target",
        metavar="TARGET",
        help="Only audit repositories of this target label (repeatable, '*' for all).",
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit non-zero when a branch is missing."),
    workdir: Path | None = typer.Option(
        None,
        "--workdir",
        help="Tool root holding the clone cache. Default: $RELAUDIT_ROOT or cwd.",
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Check that every release repository has its release branch."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    ctx = build_context(
        release=release,
        credentials=credentials,
        targets=target or [],
        apply=apply,
        strict=strict,
        workdir=workdir,
    )
    console = ctx.console

    exit_on_error(ensure_tools(ctx.config), console)

    service = AuditService(
        config=ctx.config,
        provider=GitProvider(config=ctx.config, console=console),
        console=console,
    )
    report = exit_on_error(service.run(), console)
    console.note(report.summary())

    code = report.exit_code(strict=ctx.config.strict)
    if code.is_error:
        exit_with_code(int(code))
