from __future__ import annotations

import typer

from relaudit.cli.commands.audit import audit

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("check-repos-for-release")(audit)


def main() -> None:
    app(prog_name="check-repos-for-release")
