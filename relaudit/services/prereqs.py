from __future__ import annotations

import shutil
from collections.abc import Callable

from relaudit.core.config import AuditConfig
from relaudit.core.result import Err, Ok, Result
from relaudit.services.errors import ProviderError

_INSTALL_HINTS = {
    "git": "Install git: https://git-scm.com/downloads",
}


def ensure_tools(
    config: AuditConfig,
    which: Callable[[str], str | None] = shutil.which,
) -> Result[None, ProviderError]:
    """Check that git and the manifest tool are on PATH."""
    for tool in ("git", config.manifest_tool):
        if which(tool) is None:
            return Err(
                ProviderError(
                    kind="tool_missing",
                    message=f"{tool}: missing",
                    hint=_INSTALL_HINTS.get(tool, f"Put '{tool}' on PATH"),
                )
            )
    return Ok(None)
