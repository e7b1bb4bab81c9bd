from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ProviderErrorKind = Literal[
    "tool_missing",
    "manifest_failed",
    "api_failed",
    "api_invalid",
    "cache_invalid",
    "invalid_url",
    "git_failed",
]


@dataclass(frozen=True, slots=True)
class ProviderError:
    kind: ProviderErrorKind
    message: str
    hint: str | None = None
