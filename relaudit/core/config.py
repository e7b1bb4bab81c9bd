"""Run configuration.

All settings for one audit run are collected into a frozen ``AuditConfig``
and passed explicitly to each stage. Sources, highest precedence first:
CLI options, environment variables, ``relaudit.toml``, built-in defaults.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_number, get_str, get_table
from .workspace import Workspace

__all__ = [
    "ALL_TARGETS",
    "AuditConfig",
    "ConfigError",
    "CREDENTIALS_ENV_VAR",
    "DEFAULT_API_URL",
    "DEFAULT_EXCLUDED_LABEL",
    "DEFAULT_MANIFEST_TOOL",
    "FileSettings",
    "MANIFESTS_ENV_VAR",
    "TRACE_ENV_VAR",
    "URL_ENV_VAR",
    "load_config",
    "load_file_settings",
]

CREDENTIALS_ENV_VAR = "MOLYBDENUM_CREDENTIALS"
MANIFESTS_ENV_VAR = "JR_MANIFESTS"
TRACE_ENV_VAR = "TRACE"
URL_ENV_VAR = "MOLYBDENUM_URL"

ALL_TARGETS = "*"
DEFAULT_API_URL = "https://molybdenum"
DEFAULT_API_TIMEOUT = 30.0
DEFAULT_MANIFEST_TOOL = "jr-manifest"
# Label whose repositories never take part in a release.
DEFAULT_EXCLUDED_LABEL = "no-release"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the run cannot be configured."""

    kind: Literal["invalid_file", "credentials_missing", "manifests_missing"]
    message: str
    hint: str | None = None


_TABLE_KEYS = ("api", "manifest")
_STRING_KEYS = {"api": ("url",), "manifest": ("tool", "excluded_label")}


def _invalid_file(path: Path, message: str) -> ConfigError:
    return ConfigError(
        kind="invalid_file",
        message=f"{path}: {message}",
        hint=f"Fix or remove {path}",
    )


@dataclass(frozen=True, slots=True)
class FileSettings:
    """Settings read from relaudit.toml."""

    api_url: str | None = None
    api_timeout: float | None = None
    manifest_tool: str | None = None
    excluded_label: str | None = None

    @classmethod
    def from_dict(
        cls, data: Mapping[str, object], *, source: Path
    ) -> Result[FileSettings, ConfigError]:
        """Validate the ``[api]`` and ``[manifest]`` tables.

        Absent tables and keys keep their defaults; present ones must have
        the documented type.
        """
        tables: dict[str, StrDict] = {}
        for name in _TABLE_KEYS:
            if name not in data:
                tables[name] = {}
                continue
            table = get_table(data, name)
            if table is None:
                return Err(_invalid_file(source, f"[{name}] must be a table"))
            tables[name] = table

        for name, keys in _STRING_KEYS.items():
            for key in keys:
                if key in tables[name] and not isinstance(tables[name][key], str):
                    return Err(_invalid_file(source, f"[{name}] {key} must be a string"))

        api, manifest = tables["api"], tables["manifest"]
        timeout = get_number(api, "timeout")
        if "timeout" in api and (timeout is None or timeout <= 0):
            return Err(_invalid_file(source, "[api] timeout must be a positive number"))

        return Ok(
            cls(
                api_url=get_str(api, "url"),
                api_timeout=timeout,
                manifest_tool=get_str(manifest, "tool"),
                excluded_label=get_str(manifest, "excluded_label"),
            )
        )


@dataclass(frozen=True, slots=True)
class AuditConfig:
    """Immutable configuration for one audit run.

    Attributes:
        branch: Release branch name (``release-YYYYMMDD``).
        workspace: Tool root holding the clone cache.
        credentials: ``user:password`` for the refs API.
        manifests: Manifest files handed to the manifest tool.
        targets: Labels to audit; empty means every label.
        apply: Create and push missing branches.
        strict: Treat FAIL lines as a failed run.
        trace: Echo every external command and request.
    """

    branch: str
    workspace: Workspace
    credentials: str
    manifests: tuple[str, ...]
    targets: tuple[str, ...] = ()
    apply: bool = False
    strict: bool = False
    trace: bool = False
    api_url: str = DEFAULT_API_URL
    api_timeout: float = DEFAULT_API_TIMEOUT
    manifest_tool: str = DEFAULT_MANIFEST_TOOL
    excluded_label: str = DEFAULT_EXCLUDED_LABEL
    extra_env: dict[str, str] = field(default_factory=dict[str, str])

    @property
    def all_targets(self) -> bool:
        return not self.targets


def load_file_settings(path: Path) -> Result[FileSettings, ConfigError]:
    """Load relaudit.toml; a missing file yields default settings."""
    if not path.exists():
        return Ok(FileSettings())

    try:
        data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        return Err(ConfigError(kind="invalid_file", message=f"cannot read {path}: {e}"))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(_invalid_file(path, "root must be a table"))
    return FileSettings.from_dict(data, source=path)


def _normalize_targets(targets: Sequence[str]) -> tuple[str, ...]:
    seen: list[str] = []
    for raw in targets:
        label = raw.strip()
        if label == ALL_TARGETS:
            return ()
        if label and label not in seen:
            seen.append(label)
    return tuple(seen)


def _split_manifests(value: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())


def load_config(
    *,
    branch: str,
    workspace: Workspace,
    credentials: str | None = None,
    targets: Sequence[str] = (),
    apply: bool = False,
    strict: bool = False,
    environ: Mapping[str, str] | None = None,
) -> Result[AuditConfig, ConfigError]:
    """Build the run configuration from CLI values, environment and file."""
    env = os.environ if environ is None else environ

    file_result = load_file_settings(workspace.config_path)
    if isinstance(file_result, Err):
        return file_result
    settings = file_result.value

    creds = (credentials or "").strip() or env.get(CREDENTIALS_ENV_VAR, "").strip()
    if not creds:
        return Err(
            ConfigError(
                kind="credentials_missing",
                message="no API credentials",
                hint=f"Pass -c USER:PASSWORD or set {CREDENTIALS_ENV_VAR}",
            )
        )

    manifests = _split_manifests(env.get(MANIFESTS_ENV_VAR, ""))
    if not manifests:
        return Err(
            ConfigError(
                kind="manifests_missing",
                message=f"{MANIFESTS_ENV_VAR} is not set",
                hint=f"Set {MANIFESTS_ENV_VAR} to a comma-separated list of manifest files",
            )
        )

    api_url = env.get(URL_ENV_VAR, "").strip() or settings.api_url or DEFAULT_API_URL

    return Ok(
        AuditConfig(
            branch=branch,
            workspace=workspace,
            credentials=creds,
            manifests=manifests,
            targets=_normalize_targets(targets),
            apply=apply,
            strict=strict,
            trace=bool(env.get(TRACE_ENV_VAR, "").strip()),
            api_url=api_url.rstrip("/"),
            api_timeout=settings.api_timeout or DEFAULT_API_TIMEOUT,
            manifest_tool=settings.manifest_tool or DEFAULT_MANIFEST_TOOL,
            excluded_label=settings.excluded_label or DEFAULT_EXCLUDED_LABEL,
            extra_env={MANIFESTS_ENV_VAR: ",".join(manifests)},
        )
    )
