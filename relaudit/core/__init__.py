"""Core domain types and logic."""

from .config import AuditConfig, ConfigError, load_config
from .errors import ErrorCode
from .release import parse_release_branch, repo_name_from_url
from .result import Err, Ok, Result
from .workspace import Workspace, WorkspaceError, resolve_workspace

__all__ = [
    # config
    "AuditConfig",
    "ConfigError",
    "load_config",
    # errors
    "ErrorCode",
    # release
    "parse_release_branch",
    "repo_name_from_url",
    # result
    "Err",
    "Ok",
    "Result",
    # workspace
    "Workspace",
    "WorkspaceError",
    "resolve_workspace",
]
