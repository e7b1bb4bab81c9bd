"""Audit services."""

from .audit import AuditReport, AuditService, RepoOutcome, RepoState
from .errors import ProviderError
from .provider import GitProvider, RepositoryProvider

__all__ = [
    "AuditReport",
    "AuditService",
    "GitProvider",
    "ProviderError",
    "RepoOutcome",
    "RepoState",
    "RepositoryProvider",
]
