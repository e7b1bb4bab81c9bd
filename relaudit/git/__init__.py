"""Git operations used by the apply path.

Usage:
    from relaudit.git import Repository, clone

    repo = Repository(Path("/path/to/clone"))
    if repo.has_remote_branch("release-20240131"):
        ...
"""

from relaudit.git.repository import (
    GitError,
    Repository,
    Tracer,
    clone,
)

__all__ = [
    "GitError",
    "Repository",
    "Tracer",
    "clone",
]
