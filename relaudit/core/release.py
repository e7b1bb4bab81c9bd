"""Release identifiers and repository references.

A release is identified by its date, ``YYYYMMDD``. Every participating
repository must carry the branch ``release-YYYYMMDD``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .result import Err, Ok, Result

__all__ = [
    "BRANCH_PREFIX",
    "ReleaseIdError",
    "RepoNameError",
    "parse_release_branch",
    "repo_name_from_url",
]

BRANCH_PREFIX = "release-"

_DATE_RE = re.compile(r"[0-9]{8}")
_BRANCH_RE = re.compile(r"release-[0-9]{8}")


@dataclass(frozen=True, slots=True)
class ReleaseIdError:
    """The release identifier does not match an accepted form."""

    value: str
    message: str
    hint: str | None = "expected YYYYMMDD or release-YYYYMMDD"


def parse_release_branch(value: str) -> Result[str, ReleaseIdError]:
    """Normalize a release identifier to its branch name.

    ``20240131`` -> ``release-20240131``; ``release-20240131`` is returned
    unchanged. Only the shape is checked, not the calendar date.
    """
    if _DATE_RE.fullmatch(value):
        return Ok(f"{BRANCH_PREFIX}{value}")
    if _BRANCH_RE.fullmatch(value):
        return Ok(value)
    return Err(ReleaseIdError(value=value, message=f"invalid release identifier: {value!r}"))


@dataclass(frozen=True, slots=True)
class RepoNameError:
    """The clone URL does not end in a usable repository name."""

    url: str
    message: str
    hint: str | None = "the URL must end in a repository name, e.g. git@host:org/name.git"


def repo_name_from_url(url: str) -> Result[str, RepoNameError]:
    """Short repository name: last path segment without ``.git``.

    Handles both URL and scp-like forms:
        git@host:org/foo.git -> foo
        https://host/org/bar -> bar

    The name keys the clone cache, so an empty segment, ``.`` or ``..``
    is rejected.
    """
    tail = re.split(r"[/:]", url.rstrip("/"))[-1]
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    if tail in ("", ".", ".."):
        return Err(RepoNameError(url=url, message=f"no repository name in {url!r}"))
    return Ok(tail)
