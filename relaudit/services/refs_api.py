"""Client for the repository refs endpoint.

``GET <base>/api/repos/<name>/refs`` answers with a JSON object whose
``branches`` field lists the repository's branch names.
"""

from __future__ import annotations

from collections.abc import Callable
from urllib.parse import quote

from relaudit.core.result import Err, Ok, Result
from relaudit.core.structured import as_str_list
from relaudit.services.errors import ProviderError
from relaudit.services.http import HttpClient


class RefsApi:
    def __init__(
        self,
        *,
        http: HttpClient,
        base_url: str,
        tracer: Callable[[str], None] | None = None,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._tracer = tracer

    def refs_url(self, repo_name: str) -> str:
        return f"{self._base_url}/api/repos/{quote(repo_name, safe='')}/refs"

    def branches(self, repo_name: str) -> Result[list[str], ProviderError]:
        url = self.refs_url(repo_name)
        if self._tracer is not None:
            self._tracer(f"GET {url}")

        result = self._http.get_json(url)
        if isinstance(result, Err):
            return Err(
                ProviderError(
                    kind="api_failed",
                    message=f"refs lookup failed for {repo_name}",
                    hint=str(result.error),
                )
            )

        branches = as_str_list(result.value.get("branches"))
        if branches is None:
            return Err(
                ProviderError(
                    kind="api_invalid",
                    message=f"refs response for {repo_name} has no 'branches' list",
                    hint=url,
                )
            )
        return Ok(branches)
