"""HTTP client abstraction for the refs API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib with basic auth
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import base64
import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from relaudit import __version__
from relaudit.core.result import Err, Ok, Result
from relaudit.core.structured import StrDict, as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "basic_auth_header",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def basic_auth_header(credentials: str) -> str:
    """``Authorization`` value for ``user:password`` credentials."""
    token = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
    return f"Basic {token}"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations."""

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        """Fetch URL and parse the body as a JSON object."""
        ...


class RealHttpClient:
    """Authenticated JSON GET client using urllib."""

    def __init__(
        self,
        credentials: str,
        *,
        timeout: float = 30.0,
        user_agent: str = f"relaudit/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._authorization = basic_auth_header(credentials)
        self._ssl_context = ssl.create_default_context()

    def _request(self, url: str) -> Result[bytes, HttpError]:
        try:
            req = urllib.request.Request(
                url,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                    "Authorization": self._authorization,
                },
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        result = self._request(url)
        if isinstance(result, Err):
            return result

        try:
            data_obj: object = json.loads(result.value.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))

        data = as_str_dict(data_obj)
        if data is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object"))
        return Ok(data)


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_json("https://api.example.com/data", {"key": "value"})
        assert client.get_json("https://api.example.com/data") == Ok({"key": "value"})
    """

    def __init__(self) -> None:
        self._json_responses: dict[str, StrDict | HttpError] = {}
        self.calls: list[str] = []

    def set_json(self, url: str, response: StrDict | HttpError) -> None:
        self._json_responses[url] = response

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        self.calls.append(url)

        if url not in self._json_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._json_responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
