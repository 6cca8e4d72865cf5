"""Low-level HTTP fetcher wrapping httpx.

Every call is bounded by a fixed timeout and never raises: the outcome is a
``FetchSuccess`` carrying the raw body, or a ``FetchFailure`` carrying the
transport error. There are no retries.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

import httpx

from atmosphere._logging import log_fetch_call
from atmosphere.exceptions import (
    AtmosphereAPIError,
    AtmosphereConnectionError,
    AtmosphereTimeoutError,
    EmptyResponseError,
    SchemaMismatchError,
    TransportError,
)
from atmosphere.settings import AtmosphereSettings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; AtmosphereBot/1.0; +http://example.com/bot)"
DEFAULT_ACCEPT = "application/json, text/html, application/xml"

HeaderItems = Union[Mapping[str, str], Sequence[tuple[str, str]]]


@dataclass(frozen=True)
class FetchSuccess:
    url: str
    content: bytes


@dataclass(frozen=True)
class FetchFailure:
    url: str
    error: TransportError


FetchResult = Union[FetchSuccess, FetchFailure]


def merge_headers(
    defaults: Sequence[tuple[str, str]], extra: HeaderItems | None,
) -> list[tuple[str, str]]:
    """Append caller headers after the defaults; duplicate names are kept."""
    merged = list(defaults)
    if extra is None:
        return merged
    items = extra.items() if isinstance(extra, Mapping) else extra
    merged.extend((str(name), str(value)) for name, value in items)
    return merged


def decode_json(content: bytes) -> Any:
    """Parse a JSON body, treating unparseable content as a schema mismatch."""
    try:
        return json.loads(content)
    except ValueError as exc:
        raise SchemaMismatchError(f"Response is not valid JSON: {exc}") from exc


def _check_response(response: httpx.Response) -> bytes:
    """Validate response status and body, returning the raw content."""
    if not response.is_success:
        raise AtmosphereAPIError(
            status_code=response.status_code,
            message=response.text,
        )
    if not response.content.strip():
        raise EmptyResponseError(f"Empty response body from {response.url}")
    return response.content


class Fetcher:
    """Synchronous timeout-bounded GET using httpx.Client.

    Usage:
        with Fetcher() as fetcher:
            result = fetcher.fetch("https://example.org/data.json")
            if isinstance(result, FetchSuccess):
                ...
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        accept: str = DEFAULT_ACCEPT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._default_headers = [("User-Agent", user_agent), ("Accept", accept)]
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: AtmosphereSettings) -> Fetcher:
        return cls(
            timeout=settings.http_timeout,
            user_agent=settings.user_agent,
            accept=settings.accept,
        )

    def __enter__(self) -> Fetcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @log_fetch_call
    def fetch(
        self,
        url: str,
        headers: HeaderItems | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> FetchResult:
        """GET ``url`` and return the body, or a failure describing what went wrong."""
        try:
            content = self._get(url, headers, params)
        except TransportError as exc:
            logger.warning("Fetch failed for %s: %s", url, exc)
            return FetchFailure(url=url, error=exc)
        return FetchSuccess(url=url, content=content)

    def _get(
        self,
        url: str,
        headers: HeaderItems | None,
        params: Mapping[str, Any] | None,
    ) -> bytes:
        try:
            response = self._client.get(
                url,
                headers=merge_headers(self._default_headers, headers),
                params=params,
            )
        except httpx.TimeoutException as exc:
            raise AtmosphereTimeoutError(str(exc)) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise AtmosphereConnectionError(str(exc)) from exc
        return _check_response(response)

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()
