from __future__ import annotations

from typing import Any, Optional

import httpx

from .errors import AuthenticationError, RequestError


class Transport:
    """
    One HTTP attempt against one host.

    Owns its httpx.Client for the duration of a `with` block; nothing is pooled
    or reused across attempts.

    Usage:
        with Transport("db1", 8086) as t:
            response = t.request("GET", "/db", params={"u": "root", "p": "root"})
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        use_ssl: bool = False,
        open_timeout: float = 5.0,
        read_timeout: float = 300.0,
        http_transport: Optional[httpx.BaseTransport] = None,
    ):
        self.host = host
        scheme = "https" if use_ssl else "http"
        self.base_url = f"{scheme}://{host}:{port}"
        self._timeout = httpx.Timeout(read_timeout, connect=open_timeout)
        self._http_transport = http_transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "Transport":
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=self._http_transport,
        )
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._client is not None:
            self._client.close()
            self._client = None

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("Transport must be used as context manager")
        response = self._client.request(method, path, params=params, json=json)
        return check_response(response)


def check_response(response: httpx.Response) -> httpx.Response:
    """Return the response on 2xx; raise the matching error otherwise."""
    if response.is_success:
        return response
    if response.status_code == 401:
        raise AuthenticationError(response.text)
    raise RequestError(response.text, status_code=response.status_code)
