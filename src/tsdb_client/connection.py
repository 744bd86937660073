"""
Connection manager: host rotation with exponential backoff.

Every attempt takes the head of the shared host list and moves it to the
tail, so consecutive attempts (within one call and across calls and threads)
walk the hosts round-robin. Only network-level failures are retried; there is
no attempt ceiling, the loop ends on success or once the client is stopped.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from time import monotonic
from typing import Any, Callable, Optional

import httpx
from loguru import logger

from .config import ClientConfig
from .errors import (
    AuthenticationError,
    ClientStoppedError,
    RequestError,
    map_transport_error,
)
from .metrics import REQUEST_LATENCY, REQUESTS_TOTAL, RETRIES_TOTAL
from .transport import Transport


class ConnectionManager:
    def __init__(
        self,
        config: ClientConfig,
        *,
        http_transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
        queue_depth: Optional[Callable[[], Optional[int]]] = None,
    ):
        self._cfg = config
        self._hosts = deque(config.hosts)
        self._lock = threading.Lock()
        self._stopped = False
        self._http_transport = http_transport
        self._sleep = sleep
        self._queue_depth = queue_depth

    # ---------- state ----------

    @property
    def hosts(self) -> list[str]:
        with self._lock:
            return list(self._hosts)

    @property
    def stopped(self) -> bool:
        with self._lock:
            return self._stopped

    def stop(self) -> None:
        """Irreversible. In-flight retry loops fail on their next attempt."""
        with self._lock:
            self._stopped = True

    def retry_enabled(self) -> bool:
        return self._cfg.retry and not self.stopped

    # ---------- internals ----------

    def _next_host(self) -> str:
        with self._lock:
            host = self._hosts.popleft()
            self._hosts.append(host)
            return host

    def _open(self, host: str) -> Transport:
        c = self._cfg
        return Transport(
            host,
            c.port,
            use_ssl=c.use_ssl,
            open_timeout=c.open_timeout,
            read_timeout=c.read_timeout,
            http_transport=self._http_transport,
        )

    # ---------- public ----------

    def execute(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> httpx.Response:
        delay = self._cfg.initial_delay

        while True:
            if self.stopped:
                raise ClientStoppedError("client is stopped; request not sent")

            host = self._next_host()
            t0 = monotonic()
            try:
                with self._open(host) as transport:
                    response = transport.request(method, path, params=params, json=json)
            except AuthenticationError:
                REQUESTS_TOTAL.labels(method, "auth_failure").inc()
                raise
            except RequestError:
                REQUESTS_TOTAL.labels(method, "request_error").inc()
                raise
            except httpx.TransportError as e:
                REQUESTS_TOTAL.labels(method, "transport_error").inc()
                retrying = self.retry_enabled()
                suffix = f" - retrying in {delay}s." if retrying else ""
                logger.error(f"Failed to contact host {host}: {e!r}{suffix}")
                depth = self._queue_depth() if self._queue_depth else None
                if depth is not None:
                    logger.info(f"Queue size is {depth}.")

                if not retrying:
                    self.stop()
                    raise map_transport_error(e, host) from e

                RETRIES_TOTAL.labels(host).inc()
                self._sleep(delay)
                delay = min(self._cfg.max_delay, delay * 2)
                continue
            finally:
                REQUEST_LATENCY.labels(method).observe(monotonic() - t0)

            REQUESTS_TOTAL.labels(method, "success").inc()
            return response
