from __future__ import annotations

import json
import socket
from typing import Any

from loguru import logger


class UDPClient:
    """
    Best-effort datagram sender for the UDP ingestion port.

    Each payload goes out as a single datagram. Failures are never raised and
    never retried.
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.socket.connect((host, port))

    def send(self, payload: Any) -> None:
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload)
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        try:
            self.socket.send(payload)
        except OSError as e:
            logger.debug(f"UDP send to {self.host}:{self.port} failed (ignored): {e!r}")

    def close(self) -> None:
        self.socket.close()

    def __enter__(self) -> "UDPClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
