"""
Time-series database HTTP client

Writes and queries series over the database's HTTP API, rotating across
several hosts with exponential backoff on network failures. Writes can be
synchronous or queued for a background worker.

Usage:
    from tsdb_client import Client

    db = Client({"database": "metrics", "hosts": ["db1", "db2"]})
    db.write_point("cpu", {"value": 0.64, "host": "a"})
    db.write_point("cpu", {"value": 0.71, "host": "b"}, async_=True)
    series = db.query("select value from cpu")
    db.close()
"""

from .client import Client
from .config import ClientConfig, get_settings
from .codec import PointValue, build_series, dedupe_columns, denormalize_series
from .errors import (
    TSDBError,
    AuthenticationError,
    RequestError,
    TransportError,
    ClientStoppedError,
    QueueFullError,
    QueueClosedError,
)
from .models import SeriesPayload
from .udp import UDPClient

__version__ = "1.0.0"
__all__ = [
    "Client",
    "ClientConfig",
    "get_settings",
    "PointValue",
    "build_series",
    "dedupe_columns",
    "denormalize_series",
    "SeriesPayload",
    "UDPClient",
    "TSDBError",
    "AuthenticationError",
    "RequestError",
    "TransportError",
    "ClientStoppedError",
    "QueueFullError",
    "QueueClosedError",
]
