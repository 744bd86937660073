from __future__ import annotations

import threading
import time
from typing import Any, Callable, Mapping, Optional, Sequence, Union

import httpx
from loguru import logger

from .codec import build_series, denormalize_series
from .config import TIME_PRECISIONS, ClientConfig, get_settings
from .connection import ConnectionManager
from .errors import ClientStoppedError, QueueClosedError
from .models import SeriesPayload
from .worker import WriteWorker

Record = Mapping[str, Any]


class Client:
    """
    Client for the database's HTTP API.

    Usage:
        db = Client({"database": "metrics", "hosts": ["db1", "db2"]})
        db.write_point("cpu", {"value": 0.64, "host": "a"})
        db.write_point("cpu", [{"value": 0.5}, {"value": 0.7}], async_=True)
        db.query("select * from cpu")   # {"cpu": [{...}, ...]}
        db.close()                      # flush queued writes, then stop

    `http_transport` and `sleep` are seams for tests (httpx.MockTransport and
    a recording sleep function).
    """

    def __init__(
        self,
        config: Union[ClientConfig, Mapping[str, Any], None] = None,
        *,
        http_transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
        **overrides: Any,
    ):
        if isinstance(config, ClientConfig):
            if overrides:
                config = ClientConfig(**{**config.model_dump(), **overrides})
        else:
            config = ClientConfig(**{**(config or {}), **overrides})
        self._cfg = config

        self._worker: Optional[WriteWorker] = None
        self._worker_lock = threading.Lock()
        self._conn = ConnectionManager(
            config,
            http_transport=http_transport,
            sleep=sleep,
            queue_depth=self._queue_depth,
        )

        if config.async_writes:
            self._worker = self._new_worker()

    @classmethod
    def from_env(cls, **overrides: Any) -> "Client":
        return cls(get_settings(), **overrides)

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    @property
    def database(self) -> Optional[str]:
        return self._cfg.database

    @property
    def hosts(self) -> list[str]:
        return self._conn.hosts

    # ---------- lifecycle ----------

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def stop(self) -> None:
        """Enter the terminal stopped state. Queued async writes are abandoned."""
        self._conn.stop()
        if self._worker is not None:
            self._worker.queue.close()

    @property
    def stopped(self) -> bool:
        return self._conn.stopped

    def close(self) -> None:
        """Flush queued async writes (bounded by drain_timeout), then stop."""
        worker = self._worker
        if worker is not None and not self.stopped:
            if not worker.stop(timeout=self._cfg.drain_timeout):
                logger.warning(
                    f"Write queue not drained within {self._cfg.drain_timeout}s; "
                    f"{worker.queue.size} entries abandoned"
                )
        self.stop()

    @property
    def worker(self) -> WriteWorker:
        if self._worker is not None:
            return self._worker
        with self._worker_lock:
            # another thread may have created it while we waited
            if self._worker is None:
                self._worker = self._new_worker()
            return self._worker

    def _new_worker(self) -> WriteWorker:
        c = self._cfg
        return WriteWorker(
            self,
            capacity=c.queue_capacity,
            overflow_strategy=c.queue_overflow,
            max_post_points=c.max_post_points,
            poll_interval=c.worker_poll_interval,
        )

    def _queue_depth(self) -> Optional[int]:
        return self._worker.queue.size if self._worker is not None else None

    # ---------- internal helpers ----------

    def _params(self, **extra: Any) -> dict:
        params = {k: v for k, v in extra.items() if v is not None}
        params["u"] = self._cfg.username
        params["p"] = self._cfg.password
        return params

    def _precision(self, time_precision: Optional[str]) -> str:
        p = time_precision or self._cfg.time_precision
        if p not in TIME_PRECISIONS:
            raise ValueError(f"Invalid time precision: {p}. Must be one of {TIME_PRECISIONS}")
        return p

    def _series_path(self) -> str:
        if not self._cfg.database:
            raise ValueError("database required for series reads and writes")
        return f"/db/{self._cfg.database}/series"

    def _get(self, path: str, **params: Any) -> Any:
        response = self._conn.execute("GET", path, params=self._params(**params))
        return response.json()

    def _post(self, path: str, data: Any, **params: Any) -> httpx.Response:
        return self._conn.execute("POST", path, params=self._params(**params), json=data)

    def _delete(self, path: str) -> httpx.Response:
        return self._conn.execute("DELETE", path, params=self._params())

    # ---------- writes ----------

    def write_point(
        self,
        name: str,
        data: Union[Record, Sequence[Record]],
        async_: Optional[bool] = None,
        time_precision: Optional[str] = None,
    ) -> Optional[httpx.Response]:
        """
        Write one record or a list of records to series `name`.

        With async_ (default: the async_writes setting) the payload is queued
        and None is returned at once; delivery errors are only logged by the
        worker. Otherwise the write is synchronous and errors propagate.
        """
        precision = self._precision(time_precision)
        payload = build_series(name, data)
        if async_ is None:
            async_ = self._cfg.async_writes

        if async_:
            self._series_path()  # caller errors raise here, not in the worker
            if self.stopped:
                raise ClientStoppedError("client is stopped; write not queued")
            try:
                self.worker.push(payload, precision)
            except QueueClosedError as e:
                raise ClientStoppedError("write queue closed; write not queued") from e
            return None
        return self._write([payload], precision)

    def _write(
        self, payloads: Sequence[SeriesPayload], time_precision: Optional[str] = None
    ) -> httpx.Response:
        data = [p.model_dump() for p in payloads]
        return self._post(
            self._series_path(), data, time_precision=self._precision(time_precision)
        )

    # ---------- reads ----------

    def query(
        self,
        query: str,
        time_precision: Optional[str] = None,
        on_each: Optional[Callable[[str, list[dict]], None]] = None,
    ) -> Optional[dict[str, list[dict]]]:
        """
        Run `query`; returns {series_name: records}, later series overwriting
        earlier ones of the same name. With on_each, the callback receives
        (name, records) per series instead and None is returned.
        """
        series = self._get(
            self._series_path(), q=query, time_precision=self._precision(time_precision)
        )

        if on_each is not None:
            for s in series:
                on_each(s["name"], denormalize_series(s))
            return None

        out: dict[str, list[dict]] = {}
        for s in series:
            out[s["name"]] = denormalize_series(s)
        return out

    # ---------- databases ----------

    def create_database(self, name: str, **options: Any) -> httpx.Response:
        return self._post("/db", {**options, "name": name})

    def delete_database(self, name: str) -> httpx.Response:
        return self._delete(f"/db/{name}")

    def get_database_list(self) -> list:
        return self._get("/db")

    # ---------- cluster admins ----------

    def create_cluster_admin(self, username: str, password: str) -> httpx.Response:
        return self._post("/cluster_admins", {"name": username, "password": password})

    def update_cluster_admin(self, username: str, password: str) -> httpx.Response:
        return self._post(f"/cluster_admins/{username}", {"password": password})

    def delete_cluster_admin(self, username: str) -> httpx.Response:
        return self._delete(f"/cluster_admins/{username}")

    def get_cluster_admin_list(self) -> list:
        return self._get("/cluster_admins")

    # ---------- database users ----------

    def create_database_user(self, database: str, username: str, password: str) -> httpx.Response:
        return self._post(f"/db/{database}/users", {"name": username, "password": password})

    def update_database_user(self, database: str, username: str, **options: Any) -> httpx.Response:
        return self._post(f"/db/{database}/users/{username}", options)

    def delete_database_user(self, database: str, username: str) -> httpx.Response:
        return self._delete(f"/db/{database}/users/{username}")

    def get_database_user_list(self, database: str) -> list:
        return self._get(f"/db/{database}/users")

    def get_database_user_info(self, database: str, username: str) -> dict:
        return self._get(f"/db/{database}/users/{username}")

    def alter_database_privilege(
        self, database: str, username: str, admin: bool = True
    ) -> httpx.Response:
        return self.update_database_user(database, username, admin=admin)

    # ---------- continuous queries (cluster admin only) ----------

    def continuous_queries(self, database: str) -> list:
        return self._get(f"/db/{database}/continuous_queries")

    def create_continuous_query(self, query: str, name: str):
        return self.query(f"{query} into {name}")

    def get_continuous_query_list(self):
        return self.query("list continuous queries")

    def delete_continuous_query(self, id: Union[int, str]):
        return self.query(f"drop continuous query {id}")
