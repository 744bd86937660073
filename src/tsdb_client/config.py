from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .queue import OverflowStrategy

TIME_PRECISIONS = ("s", "ms", "u")


class ClientConfig(BaseSettings):
    """
    Connection policy for a Client. Immutable once constructed.

    Values passed explicitly win over TSDB_* environment variables, which win
    over the defaults below. List values read from the environment are JSON,
    e.g. TSDB_HOSTS='["db1", "db2"]'.
    """

    database: Optional[str] = None
    hosts: list[str] = ["localhost"]
    port: int = 8086
    username: str = "root"
    password: str = "root"
    use_ssl: bool = False
    time_precision: str = "s"

    # backoff, seconds
    initial_delay: float = 0.01
    max_delay: float = 30.0

    # timeouts, seconds
    open_timeout: float = 5.0
    read_timeout: float = 300.0

    async_writes: bool = False
    retry: bool = True

    # ---- async write queue ----
    queue_capacity: int = 10_000
    queue_overflow: OverflowStrategy = "drop_oldest"
    max_post_points: int = 1000
    worker_poll_interval: float = 0.5
    drain_timeout: float = 5.0

    model_config = SettingsConfigDict(
        env_prefix="TSDB_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @field_validator("hosts", mode="before")
    @classmethod
    def _listify_hosts(cls, v):
        if isinstance(v, str):
            v = [v]
        v = [h.strip() for h in v if h and h.strip()]
        if not v:
            raise ValueError("at least one host is required")
        return v

    @field_validator("time_precision")
    @classmethod
    def _validate_precision(cls, v):
        if v not in TIME_PRECISIONS:
            raise ValueError(f"Invalid time precision: {v}. Must be one of {TIME_PRECISIONS}")
        return v

    @field_validator(
        "open_timeout",
        "read_timeout",
        "queue_capacity",
        "max_post_points",
        "worker_poll_interval",
    )
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @model_validator(mode="after")
    def _check_backoff(self):
        if not 0 < self.initial_delay <= self.max_delay:
            raise ValueError("backoff delays must satisfy 0 < initial_delay <= max_delay")
        return self


@lru_cache()
def get_settings() -> ClientConfig:
    return ClientConfig()
