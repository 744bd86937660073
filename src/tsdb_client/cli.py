from __future__ import annotations

import json
from typing import List, Optional

import typer
from loguru import logger

from .client import Client
from .errors import TSDBError

app = typer.Typer(help="tsdb_client operational CLI")

# ---------------------------
# Common options
# ---------------------------


def hosts_opt() -> List[str]:
    return typer.Option(["localhost"], "--host", "-H", help="Database host (repeatable)")


def port_opt() -> int:
    return typer.Option(8086, "--port", envvar="TSDB_PORT", help="HTTP API port")


def database_opt() -> Optional[str]:
    return typer.Option(None, "--database", "-d", envvar="TSDB_DATABASE", help="Database name")


def username_opt() -> str:
    return typer.Option("root", "--username", "-u", envvar="TSDB_USERNAME")


def password_opt() -> str:
    return typer.Option("root", "--password", "-p", envvar="TSDB_PASSWORD")


def precision_opt() -> str:
    return typer.Option("s", "--time-precision", help="s, ms or u")


def _client(hosts, port, database, username, password) -> Client:
    return Client(
        {
            "hosts": hosts,
            "port": port,
            "database": database,
            "username": username,
            "password": password,
            # a CLI call should fail rather than back off forever
            "retry": False,
        }
    )


def _run(fn):
    try:
        return fn()
    except TSDBError as e:
        logger.error(f"{type(e).__name__}: {e}")
        raise typer.Exit(code=1)


# ---------------------------
# Databases
# ---------------------------


@app.command("databases")
def databases(
    host: List[str] = hosts_opt(),
    port: int = port_opt(),
    username: str = username_opt(),
    password: str = password_opt(),
):
    """List databases."""
    with _client(host, port, None, username, password) as db:
        out = _run(db.get_database_list)
    typer.echo(json.dumps(out, indent=2))


@app.command("create-database")
def create_database(
    name: str = typer.Argument(...),
    host: List[str] = hosts_opt(),
    port: int = port_opt(),
    username: str = username_opt(),
    password: str = password_opt(),
):
    with _client(host, port, None, username, password) as db:
        _run(lambda: db.create_database(name))
    typer.echo("ok")


@app.command("delete-database")
def delete_database(
    name: str = typer.Argument(...),
    host: List[str] = hosts_opt(),
    port: int = port_opt(),
    username: str = username_opt(),
    password: str = password_opt(),
):
    with _client(host, port, None, username, password) as db:
        _run(lambda: db.delete_database(name))
    typer.echo("ok")


# ---------------------------
# Write / query
# ---------------------------


@app.command("write")
def write(
    series: str = typer.Argument(..., help="Series name"),
    records: List[str] = typer.Argument(..., help="One or more JSON objects"),
    use_async: bool = typer.Option(False, "--async", help="Queue the write and flush on exit"),
    time_precision: str = precision_opt(),
    host: List[str] = hosts_opt(),
    port: int = port_opt(),
    database: Optional[str] = database_opt(),
    username: str = username_opt(),
    password: str = password_opt(),
):
    """Write records to a series."""
    try:
        data = [json.loads(r) for r in records]
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"records must be JSON objects: {e}")

    with _client(host, port, database, username, password) as db:
        _run(lambda: db.write_point(series, data, async_=use_async, time_precision=time_precision))
    typer.echo("ok")


@app.command("query")
def query(
    q: str = typer.Argument(..., help="Query string"),
    time_precision: str = precision_opt(),
    host: List[str] = hosts_opt(),
    port: int = port_opt(),
    database: Optional[str] = database_opt(),
    username: str = username_opt(),
    password: str = password_opt(),
):
    """Run a query and print {series: records} as JSON."""
    with _client(host, port, database, username, password) as db:
        out = _run(lambda: db.query(q, time_precision=time_precision))
    typer.echo(json.dumps(out, indent=2, default=str))


if __name__ == "__main__":
    app()
