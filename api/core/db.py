"""
Async database access (raw SQL) using asyncpg.

Two deployment modes, selected by DB_CONNECTION_MODE:
- pooled: one pool per process, target fixed by DATABASE_URL. FastAPI opens
  it on startup and closes it on shutdown (see `api/main.py`).
- adhoc: a fresh connection per call against the target supplied with the
  request, closed before the call returns.

Routes receive the provider through `get_provider`, never as a module global.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import abc
import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

logger = logging.getLogger(__name__)

MODE_POOLED = "pooled"
MODE_ADHOC = "adhoc"


class DatabaseConfigError(RuntimeError):
    pass


# Infrastructure failures are separable from credential rejections.
class InfrastructureFailure(RuntimeError):
    pass


class ConnectionFailure(InfrastructureFailure):
    pass


class QueryFailure(InfrastructureFailure):
    pass


_DRIVER_ERRORS = (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise DatabaseConfigError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def connection_mode() -> str:
    mode = _env_str("DB_CONNECTION_MODE", MODE_ADHOC).lower()
    if mode not in (MODE_POOLED, MODE_ADHOC):
        raise DatabaseConfigError(
            f"DB_CONNECTION_MODE must be '{MODE_POOLED}' or '{MODE_ADHOC}', got '{mode}'."
        )
    return mode


@dataclass(frozen=True)
class ConnectionTarget:
    """
    Where one store's database lives. Unset fields fall back to server config.
    """

    host: str | None = None
    database: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None


def default_target() -> ConnectionTarget:
    return ConnectionTarget(
        host=_env_str("DB_HOST", "localhost"),
        database=os.environ.get("DB_NAME", "").strip() or None,
        port=_env_int("DB_PORT", 5432),
        user=_env_str("DB_USER", "postgres"),
        password=os.environ.get("DB_PASSWORD", ""),
    )


def describe_failure(exc: BaseException) -> str:
    """
    Turn driver error text into a message a store operator can act on.
    """
    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()
    if "password authentication failed" in lowered:
        return "Database authentication failed. Check the server configuration."
    if "does not exist" in lowered:
        return "Database not found."
    if "connect" in lowered:
        return "Cannot connect to the database."
    return message


class ConnectionProvider(abc.ABC):
    mode: str

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @abc.abstractmethod
    async def _acquire(self, target: ConnectionTarget | None) -> asyncpg.Connection:
        raise NotImplementedError

    @abc.abstractmethod
    async def _release(self, conn: asyncpg.Connection) -> None:
        raise NotImplementedError

    @asynccontextmanager
    async def connection(self, target: ConnectionTarget | None = None) -> AsyncIterator[asyncpg.Connection]:
        """
        Check out a connection for one query and always give it back.
        """
        try:
            conn = await self._acquire(target)
        except _DRIVER_ERRORS as exc:
            logger.error("db_connect_failed mode=%s error=%s", self.mode, exc)
            raise ConnectionFailure(str(exc)) from exc

        try:
            yield conn
        finally:
            try:
                await self._release(conn)
            except Exception:
                # Logged only; whatever the query raised stays the reported error.
                logger.exception("db_release_failed mode=%s", self.mode)

    async def fetch_all(
        self,
        sql: str,
        *args: Any,
        target: ConnectionTarget | None = None,
    ) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.connection(target) as conn:
            try:
                rows = await conn.fetch(sql, *args)
            except _DRIVER_ERRORS as exc:
                logger.error("db_query_failed mode=%s error=%s", self.mode, exc)
                raise QueryFailure(str(exc)) from exc
        return [dict(r) for r in rows]

    async def fetch_one(
        self,
        sql: str,
        *args: Any,
        target: ConnectionTarget | None = None,
    ) -> dict[str, Any] | None:
        rows = await self.fetch_all(sql, *args, target=target)
        return rows[0] if rows else None


class PooledConnectionProvider(ConnectionProvider):
    mode = MODE_POOLED

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 30.0,
    ) -> None:
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def open(self) -> None:
        if self._pool is not None:
            return None
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
            )
        except _DRIVER_ERRORS as exc:
            raise ConnectionFailure(str(exc)) from exc
        logger.info("db_pool_opened min_size=%s max_size=%s", self.min_size, self.max_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        pool, self._pool = self._pool, None
        await pool.close()
        logger.info("db_pool_closed")

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call open() on startup.")
        return self._pool

    async def _acquire(self, target: ConnectionTarget | None) -> asyncpg.Connection:
        if target is not None:
            logger.debug("db_target_ignored mode=%s host=%s", self.mode, target.host)
        return await self.pool().acquire()

    async def _release(self, conn: asyncpg.Connection) -> None:
        await self.pool().release(conn)


class AdHocConnectionProvider(ConnectionProvider):
    mode = MODE_ADHOC

    def __init__(self, defaults: ConnectionTarget, *, connect_timeout: float = 10.0) -> None:
        self.defaults = defaults
        self.connect_timeout = connect_timeout

    def resolve(self, target: ConnectionTarget | None) -> ConnectionTarget:
        if target is None:
            return self.defaults
        return ConnectionTarget(
            host=target.host or self.defaults.host,
            database=target.database or self.defaults.database,
            port=target.port or self.defaults.port,
            user=target.user or self.defaults.user,
            password=target.password if target.password is not None else self.defaults.password,
        )

    async def _acquire(self, target: ConnectionTarget | None) -> asyncpg.Connection:
        resolved = self.resolve(target)
        return await asyncpg.connect(
            host=resolved.host,
            port=resolved.port,
            database=resolved.database,
            user=resolved.user,
            password=resolved.password,
            timeout=self.connect_timeout,
        )

    async def _release(self, conn: asyncpg.Connection) -> None:
        await conn.close()


def build_provider() -> ConnectionProvider:
    """
    Build the provider for the configured deployment mode.
    """
    if connection_mode() == MODE_POOLED:
        return PooledConnectionProvider(
            database_url(),
            min_size=_env_int("DB_POOL_MIN_SIZE", 1),
            max_size=_env_int("DB_POOL_MAX_SIZE", 5),
            command_timeout=_env_float("DB_COMMAND_TIMEOUT", 30.0),
        )
    return AdHocConnectionProvider(
        default_target(),
        connect_timeout=_env_float("DB_CONNECT_TIMEOUT", 10.0),
    )


def get_provider(request: Request) -> ConnectionProvider:
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        raise RuntimeError("Connection provider is not initialized.")
    return provider
