"""
Pytest configuration for the SKU checker API.

Provides:
- in-memory fakes for asyncpg connections and the connection provider
- a credential table fake that answers the store login query
- Postgres fixtures for integration tests (skipped without TEST_DATABASE_URL)
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest

from core.db import ConnectionProvider, ConnectionTarget

Responder = Callable[[str, tuple[Any, ...]], list[dict[str, Any]]]


class FakeConnection:
    def __init__(
        self,
        responder: Responder | None = None,
        *,
        error: BaseException | None = None,
        close_error: BaseException | None = None,
    ) -> None:
        self._responder = responder or (lambda sql, args: [])
        self._error = error
        self._close_error = close_error
        self.queries: list[tuple[str, tuple[Any, ...]]] = []
        self.closed = False

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self.queries.append((sql, args))
        if self._error is not None:
            raise self._error
        return self._responder(sql, args)

    async def close(self) -> None:
        self.closed = True
        if self._close_error is not None:
            raise self._close_error


class FakeProvider(ConnectionProvider):
    mode = "fake"

    def __init__(
        self,
        responder: Responder | None = None,
        *,
        connect_error: BaseException | None = None,
        query_error: BaseException | None = None,
    ) -> None:
        self.conn = FakeConnection(responder, error=query_error)
        self._connect_error = connect_error
        self.targets: list[ConnectionTarget | None] = []
        self.released = 0

    async def _acquire(self, target: ConnectionTarget | None) -> FakeConnection:
        self.targets.append(target)
        if self._connect_error is not None:
            raise self._connect_error
        return self.conn

    async def _release(self, conn: FakeConnection) -> None:
        self.released += 1

    @property
    def queries(self) -> list[tuple[str, tuple[Any, ...]]]:
        return self.conn.queries


def credential_table(records: dict[str, str]) -> Responder:
    """
    Answer the store login query from a {store_code: stored_password} map.
    """

    def respond(sql: str, args: tuple[Any, ...]) -> list[dict[str, Any]]:
        assert '"msStoreInfo"' in sql
        store_code, password = args
        if records.get(store_code) == password:
            return [{"StoreCode": store_code}]
        return []

    return respond


@pytest.fixture
def fake_provider_factory() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture(scope="session")
def test_database_url() -> str:
    url = os.getenv("TEST_DATABASE_URL", "").strip()
    if not url:
        pytest.skip("TEST_DATABASE_URL not set; skipping Postgres integration tests")
    return url


@pytest.fixture
def credential_table_factory() -> Callable[[dict[str, str]], Responder]:
    return credential_table
