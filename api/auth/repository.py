"""
Store credential persistence helpers.
"""

from __future__ import annotations

from core.db import ConnectionProvider, ConnectionTarget


async def find_store_code(
    provider: ConnectionProvider,
    *,
    store_code: str,
    password: str,
    target: ConnectionTarget | None = None,
) -> str | None:
    row = await provider.fetch_one(
        """
        SELECT "StoreCode"
        FROM "msStoreInfo"
        WHERE "StoreCode" = $1 AND "Password" = $2
        LIMIT 1
        """,
        store_code,
        password,
        target=target,
    )
    if row is None:
        return None
    return str(row["StoreCode"])
