"""
Inventory SQL (raw).

Case-insensitive substring match on description or SKU, newest row first,
capped at a single row.
"""

from __future__ import annotations

from typing import Any

from core.db import ConnectionProvider, ConnectionTarget


def like_pattern(keyword: str) -> str:
    return f"%{keyword}%"


async def find_latest_match(
    provider: ConnectionProvider,
    keyword: str,
    *,
    target: ConnectionTarget | None = None,
) -> list[dict[str, Any]]:
    return await provider.fetch_all(
        """
        SELECT
          "Description" AS name,
          "SKU" AS sku,
          "EndQty" AS quantity
        FROM "trStock"
        WHERE "Description" ILIKE $1
           OR "SKU" ILIKE $1
        ORDER BY "LastUpdate" DESC
        LIMIT 1
        """,
        like_pattern(keyword),
        target=target,
    )
