"""
Inventory search service.

Empty or guard-rejected keywords return no rows without touching the
database. Database failures are raised (InfrastructureFailure), so an empty
list always means "nothing matched".
"""

from __future__ import annotations

import logging

from core.db import ConnectionProvider, ConnectionTarget
from core.guard import is_safe

from . import repository
from .schemas import InventoryRow

logger = logging.getLogger(__name__)


def _to_inventory_row(row: dict) -> InventoryRow:
    quantity = row.get("quantity")
    return InventoryRow(
        name=str(row.get("name") or ""),
        sku=str(row.get("sku") or ""),
        quantity=float(quantity) if quantity is not None else 0.0,
        description=row.get("description"),
    )


async def search(
    keyword: str,
    *,
    provider: ConnectionProvider,
    target: ConnectionTarget | None = None,
) -> list[InventoryRow]:
    keyword = (keyword or "").strip()
    if not keyword:
        return []

    if not is_safe(keyword):
        logger.warning("search_keyword_rejected keyword=%r", keyword)
        return []

    rows = await repository.find_latest_match(provider, keyword, target=target)
    logger.info("search_complete keyword=%r count=%s", keyword, len(rows))
    return [_to_inventory_row(r) for r in rows[:1]]
